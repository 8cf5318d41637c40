"""Common literal values used across blog_pages.

These constants keep delimiters, filenames and marker syntax centralized so
the loader, resolver, publisher and tests import the same values without
drifting. Intended for internal use within the blog_pages package.

Examples
--------
>>> from blog_pages import _constants
>>> _constants.HEADER_DELIMITER
'---'
>>> _constants.MANIFEST_FILENAME.endswith("-manifest.json")
True
"""

HEADER_DELIMITER = "---"
MANIFEST_FILENAME = ".blog-pages-manifest.json"
DEFAULT_LAYOUT = "post"
SOURCE_PATTERNS = ("*.md", "*.markdown")
