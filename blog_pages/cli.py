"""Cyclopts CLI entrypoint for publishing Markdown articles as HTML pages.

The ``pages`` console script defined here loads the site configuration, runs
the publishing pipeline, and prints the written paths followed by a summary
of any documents that were skipped. ``pages check`` validates headers,
includes and footnotes without rendering or writing anything.

Examples
--------
Publish every article described by the default configuration:

>>> from blog_pages.cli import main
>>> main()  # doctest: +SKIP

Publish into a scratch directory without touching the configured output:

>>> from blog_pages.cli import app
>>> app(["publish", "--output-dir", "dist"])  # doctest: +SKIP
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .config import load_site_config
from .errors import WriteConflictError
from .pipeline import PublishPipeline

if typ.TYPE_CHECKING:
    from .models import BatchReport

DEFAULT_CONFIG = Path("config/blog.yaml")

app = App(name="pages", config=cyclopts.config.Env("INPUT_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:
            return str(path)
    return str(path)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _print_problems(report: BatchReport) -> None:
    """Print warnings and per-document failures collected during a run."""
    for warning in report.warnings:
        print(f"warning: {warning}")
    for failure in report.failures:
        print(f"failed: {failure}")


def _print_summary(report: BatchReport) -> None:
    _print_problems(report)
    verb = "would write" if report.dry_run else "wrote"
    print(
        f"{verb} {len(report.written)} page(s), "
        f"{len(report.failures)} document(s) failed"
    )


def _print_check_summary(report: BatchReport) -> None:
    _print_problems(report)
    print(
        f"checked {report.checked} document(s), "
        f"{len(report.failures)} document(s) failed"
    )


@app.command(help="Render Markdown articles and write them as HTML pages.")
def publish(
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to site config", env_var="INPUT_CONFIG")
    ] = DEFAULT_CONFIG,
    source_dir: typ.Annotated[
        Path | None,
        Parameter(help="Override the article source folder", env_var="INPUT_SOURCE_DIR"),
    ] = None,
    output_dir: typ.Annotated[
        Path | None,
        Parameter(help="Override the output folder", env_var="INPUT_OUTPUT_DIR"),
    ] = None,
    dry_run: typ.Annotated[
        bool, Parameter(help="Report target paths without writing")
    ] = False,
    verbose: typ.Annotated[bool, Parameter(help="Enable debug logging")] = False,
) -> None:
    """Publish every article described by the site configuration.

    Parameters
    ----------
    config : Path, optional
        Path to the ``blog.yaml`` configuration file (overridable via
        ``INPUT_CONFIG``).
    source_dir : Path or None, optional
        Override the configured article directory.
    output_dir : Path or None, optional
        Override the configured output directory.
    dry_run : bool, optional
        Print the paths that would be written without writing them.
    verbose : bool, optional
        Emit debug logging.

    Raises
    ------
    SystemExit
        With status 1 when any document failed or destination paths collide.
    """
    _configure_logging(verbose)
    site_config = load_site_config(config)
    if source_dir is not None:
        site_config = dc.replace(site_config, source_dir=source_dir)
    if output_dir is not None:
        site_config = dc.replace(site_config, output_dir=output_dir)

    try:
        report = PublishPipeline(site_config).run(dry_run=dry_run)
    except WriteConflictError as exc:
        print(f"error: {exc}")
        print("no pages were written")
        raise SystemExit(1) from exc

    prefix = "would write" if dry_run else "wrote"
    for path in report.written:
        print(f"{prefix} {_format_path(path)}")
    _print_summary(report)
    if not report.ok:
        raise SystemExit(1)


@app.command(help="Validate headers, includes and footnotes without writing.")
def check(
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to site config", env_var="INPUT_CONFIG")
    ] = DEFAULT_CONFIG,
    verbose: typ.Annotated[bool, Parameter(help="Enable debug logging")] = False,
) -> None:
    """Load and resolve every article, reporting problems in one pass.

    Raises
    ------
    SystemExit
        With status 1 when any document failed to load or resolve.
    """
    _configure_logging(verbose)
    site_config = load_site_config(config)
    report = PublishPipeline(site_config).check()
    _print_check_summary(report)
    if not report.ok:
        raise SystemExit(1)


def main() -> None:
    """Invoke the Cyclopts application that powers the `pages` console command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
