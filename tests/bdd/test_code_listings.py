"""Behaviour tests for indented fenced code listings.

These pytest-bdd scenarios prove that fenced listings nested inside list items
render with syntax highlighting when articles are published through
``PublishPipeline``. The feature file ``code_listings.feature`` drives the
scenario so C++ snippets keep their ``codehilite`` metadata and display the
expected language label.

Usage
-----
Run ``pytest tests/bdd/test_code_listings.py -v`` after installing the test
extras. No external services are required.
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

import pytest
from bs4 import BeautifulSoup
from pytest_bdd import given, parsers, scenarios, then, when

from blog_pages.config import SiteConfig
from blog_pages.pipeline import PublishPipeline

FEATURE_FILE = Path(__file__).resolve().parents[2] / "features" / "code_listings.feature"
scenarios(FEATURE_FILE)


@pytest.fixture
def scenario_state(tmp_path: Path) -> dict[str, object]:
    """Return a mutable dict used to share scenario state across BDD steps."""
    source = tmp_path / "_posts"
    source.mkdir()
    return {"config": SiteConfig(source_dir=source, output_dir=tmp_path / "public")}


@given("an article with an indented C++ listing inside a list")
def given_indented_listing(scenario_state: dict[str, object]) -> None:
    """Write an article whose listing is indented under a bullet."""
    config = typ.cast("SiteConfig", scenario_state["config"])
    (config.source_dir / "2020-01-20-zero.md").write_text(
        "---\ntitle: Zero\ncategory: blog\ntags: [perf]\n---\n"
        "- **Branch hints** help the compiler lay out hot paths:\n\n"
        "  ```cpp,ignore\n"
        "  if (__builtin_expect(x, 0)) { slow(); }\n"
        "  ```\n",
        encoding="utf-8",
    )


@when("I publish the batch")
def when_publish(scenario_state: dict[str, object]) -> None:
    config = typ.cast("SiteConfig", scenario_state["config"])
    scenario_state["report"] = PublishPipeline(config).run()


@then(
    parsers.parse(
        'the page "{page}" has a highlighted "{language}" listing containing "{snippet}"'
    )
)
def then_highlighted(
    page: str, language: str, snippet: str, scenario_state: dict[str, object]
) -> None:
    """Verify the rendered HTML includes the highlighted listing."""
    config = typ.cast("SiteConfig", scenario_state["config"])
    html = (config.output_dir / page).read_text(encoding="utf-8")
    soup = BeautifulSoup(html, "html.parser")
    blocks = soup.select("div.codehilite")
    assert any(snippet in block.get_text() for block in blocks), (
        f"expected a highlighted block containing {snippet!r}"
    )
    assert any(block.get("data-language") == language for block in blocks), (
        f"expected a codehilite block with data-language={language!r}"
    )
