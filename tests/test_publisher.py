"""Unit tests for destination paths and the all-or-nothing publisher."""

from __future__ import annotations

import json
import typing as typ
from pathlib import PurePosixPath

import pytest

from blog_pages._constants import MANIFEST_FILENAME
from blog_pages.errors import WriteConflictError
from blog_pages.loader import parse_document
from blog_pages.models import RenderedPage
from blog_pages.publisher import Publisher, destination_path, find_conflicts

if typ.TYPE_CHECKING:
    from pathlib import Path


def _page(identifier: str, header: str = "category: blog\n") -> RenderedPage:
    doc = parse_document(f"---\ntitle: T\n{header}---\nbody\n", identifier)
    return RenderedPage(doc, f"<p>{identifier}</p>", destination_path(doc))


@pytest.mark.parametrize(
    ("identifier", "header", "expected"),
    [
        ("2020-01-20-zero.md", "category: blog\n", "blog/2020-01-20-zero"),
        ("archive/2020-01-20-zero.md", "category: blog\n", "blog/2020-01-20-zero"),
        ("about.md", "category: blog\n", "blog/about"),
        ("2020-01-20-zero.md", "category: Deep Dives\n", "deep-dives/2020-01-20-zero"),
        ("2020-01-20-zero.md", "category: [perf, cpu]\n", "perf/cpu/2020-01-20-zero"),
        (
            "2020-01-20-zero.md",
            "category: blog\ndate: 2021-05-06\nslug: Branch Prediction\n",
            "blog/2021-05-06-branch-prediction",
        ),
    ],
)
def test_destination_path_is_deterministic(
    identifier: str, header: str, expected: str
) -> None:
    """Destination derives from category, date and slug only."""
    assert str(_page(identifier, header).destination) == expected


def test_find_conflicts_reports_every_claimant() -> None:
    pages = [
        _page("2020-01-20-zero.md"),
        _page("archive/2020-01-20-zero.md"),
        _page("2020-02-01-other.md"),
    ]
    conflicts = find_conflicts(pages)
    assert conflicts == {
        PurePosixPath("blog/2020-01-20-zero"): [
            "2020-01-20-zero.md",
            "archive/2020-01-20-zero.md",
        ]
    }


def test_conflict_aborts_before_any_write(tmp_path: Path) -> None:
    """A single collision means zero files are written for the batch."""
    output = tmp_path / "public"
    pages = [
        _page("2020-02-01-first.md"),
        _page("2020-01-20-zero.md"),
        _page("archive/2020-01-20-zero.md"),
    ]
    with pytest.raises(WriteConflictError) as excinfo:
        Publisher(output).publish(pages)
    assert PurePosixPath("blog/2020-01-20-zero") in excinfo.value.conflicts
    assert not output.exists(), "nothing may be written when destinations collide"


def test_publish_writes_pages_and_manifest(tmp_path: Path) -> None:
    output = tmp_path / "public"
    pages = [_page("2020-01-20-zero.md"), _page("about.md")]

    written = Publisher(output).publish(pages)

    assert written == [
        output / "blog" / "2020-01-20-zero.html",
        output / "blog" / "about.html",
    ]
    assert written[0].read_text(encoding="utf-8") == "<p>2020-01-20-zero.md</p>"
    manifest = json.loads((output / MANIFEST_FILENAME).read_text(encoding="utf-8"))
    assert manifest == {
        "pages": {
            "blog/2020-01-20-zero": "2020-01-20-zero.md",
            "blog/about": "about.md",
        }
    }


def test_dry_run_reports_targets_without_writing(tmp_path: Path) -> None:
    output = tmp_path / "public"
    written = Publisher(output, extension="").publish(
        [_page("2020-01-20-zero.md")], dry_run=True
    )
    assert written == [output / "blog" / "2020-01-20-zero"]
    assert not output.exists()


def test_page_inside_another_page_file_is_a_conflict(tmp_path: Path) -> None:
    """Without an extension a page file may not double as a category folder."""
    output = tmp_path / "public"
    outer = _page("a.md")
    inner = _page("x.md", header="category: blog/a\n")

    with pytest.raises(WriteConflictError) as excinfo:
        Publisher(output, extension="").publish([outer, inner])

    assert excinfo.value.conflicts == {PurePosixPath("blog/a"): ["a.md", "x.md"]}
    assert not output.exists(), "nothing may be written when destinations collide"


def test_nested_destinations_are_fine_with_an_extension() -> None:
    pages = [_page("a.md"), _page("x.md", header="category: blog/a\n")]
    assert find_conflicts(pages, extension=".html") == {}
