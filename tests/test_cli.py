"""Tests for the ``pages`` command-line interface."""

from __future__ import annotations

import typing as typ
from textwrap import dedent

import pytest

from blog_pages import cli

if typ.TYPE_CHECKING:
    from pathlib import Path

    from pytest_mock import MockerFixture

ZERO_ARTICLE = (
    '---\ntitle: "Zero"\ncategory: blog\ntags: [perf]\n---\n'
    "Zero-cost abstractions[^a].\n\n[^a]: note text\n"
)


def _site(tmp_path: Path) -> Path:
    (tmp_path / "_posts").mkdir()
    config_path = tmp_path / "blog.yaml"
    config_path.write_text(
        dedent(
            """
            source_dir: _posts
            output_dir: public
            """
        ).lstrip(),
        encoding="utf-8",
    )
    return config_path


def test_publish_prints_written_paths(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    config_path = _site(tmp_path)
    (tmp_path / "_posts" / "2020-01-20-zero.md").write_text(ZERO_ARTICLE, encoding="utf-8")

    cli.publish(config=config_path)

    out = capsys.readouterr().out
    assert "wrote " in out
    assert "2020-01-20-zero.html" in out
    assert "wrote 1 page(s), 0 document(s) failed" in out
    assert (tmp_path / "public" / "blog" / "2020-01-20-zero.html").exists()


def test_publish_exits_non_zero_when_a_document_fails(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    config_path = _site(tmp_path)
    posts = tmp_path / "_posts"
    (posts / "2020-01-20-zero.md").write_text(ZERO_ARTICLE, encoding="utf-8")
    (posts / "2020-02-01-bad.md").write_text(
        "---\ntitle: Bad\ncategory: blog\n---\nx[^missing]\n", encoding="utf-8"
    )

    with pytest.raises(SystemExit) as excinfo:
        cli.publish(config=config_path)

    assert excinfo.value.code == 1
    out = capsys.readouterr().out
    assert "failed: [resolve] 2020-02-01-bad.md" in out
    assert (tmp_path / "public" / "blog" / "2020-01-20-zero.html").exists(), (
        "valid documents are still published"
    )


def test_publish_reports_conflicts_and_writes_nothing(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    config_path = _site(tmp_path)
    posts = tmp_path / "_posts"
    (posts / "archive").mkdir()
    (posts / "2020-01-20-zero.md").write_text(ZERO_ARTICLE, encoding="utf-8")
    (posts / "archive" / "2020-01-20-zero.md").write_text(ZERO_ARTICLE, encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        cli.publish(config=config_path)

    assert excinfo.value.code == 1
    out = capsys.readouterr().out
    assert "blog/2020-01-20-zero" in out
    assert "no pages were written" in out
    assert not (tmp_path / "public").exists()


def test_publish_output_dir_override_and_dry_run(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    config_path = _site(tmp_path)
    (tmp_path / "_posts" / "2020-01-20-zero.md").write_text(ZERO_ARTICLE, encoding="utf-8")

    cli.publish(config=config_path, output_dir=tmp_path / "dist", dry_run=True)

    out = capsys.readouterr().out
    assert "would write" in out
    assert "dist" in out
    assert not (tmp_path / "dist").exists()


def test_check_reports_failures(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    config_path = _site(tmp_path)
    (tmp_path / "_posts" / "broken.md").write_text("no header\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        cli.check(config=config_path)

    assert excinfo.value.code == 1
    assert "failed: [load] broken.md" in capsys.readouterr().out


def test_check_never_publishes(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
    mocker: MockerFixture,
) -> None:
    """``pages check`` resolves documents without touching the publisher."""
    config_path = _site(tmp_path)
    (tmp_path / "_posts" / "2020-01-20-zero.md").write_text(ZERO_ARTICLE, encoding="utf-8")
    publish = mocker.patch("blog_pages.pipeline.Publisher.publish")

    cli.check(config=config_path)

    publish.assert_not_called()
    assert "checked 1 document(s), 0 document(s) failed" in capsys.readouterr().out
    assert not (tmp_path / "public").exists()
