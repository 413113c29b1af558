"""Tests for modelsite.scanner."""

from __future__ import annotations

from pathlib import Path

from modelsite.scanner import compile_filter, list_source_files, matches_filter, read_source


def test_list_source_files_is_sorted_and_recursive(tmp_path: Path) -> None:
    for relative in ("b/model.cto", "a/z.cto", "a/nested/y.cto", "a/readme.md", ".git/x.cto"):
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("namespace x\n", encoding="utf-8")

    files = [path.relative_to(tmp_path).as_posix() for path in list_source_files(tmp_path)]

    assert files == ["a/z.cto", "a/nested/y.cto", "b/model.cto"]


def test_filters_use_regex_search_and_tolerate_invalid_patterns() -> None:
    path = Path("/repo/src/org/accordproject/party@0.2.0.cto")

    assert matches_filter(path, compile_filter(None))
    assert matches_filter(path, compile_filter("accordproject"))
    assert matches_filter(path, compile_filter(r"party@0\.2"))
    assert not matches_filter(path, compile_filter("^party"))
    assert matches_filter(Path("/repo/src/odd[name.cto"), compile_filter("odd[name"))


def test_read_source_records_relative_dir(tmp_path: Path) -> None:
    source_root = tmp_path / "src"
    nested = source_root / "org" / "acme" / "acme@1.0.0.cto"
    nested.parent.mkdir(parents=True)
    nested.write_text("namespace org.acme\n", encoding="utf-8")
    top = source_root / "top.cto"
    top.write_text("namespace top\n", encoding="utf-8")

    source = read_source(nested, source_root)

    assert source.text == "namespace org.acme\n"
    assert source.relative_dir == "/org/acme"
    assert source.base_name == "acme@1.0.0"
    assert read_source(top, source_root).relative_dir == ""
