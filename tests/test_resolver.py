"""Tests for modelsite.resolver."""

from __future__ import annotations

from modelsite.resolver import extract_version_range, find_compatible_version
from tests._fixtures.toolchain import FakeToolchain, make_registry


def _registry(*versions: str, default: str | None = None):
    return make_registry({version: FakeToolchain(version) for version in versions}, default)


def test_declaration_selects_first_satisfying_version_in_registry_order() -> None:
    registry = _registry("1.0.0", "1.5.0", "2.0.0", default="2.0.0")
    text = 'concerto version "^1.0.0"\nnamespace org.acme\n'

    binding = find_compatible_version(registry, text)

    assert binding.version == "1.0.0"


def test_registry_order_wins_over_version_order() -> None:
    registry = _registry("1.5.0", "1.0.0", "3.0.0", default="3.0.0")
    text = 'concerto version "^1.0.0"\nnamespace org.acme\n'

    assert find_compatible_version(registry, text).version == "1.5.0"


def test_comment_directive_is_used_without_declaration() -> None:
    registry = _registry("0.82.11", "1.0.0", default="1.0.0")
    text = "// requires: concerto-core:0.82\nnamespace org.acme\n"

    assert find_compatible_version(registry, text).version == "0.82.11"


def test_declaration_takes_precedence_over_comment() -> None:
    registry = _registry("0.82.11", "1.0.0", "3.0.0", default="3.0.0")
    text = (
        "// requires: concerto-core:0.82\n"
        'concerto version "^1.0.0"\n'
        "namespace org.acme\n"
    )

    assert find_compatible_version(registry, text).version == "1.0.0"


def test_missing_directive_returns_default() -> None:
    registry = _registry("2.0.0", "3.0.0", default="3.0.0")

    binding = find_compatible_version(registry, "namespace org.acme\n")

    assert binding is registry.default
    assert binding.version == "3.0.0"


def test_unsatisfiable_range_falls_back_to_default() -> None:
    registry = _registry("1.0.0", "2.0.0", default="2.0.0")
    text = 'concerto version "^9.0.0"\nnamespace org.acme\n'

    assert find_compatible_version(registry, text).version == "2.0.0"


def test_malformed_range_falls_back_to_default() -> None:
    registry = _registry("1.0.0", "2.0.0", default="1.0.0")
    text = 'concerto version "latest-and-greatest!"\nnamespace org.acme\n'

    assert find_compatible_version(registry, text).version == "1.0.0"


def test_resolution_is_deterministic() -> None:
    registry = _registry("1.0.0", "1.5.0", default="1.5.0")
    text = 'concerto version ">=1.0.0"\n'

    first = find_compatible_version(registry, text)
    second = find_compatible_version(registry, text)

    assert first is second


def test_extract_version_range_strips_whitespace() -> None:
    assert extract_version_range('concerto version ">= 1.5.0"\n') == ">=1.5.0"
    assert extract_version_range("// requires: concerto-core: ^0.82.0 \r\n") == "^0.82.0"


def test_extract_version_range_requires_whole_line_declaration() -> None:
    assert extract_version_range('  concerto version "^1.0.0"\n') is None
    assert extract_version_range("namespace org.acme\n") is None


def test_whitespace_in_declared_range_is_ignored_when_matching() -> None:
    registry = _registry("1.0.0", "1.5.0", default="1.0.0")
    text = 'concerto version ">= 1.5.0"\n'

    assert find_compatible_version(registry, text).version == "1.5.0"
