"""Select the toolchain version a model file asks for."""

from __future__ import annotations

import re
from typing import Optional

import semantic_version

from .toolchains import ToolchainBinding, ToolchainRegistry

_DECLARATION_PATTERN = re.compile(r'^concerto version "(?P<range>[^\r\n]*)"\r?$', re.MULTILINE)
_COMMENT_PATTERN = re.compile(
    r"^//[^\r\n]*requires:[^\r\n]*concerto-core:(?P<range>[^\r\n]*?)\r?$", re.MULTILINE
)


def extract_version_range(model_text: str) -> Optional[str]:
    """Return the toolchain version range declared in ``model_text``, if any.

    A ``concerto version "<range>"`` declaration takes precedence over a
    ``// requires: concerto-core:<range>`` comment. Whitespace inside the range
    is removed.
    """
    match = _DECLARATION_PATTERN.search(model_text) or _COMMENT_PATTERN.search(model_text)
    if match is None:
        return None
    return "".join(match.group("range").split())


def find_compatible_version(registry: ToolchainRegistry, model_text: str) -> ToolchainBinding:
    """Return the first registered toolchain satisfying the model's range, else the default."""
    version_range = extract_version_range(model_text)
    if not version_range:
        return registry.default
    try:
        spec = semantic_version.NpmSpec(version_range)
    except ValueError:
        return registry.default

    for version, binding in registry.items():
        try:
            candidate = semantic_version.Version(version)
        except ValueError:
            continue
        if spec.match(candidate):
            return binding
    return registry.default


__all__ = ["extract_version_range", "find_compatible_version"]
