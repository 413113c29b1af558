"""Registry of installed toolchain versions and plugin discovery."""

from __future__ import annotations

import importlib
from importlib import metadata
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

import semantic_version

from ..config import SiteConfig
from ..logging import get_logger
from .base import LineThresholds, Toolchain, ToolchainBinding, ToolchainLine

ENTRY_POINT_GROUP = "modelsite.toolchains"

logger = get_logger("toolchains")


class RegistryError(RuntimeError):
    """Raised when the toolchain registry cannot be assembled."""


class ToolchainRegistry:
    """Insertion-ordered mapping of version identifier to binding, with a default."""

    def __init__(self, bindings: Iterable[ToolchainBinding], default_version: str | None = None) -> None:
        self._bindings: Dict[str, ToolchainBinding] = {}
        for binding in bindings:
            if binding.version in self._bindings:
                raise RegistryError(f"Toolchain version {binding.version} registered twice")
            self._bindings[binding.version] = binding
        if not self._bindings:
            raise RegistryError("No toolchain versions are registered")

        if default_version is None:
            default_version = max(self._bindings, key=semantic_version.Version)
        if default_version not in self._bindings:
            raise RegistryError(
                f"Default toolchain version {default_version} is not registered "
                f"(available: {', '.join(self._bindings)})"
            )
        self._default_version = default_version

    @classmethod
    def from_toolchains(
        cls,
        toolchains: Mapping[str, Toolchain],
        default_version: str | None = None,
        *,
        thresholds: LineThresholds | None = None,
    ) -> "ToolchainRegistry":
        """Build a registry from ``version -> toolchain`` pairs, classifying each line."""
        bindings = []
        for version, toolchain in toolchains.items():
            try:
                line = ToolchainLine.for_version(version, thresholds)
            except ValueError as exc:
                raise RegistryError(f"Invalid toolchain version '{version}': {exc}") from exc
            bindings.append(ToolchainBinding(version=version, toolchain=toolchain, line=line))
        return cls(bindings, default_version)

    @property
    def default(self) -> ToolchainBinding:
        return self._bindings[self._default_version]

    @property
    def versions(self) -> List[str]:
        return list(self._bindings)

    def get(self, version: str) -> Optional[ToolchainBinding]:
        return self._bindings.get(version)

    def items(self) -> Iterator[Tuple[str, ToolchainBinding]]:
        return iter(list(self._bindings.items()))

    def __len__(self) -> int:
        return len(self._bindings)

    def __contains__(self, version: object) -> bool:
        return version in self._bindings


def load_registry(config: SiteConfig) -> ToolchainRegistry:
    """Assemble the registry from configured plugin targets and installed entry points.

    Configured targets keep their configuration order; entry points follow in
    ascending version order.
    """
    toolchains: Dict[str, Toolchain] = {}

    for version, target in config.toolchains.plugins.items():
        toolchains[version] = _coerce_toolchain(version, _load_target(target))

    discovered: List[Tuple[str, Toolchain]] = []
    for entry in _iter_entry_points():
        if entry.name in toolchains:
            continue
        try:
            loaded = entry.load()
        except Exception as exc:
            raise RegistryError(f"Failed to load toolchain entry point '{entry.name}': {exc}") from exc
        discovered.append((entry.name, _coerce_toolchain(entry.name, loaded)))

    for version, toolchain in sorted(discovered, key=lambda item: _version_key(item[0])):
        toolchains[version] = toolchain

    thresholds = LineThresholds(
        bootstrap_range=config.toolchains.bootstrap_range,
        strict_max=config.toolchains.strict_max,
    )
    registry = ToolchainRegistry.from_toolchains(
        toolchains, config.toolchains.default, thresholds=thresholds
    )
    logger.debug(
        "Loaded toolchains %s (default %s)", ", ".join(registry.versions), registry.default.version
    )
    return registry


def _load_target(target: str) -> object:
    module_name, _, attribute = target.partition(":")
    if not module_name:
        raise RegistryError(f"Toolchain target '{target}' must look like 'module:attribute'")
    try:
        loaded: object = importlib.import_module(module_name)
    except ImportError as exc:
        raise RegistryError(f"Cannot import toolchain module '{module_name}': {exc}") from exc
    for part in filter(None, attribute.split(".")):
        try:
            loaded = getattr(loaded, part)
        except AttributeError as exc:
            raise RegistryError(f"Toolchain target '{target}' has no attribute '{part}'") from exc
    return loaded


def _coerce_toolchain(version: str, obj: object) -> Toolchain:
    if not isinstance(obj, type) and isinstance(obj, Toolchain):
        return obj
    if callable(obj):
        instance = obj()
        if isinstance(instance, Toolchain):
            return instance
    raise RegistryError(
        f"Toolchain plugin for {version} must be a toolchain object or a factory returning one"
    )


def _version_key(version: str) -> Tuple[int, object]:
    try:
        return (0, semantic_version.Version(version))
    except ValueError:
        return (1, version)


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points(group=ENTRY_POINT_GROUP)


__all__ = ["ENTRY_POINT_GROUP", "RegistryError", "ToolchainRegistry", "load_registry"]
