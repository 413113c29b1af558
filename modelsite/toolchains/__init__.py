"""Toolchain contracts, version lines and the registry of installed versions."""

from .base import (
    FileWriter,
    LineThresholds,
    ModelFile,
    ModelManager,
    Toolchain,
    ToolchainBinding,
    ToolchainLine,
    Visitor,
)
from .registry import ENTRY_POINT_GROUP, RegistryError, ToolchainRegistry, load_registry

__all__ = [
    "ENTRY_POINT_GROUP",
    "FileWriter",
    "LineThresholds",
    "ModelFile",
    "ModelManager",
    "RegistryError",
    "Toolchain",
    "ToolchainBinding",
    "ToolchainLine",
    "ToolchainRegistry",
    "Visitor",
    "load_registry",
]
