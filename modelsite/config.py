"""Configuration loading for modelsite (.modelsite.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

CONFIG_FILENAME = ".modelsite.yml"

DEFAULT_SERVER_ROOT = "https://models.accordproject.org"
DEFAULT_PLANTUML_SERVER = "https://www.plantuml.com/plantuml"
DEFAULT_STATIC_ASSETS = ("assets", "styles.css", "fonts.css", "_headers", "_redirects")
DEFAULT_BOOTSTRAP_MODEL = "cicero/base.cto"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ToolchainConfig:
    """Toolchain registry settings.

    ``bootstrap_range`` selects the toolchain line that needs the system model
    pre-loaded; versions at or below ``strict_max`` compile in strict mode.
    """

    default: Optional[str] = None
    bootstrap_range: str = "0.82.x"
    strict_max: str = "3.0.0"
    plugins: Dict[str, str] = field(default_factory=dict)


@dataclass
class GeneratorConfig:
    """Code generator enablement."""

    enabled: List[str] = field(default_factory=list)


@dataclass
class SiteConfig:
    """Represents the settings defined in .modelsite.yml plus environment overrides."""

    root: Path
    source_dir: Path = Path("src")
    build_dir: Path = Path("build")
    views_dir: Optional[Path] = None
    static_assets: List[str] = field(default_factory=lambda: list(DEFAULT_STATIC_ASSETS))
    server_root: str = DEFAULT_SERVER_ROOT
    force_publish: bool = False
    plantuml_server: str = DEFAULT_PLANTUML_SERVER
    bootstrap_model: Optional[Path] = None
    toolchains: ToolchainConfig = field(default_factory=ToolchainConfig)
    generators: GeneratorConfig = field(default_factory=GeneratorConfig)

    def __post_init__(self) -> None:
        self.source_dir = _under_root(self.root, self.source_dir)
        self.build_dir = _under_root(self.root, self.build_dir)
        if self.views_dir is None:
            self.views_dir = self.root / "views"
        else:
            self.views_dir = _under_root(self.root, self.views_dir)
        if self.bootstrap_model is None:
            self.bootstrap_model = self.source_dir / DEFAULT_BOOTSTRAP_MODEL
        else:
            self.bootstrap_model = _under_root(self.root, self.bootstrap_model)


def load_config(config_path: Path, *, environ: Mapping[str, str] | None = None) -> SiteConfig:
    """Load configuration from disk and apply environment overrides."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return apply_environment(SiteConfig(root=root), environ)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    toolchain_data = _as_dict(data.get("toolchains"))
    toolchains = ToolchainConfig()
    if toolchain_data:
        toolchains.default = _as_str(toolchain_data.get("default"))
        toolchains.bootstrap_range = (
            _as_str(toolchain_data.get("bootstrap_range")) or toolchains.bootstrap_range
        )
        toolchains.strict_max = _as_str(toolchain_data.get("strict_max")) or toolchains.strict_max
        plugins = toolchain_data.get("plugins")
        if plugins is not None and not isinstance(plugins, dict):
            raise ConfigError("toolchains.plugins must map versions to 'module:attribute' targets")
        toolchains.plugins = {
            str(version): str(target) for version, target in (plugins or {}).items()
        }

    generator_data = _as_dict(data.get("generators"))
    generators = GeneratorConfig()
    if generator_data:
        generators.enabled = _as_str_list(generator_data.get("enabled"))

    static_assets = (
        _as_str_list(data.get("static_assets"))
        if "static_assets" in data
        else list(DEFAULT_STATIC_ASSETS)
    )

    config = SiteConfig(
        root=root,
        source_dir=Path(_as_str(data.get("source_dir")) or "src"),
        build_dir=Path(_as_str(data.get("build_dir")) or "build"),
        views_dir=_as_path(data.get("views_dir")),
        static_assets=static_assets,
        server_root=_as_str(data.get("server_root")) or DEFAULT_SERVER_ROOT,
        force_publish=_as_bool(data.get("force_publish")) or False,
        plantuml_server=_as_str(data.get("plantuml_server")) or DEFAULT_PLANTUML_SERVER,
        bootstrap_model=_as_path(data.get("bootstrap_model")),
        toolchains=toolchains,
        generators=generators,
    )
    return apply_environment(config, environ)


def apply_environment(config: SiteConfig, environ: Mapping[str, str] | None = None) -> SiteConfig:
    """Return ``config`` with ``SERVER_ROOT`` and ``FORCE_PUBLISH`` overrides applied."""
    env = os.environ if environ is None else environ
    server_root = env.get("SERVER_ROOT")
    force_publish = env.get("FORCE_PUBLISH")
    overrides: Dict[str, Any] = {}
    if server_root:
        overrides["server_root"] = server_root
    if force_publish:
        overrides["force_publish"] = True
    if not overrides:
        return config
    return replace(config, **overrides)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _under_root(root: Path, value: Path) -> Path:
    return value if value.is_absolute() else root / value


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_path(value: Any) -> Optional[Path]:
    text = _as_str(value)
    return Path(text) if text else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "GeneratorConfig",
    "SiteConfig",
    "ToolchainConfig",
    "apply_environment",
    "load_config",
]
