from __future__ import annotations

import logging
import textwrap
from pathlib import Path
from typing import Iterator, Mapping

import pytest

from modelsite.config import SiteConfig


@pytest.fixture(autouse=True)
def _reset_modelsite_logger() -> Iterator[None]:
    """Undo CLI logging configuration so caplog keeps seeing records."""
    yield
    logger = logging.getLogger("modelsite")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def site_root(tmp_path: Path) -> Path:
    root = tmp_path / "site"
    (root / "src").mkdir(parents=True)
    return root


@pytest.fixture
def write_models(site_root: Path):
    """Write `relative path -> model text` entries below the source tree."""

    def _write(models: Mapping[str, str]) -> None:
        for relative, content in models.items():
            path = site_root / "src" / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")

    return _write


@pytest.fixture
def site_config(site_root: Path) -> SiteConfig:
    return SiteConfig(root=site_root, static_assets=[])
