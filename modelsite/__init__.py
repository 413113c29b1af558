"""Batch builder for a Concerto model repository site."""

from .config import SiteConfig, load_config
from .models import BuildResult, FileOutcome, FileStatus, GeneratorSpec, IndexEntry
from .orchestrator import Orchestrator

__version__ = "0.1.0"

__all__ = [
    "BuildResult",
    "FileOutcome",
    "FileStatus",
    "GeneratorSpec",
    "IndexEntry",
    "Orchestrator",
    "SiteConfig",
    "load_config",
]
