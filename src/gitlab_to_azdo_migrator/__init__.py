"""
GitLab to Azure DevOps Migration Tool

Migrates GitLab repositories into Azure DevOps Git repositories, together with
open merge requests and their discussion threads.
"""

from __future__ import annotations

from .cli import main
from .config import MigrationSettings, ProjectSpec, load_projects
from .exceptions import (
    ConfigError,
    ImportFailedError,
    ImportTimeoutError,
    MigrationError,
    SourceError,
    TargetError,
)
from .orchestrator import MigrationStats, Migrator
from .translator import translate_discussion, translate_pull_request
from .utils import setup_logging

# Package version
__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "ImportFailedError",
    "ImportTimeoutError",
    "MigrationError",
    "MigrationSettings",
    "MigrationStats",
    "Migrator",
    "ProjectSpec",
    "SourceError",
    "TargetError",
    "load_projects",
    "main",
    "setup_logging",
    "translate_discussion",
    "translate_pull_request",
]
