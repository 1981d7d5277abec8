"""
Migration settings and the projects configuration file.
"""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

from .exceptions import ConfigError

logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE: Final[str] = "projects.json"
DEFAULT_POLL_INTERVAL: Final[float] = 3.0
DEFAULT_IMPORT_TIMEOUT: Final[float] = 3600.0
DEFAULT_PAGE_SIZE: Final[int] = 100


@dataclass(frozen=True)
class ProjectSpec:
    """One entry of the projects configuration file."""

    gitlab_id: int
    azdo_project: str
    migrate_mrs: bool = False


@dataclass(frozen=True)
class MigrationSettings:
    """Run-wide options shared by every migrated project.

    Attributes:
        recreate_repository: Delete an existing Azure DevOps repository of the same name first
        archive_projects: Archive the GitLab project once it has been migrated
        service_endpoint_id: Azure DevOps service endpoint used to read private GitLab repositories
        poll_interval: Seconds between two import status checks
        import_timeout: Seconds to wait for an import to finish, 0 waits forever
        page_size: Number of items requested per GitLab page
    """

    recreate_repository: bool = False
    archive_projects: bool = True
    service_endpoint_id: uuid.UUID | None = None
    poll_interval: float = DEFAULT_POLL_INTERVAL
    import_timeout: float = DEFAULT_IMPORT_TIMEOUT
    page_size: int = DEFAULT_PAGE_SIZE


def parse_service_endpoint(value: str | None) -> uuid.UUID | None:
    """Parse the service endpoint id given on the command line."""
    if not value:
        return None
    try:
        return uuid.UUID(value)
    except ValueError as e:
        msg = f"Invalid Azure DevOps service endpoint id '{value}': expected a UUID"
        raise ConfigError(msg) from e


def _parse_project(index: int, entry: Any) -> ProjectSpec:
    if not isinstance(entry, dict):
        msg = f"Project entry #{index} must be an object"
        raise ConfigError(msg)

    gitlab_id = entry.get("gitlabID")
    azdo_project = entry.get("azdoProject")
    migrate_mrs = entry.get("migrateMRs", False)

    # bool is a subclass of int, reject it explicitly
    if not isinstance(gitlab_id, int) or isinstance(gitlab_id, bool):
        msg = f"Project entry #{index}: 'gitlabID' must be an integer"
        raise ConfigError(msg)
    if not isinstance(azdo_project, str) or not azdo_project.strip():
        msg = f"Project entry #{index}: 'azdoProject' must be a non-empty string"
        raise ConfigError(msg)
    if not isinstance(migrate_mrs, bool):
        msg = f"Project entry #{index}: 'migrateMRs' must be a boolean"
        raise ConfigError(msg)

    return ProjectSpec(gitlab_id=gitlab_id, azdo_project=azdo_project, migrate_mrs=migrate_mrs)


def load_projects(path: str | Path) -> list[ProjectSpec]:
    """Read the list of projects to migrate.

    The file looks like ``{"projects": [{"gitlabID": 1, "azdoProject": "x", "migrateMRs": true}]}``.

    Raises:
        ConfigError: If the file is missing, is not valid JSON or has malformed entries
    """
    config_path = Path(path)
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except OSError as e:
        msg = f"Cannot read configuration file {config_path}: {e}"
        raise ConfigError(msg) from e
    except json.JSONDecodeError as e:
        msg = f"Configuration file {config_path} is not valid JSON: {e}"
        raise ConfigError(msg) from e

    if not isinstance(raw, dict) or not isinstance(raw.get("projects"), list):
        msg = f"Configuration file {config_path} must contain a 'projects' list"
        raise ConfigError(msg)

    projects = [_parse_project(index, entry) for index, entry in enumerate(raw["projects"], start=1)]
    logger.debug(f"Loaded {len(projects)} projects from {config_path}")
    return projects
