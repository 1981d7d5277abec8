"""
Command-line interface for the GitLab to Azure DevOps migration tool.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

from . import azdo_utils as azu
from . import gitlab_utils as glu
from .config import (
    DEFAULT_CONFIG_FILE,
    DEFAULT_IMPORT_TIMEOUT,
    MigrationSettings,
    load_projects,
    parse_service_endpoint,
)
from .exceptions import MigrationError
from .gitlab_utils import DEFAULT_GITLAB_URL
from .orchestrator import Migrator
from .utils import setup_logging

logger: logging.Logger = logging.getLogger(__name__)


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Migrate GitLab projects, open merge requests and discussions to Azure DevOps"
    )

    _ = parser.add_argument(
        "--gitlab-token",
        default=os.environ.get("GITLAB_TOKEN"),
        help="GitLab API token (default: $GITLAB_TOKEN)",
    )
    _ = parser.add_argument(
        "--gitlab-url", default=DEFAULT_GITLAB_URL, help=f"GitLab instance URL (default: {DEFAULT_GITLAB_URL})"
    )
    _ = parser.add_argument(
        "--azdo-org", required=True, help="Azure DevOps organization URL (https://dev.azure.com/myorg)"
    )
    _ = parser.add_argument(
        "--azdo-token",
        default=os.environ.get("AZDO_TOKEN"),
        help="Azure DevOps Personal Access Token (default: $AZDO_TOKEN)",
    )
    _ = parser.add_argument(
        "--azdo-endpoint",
        default="",
        help="Azure DevOps service endpoint id for GitLab, needed to import private repositories",
    )
    _ = parser.add_argument(
        "--config", default=DEFAULT_CONFIG_FILE, help=f"Projects configuration file (default: {DEFAULT_CONFIG_FILE})"
    )
    _ = parser.add_argument(
        "--recreate-repo",
        action="store_true",
        help="Delete the Azure DevOps repository first if it exists. Use with caution",
    )
    _ = parser.add_argument(
        "--archive-projects",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Archive GitLab projects after they have been migrated (default: true)",
    )
    _ = parser.add_argument(
        "--import-timeout",
        type=float,
        default=DEFAULT_IMPORT_TIMEOUT,
        help=f"Seconds to wait for a repository import, 0 waits forever (default: {DEFAULT_IMPORT_TIMEOUT:g})",
    )
    _ = parser.add_argument(
        "--verbose", "-v", action="count", default=0, help="Increase verbosity (-v for debug, -vv for HTTP clients)"
    )

    args = parser.parse_args(argv)
    if not args.gitlab_token:
        parser.error("--gitlab-token is required (or set GITLAB_TOKEN)")
    if not args.azdo_token:
        parser.error("--azdo-token is required (or set AZDO_TOKEN)")
    if args.import_timeout < 0:
        parser.error("--import-timeout must not be negative")
    return args


def build_settings(args: argparse.Namespace) -> MigrationSettings:
    return MigrationSettings(
        recreate_repository=args.recreate_repo,
        archive_projects=args.archive_projects,
        service_endpoint_id=parse_service_endpoint(args.azdo_endpoint),
        import_timeout=args.import_timeout,
    )


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_arguments(argv)
    setup_logging(verbosity=args.verbose)

    try:
        settings = build_settings(args)
        projects = load_projects(args.config)

        source = glu.GitlabSource(glu.get_client(args.gitlab_token, url=args.gitlab_url), page_size=settings.page_size)
        target = azu.AzdoTarget(azu.get_connection(args.azdo_org, args.azdo_token))
        source.validate_access()
        target.validate_access()
    except MigrationError:
        logger.exception("Migration setup failed")
        sys.exit(1)

    try:
        stats = Migrator(source, target, settings).run(projects)
    except Exception:
        logger.exception("Migration failed")
        sys.exit(1)

    if stats.success:
        sys.exit(0)
    else:
        sys.exit(1)
