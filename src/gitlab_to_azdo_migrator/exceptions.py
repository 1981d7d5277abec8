"""
Custom exception classes for the GitLab to Azure DevOps migration tool.
"""

from __future__ import annotations


class MigrationError(Exception):
    """Base exception for migration errors."""


class ConfigError(MigrationError):
    """Raised when the projects configuration file cannot be used."""


class SourceError(MigrationError):
    """Raised when a GitLab API call fails."""


class TargetError(MigrationError):
    """Raised when an Azure DevOps API call fails."""


class ImportFailedError(MigrationError):
    """Raised when a repository import request ends as failed or abandoned."""


class ImportTimeoutError(ImportFailedError):
    """Raised when a repository import does not finish within the configured time."""
