"""Protocols defining the contracts for source and target systems.

The migration is split into three components:

1. SourceSystem: Reads projects, merge requests and discussions (GitLab)
2. TargetSystem: Creates repositories, pull requests and threads (Azure DevOps)
3. Migrator: Drives the per-project workflow and calls the translator in between

Implementations translate their SDK exceptions into MigrationError subclasses so
the Migrator can decide what to skip without knowing either SDK.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    import uuid

    from .models import (
        CommentThread,
        ImportStatus,
        PullRequest,
        Repository,
        SourceDiscussion,
        SourceMergeRequest,
        SourceProject,
    )


class SourceSystem(Protocol):
    """Protocol for reading data from the source system.

    Example implementations:
        - GitlabSource: python-gitlab REST API
    """

    def validate_access(self) -> None:
        """Check that the credentials are accepted.

        Raises:
            SourceError: If authentication fails
        """
        ...

    def get_project(self, project_id: int) -> SourceProject:
        """Get a project by its numeric id.

        Raises:
            SourceError: If the project does not exist or is not visible with the token
        """
        ...

    def iter_open_merge_requests(self, project_id: int) -> Iterator[SourceMergeRequest]:
        """Yield open merge requests, oldest first."""
        ...

    def iter_discussions(self, project_id: int, merge_request_iid: int) -> Iterator[SourceDiscussion]:
        """Yield the discussions of a merge request in the order GitLab returns them."""
        ...

    def archive_project(self, project_id: int) -> None:
        """Archive a project.

        Raises:
            SourceError: If archiving fails
        """
        ...


class TargetSystem(Protocol):
    """Protocol for creating data in the target system.

    The Migrator calls methods in this order for every project:
    1. get_repository() / delete_repository() - only when recreating
    2. create_repository() - empty repository named after the source project
    3. create_import_request() - clone the source repository server-side
    4. get_import_status() - polled until the import finishes
    5. create_pull_request() - once per open merge request
    6. create_thread() / update_thread() - once per discussion

    Example implementations:
        - AzdoTarget: azure-devops Git client
    """

    def validate_access(self) -> None:
        """Check that the credentials are accepted.

        Raises:
            TargetError: If authentication fails
        """
        ...

    def get_repository(self, project: str, name: str) -> Repository | None:
        """Return the repository with this name, or None if there is none."""
        ...

    def delete_repository(self, repository_id: str) -> None:
        ...

    def create_repository(self, project: str, name: str) -> Repository:
        ...

    def create_import_request(
        self,
        project: str,
        repository_id: str,
        source_url: str,
        service_endpoint_id: uuid.UUID | None = None,
    ) -> int:
        """Start importing ``source_url`` into the repository.

        Returns:
            The import request id to poll with get_import_status()
        """
        ...

    def get_import_status(self, project: str, repository_id: str, import_request_id: int) -> ImportStatus | None:
        """Return the current import state, or None if the service returned nothing."""
        ...

    def create_pull_request(self, project: str, pull_request: PullRequest) -> int:
        """Create a pull request.

        Returns:
            The id of the created pull request
        """
        ...

    def create_thread(self, project: str, repository_id: str, pull_request_id: int, thread: CommentThread) -> int:
        """Create a comment thread.

        Returns:
            The id of the created thread
        """
        ...

    def update_thread(
        self,
        project: str,
        repository_id: str,
        pull_request_id: int,
        thread_id: int,
        thread: CommentThread,
    ) -> None:
        """Append the comments of ``thread`` to an existing thread."""
        ...
