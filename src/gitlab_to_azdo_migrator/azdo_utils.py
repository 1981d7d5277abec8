from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

from azure.devops.connection import Connection
from azure.devops.exceptions import AzureDevOpsServiceError
from azure.devops.v7_0.git.models import (
    Comment,
    CommentPosition,
    CommentThreadContext,
    GitCommitRef,
    GitImportGitSource,
    GitImportRequest,
    GitImportRequestParameters,
    GitPullRequest,
    GitPullRequestCommentThread,
    GitRepositoryCreateOptions,
    IdentityRef,
)
from msrest.authentication import BasicAuthentication
from msrest.exceptions import ClientException

from .exceptions import TargetError
from .models import ImportStatus, Repository

if TYPE_CHECKING:
    import uuid

    from azure.devops.released.git import GitClient
    from azure.devops.v7_0.git.models import GitRepository

    from .models import CommentThread, PullRequest, ThreadContext

# Module-wide logger
logger: logging.Logger = logging.getLogger(__name__)

REPOSITORY_NOT_FOUND_CODE: Final[str] = "TF401019"
REPOSITORY_NOT_FOUND_TYPE: Final[str] = "GitRepositoryNotFoundException"


def get_connection(organization_url: str, token: str) -> Connection:
    """Get an Azure DevOps connection authenticated with a personal access token."""
    return Connection(base_url=organization_url, creds=BasicAuthentication("", token))


def is_repository_not_found(error: AzureDevOpsServiceError) -> bool:
    return error.type_key == REPOSITORY_NOT_FOUND_TYPE or REPOSITORY_NOT_FOUND_CODE in (error.message or "")


def to_repository(repository: GitRepository) -> Repository:
    return Repository(
        id=str(repository.id),
        name=repository.name,
        ssh_url=repository.ssh_url or "",
        web_url=repository.web_url or "",
    )


def to_thread_context(context: ThreadContext | None) -> CommentThreadContext | None:
    if context is None:
        return None
    position = CommentPosition(line=context.line)
    if context.side == "left":
        return CommentThreadContext(file_path=context.file_path, left_file_start=position, left_file_end=position)
    return CommentThreadContext(file_path=context.file_path, right_file_start=position, right_file_end=position)


def to_comment_thread(thread: CommentThread, thread_id: int | None = None) -> GitPullRequestCommentThread:
    """Build the SDK thread payload."""
    comments = [
        Comment(
            id=comment.id,
            parent_comment_id=comment.parent_id,
            content=comment.content,
            comment_type=comment.comment_type,
            published_date=comment.published_date,
            last_updated_date=comment.last_updated_date,
        )
        for comment in thread.comments
    ]
    return GitPullRequestCommentThread(
        id=thread_id,
        status=thread.status,
        comments=comments,
        thread_context=to_thread_context(thread.context),
        published_date=thread.published_date,
    )


def to_git_pull_request(pull_request: PullRequest) -> GitPullRequest:
    """Build the SDK pull request payload."""
    last_merge_commit = (
        GitCommitRef(commit_id=pull_request.last_merge_commit_id) if pull_request.last_merge_commit_id else None
    )
    return GitPullRequest(
        title=pull_request.title,
        description=pull_request.description,
        source_ref_name=pull_request.source_ref_name,
        target_ref_name=pull_request.target_ref_name,
        is_draft=pull_request.is_draft,
        status=pull_request.status,
        created_by=IdentityRef(display_name=pull_request.author_username, descriptor=pull_request.author_name),
        creation_date=pull_request.creation_date,
        last_merge_commit=last_merge_commit,
    )


class AzdoTarget:
    """Write access to Azure DevOps Git repositories through the azure-devops SDK."""

    def __init__(self, connection: Connection) -> None:
        self.connection: Connection = connection
        self._git_client: GitClient | None = None

    @property
    def git_client(self) -> GitClient:
        if self._git_client is None:
            try:
                self._git_client = self.connection.clients.get_git_client()
            except ClientException as e:
                msg = f"Could not create Azure DevOps Git client: {e}"
                raise TargetError(msg) from e
        return self._git_client

    def validate_access(self) -> None:
        try:
            self.connection.clients.get_core_client().get_projects(top=1)
            logger.info("Azure DevOps API access validated")
        except ClientException as e:
            msg = f"Azure DevOps API access failed: {e}"
            raise TargetError(msg) from e
        _ = self.git_client

    def get_repository(self, project: str, name: str) -> Repository | None:
        try:
            repository = self.git_client.get_repository(repository_id=name, project=project)
        except AzureDevOpsServiceError as e:
            if not is_repository_not_found(e):
                msg = f"Could not look up repository {name} in {project}: {e}"
                raise TargetError(msg) from e
            logger.debug(f"Repository {name} not found in {project}: {e}")
            return None
        except ClientException as e:
            msg = f"Could not look up repository {name} in {project}: {e}"
            raise TargetError(msg) from e
        return to_repository(repository) if repository is not None else None

    def delete_repository(self, repository_id: str) -> None:
        try:
            self.git_client.delete_repository(repository_id=repository_id)
        except ClientException as e:
            msg = f"Could not remove previous repository, cannot import to existing repo: {e}"
            raise TargetError(msg) from e

    def create_repository(self, project: str, name: str) -> Repository:
        try:
            repository = self.git_client.create_repository(
                git_repository_to_create=GitRepositoryCreateOptions(name=name),
                project=project,
            )
        except ClientException as e:
            msg = f"Could not initiate repository {name}: {e}"
            raise TargetError(msg) from e
        return to_repository(repository)

    def create_import_request(
        self,
        project: str,
        repository_id: str,
        source_url: str,
        service_endpoint_id: uuid.UUID | None = None,
    ) -> int:
        parameters = GitImportRequestParameters(git_source=GitImportGitSource(overwrite=False, url=source_url))
        if service_endpoint_id is not None:
            parameters.service_endpoint_id = str(service_endpoint_id)

        try:
            import_request = self.git_client.create_import_request(
                import_request=GitImportRequest(parameters=parameters),
                project=project,
                repository_id=repository_id,
            )
        except ClientException as e:
            msg = (
                "Could not create import request. "
                f"Either service endpoint is not correct or source repository is empty: {e}"
            )
            raise TargetError(msg) from e
        return import_request.import_request_id

    def get_import_status(self, project: str, repository_id: str, import_request_id: int) -> ImportStatus | None:
        try:
            import_request = self.git_client.get_import_request(
                project=project,
                repository_id=repository_id,
                import_request_id=import_request_id,
            )
        except ClientException as e:
            msg = f"Could not read status of import request {import_request_id}: {e}"
            raise TargetError(msg) from e

        if import_request is None:
            return None
        detailed_status = import_request.detailed_status
        error_message = detailed_status.error_message if detailed_status is not None else None
        return ImportStatus(status=import_request.status, error_message=error_message)

    def create_pull_request(self, project: str, pull_request: PullRequest) -> int:
        try:
            created = self.git_client.create_pull_request(
                git_pull_request_to_create=to_git_pull_request(pull_request),
                repository_id=pull_request.repository_id,
                project=project,
                supports_iterations=False,
            )
        except ClientException as e:
            msg = f"Could not create pull request '{pull_request.title}': {e}"
            raise TargetError(msg) from e
        return created.pull_request_id

    def create_thread(self, project: str, repository_id: str, pull_request_id: int, thread: CommentThread) -> int:
        try:
            created = self.git_client.create_thread(
                comment_thread=to_comment_thread(thread),
                repository_id=repository_id,
                pull_request_id=pull_request_id,
                project=project,
            )
        except ClientException as e:
            msg = f"Could not create thread on pull request {pull_request_id}: {e}"
            raise TargetError(msg) from e
        return created.id

    def update_thread(
        self,
        project: str,
        repository_id: str,
        pull_request_id: int,
        thread_id: int,
        thread: CommentThread,
    ) -> None:
        try:
            self.git_client.update_thread(
                comment_thread=to_comment_thread(thread, thread_id=thread_id),
                repository_id=repository_id,
                pull_request_id=pull_request_id,
                thread_id=thread_id,
                project=project,
            )
        except ClientException as e:
            msg = f"Could not update thread {thread_id} on pull request {pull_request_id}: {e}"
            raise TargetError(msg) from e
