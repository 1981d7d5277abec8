from __future__ import annotations

import datetime as dt
import logging
from typing import TYPE_CHECKING, Any, Final

import requests
from gitlab import Gitlab
from gitlab.exceptions import GitlabAuthenticationError, GitlabError

from .config import DEFAULT_PAGE_SIZE
from .exceptions import SourceError
from .models import (
    Author,
    LineRange,
    NotePosition,
    SourceDiscussion,
    SourceMergeRequest,
    SourceNote,
    SourceProject,
)
from .pagination import Page, iter_pages

if TYPE_CHECKING:
    from collections.abc import Iterator

    from gitlab.v4.objects import Project as GitlabProject
    from gitlab.v4.objects import ProjectMergeRequest, ProjectMergeRequestDiscussion

# Module-wide logger
logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_GITLAB_URL: Final[str] = "https://gitlab.com"


def get_client(token: str | None = None, url: str = DEFAULT_GITLAB_URL) -> Gitlab:
    """Get a GitLab client using the token."""
    return Gitlab(url, private_token=token)


def parse_timestamp(value: str | None) -> dt.datetime | None:
    """Parse a GitLab ISO 8601 timestamp (e.g. "2019-11-04T15:38:53.154Z").

    Returns None if the value is empty or cannot be parsed.
    """
    if not value:
        return None
    try:
        return dt.datetime.fromisoformat(value)
    except (ValueError, TypeError):
        logger.debug(f"Ignoring unparsable timestamp {value!r}")
        return None


def to_author(data: dict[str, Any] | None) -> Author:
    data = data or {}
    return Author(
        username=data.get("username") or "",
        name=data.get("name") or "",
        avatar_url=data.get("avatar_url") or "",
        web_url=data.get("web_url") or "",
    )


def to_position(data: dict[str, Any] | None) -> NotePosition | None:
    """Convert a note position; notes outside of a diff have none."""
    if not data:
        return None

    line_range: LineRange | None = None
    raw_range = data.get("line_range")
    if raw_range:
        start = raw_range.get("start") or {}
        end = raw_range.get("end") or {}
        # Range ends on removed lines only carry old_line
        line_range = LineRange(
            start=start.get("new_line") or start.get("old_line"),
            end=end.get("new_line") or end.get("old_line"),
        )

    return NotePosition(
        new_path=data.get("new_path") or "",
        new_line=data.get("new_line"),
        old_line=data.get("old_line"),
        line_range=line_range,
    )


def to_note(data: dict[str, Any]) -> SourceNote:
    return SourceNote(
        id=data["id"],
        body=data.get("body") or "",
        author=to_author(data.get("author")),
        system=bool(data.get("system", False)),
        resolved=bool(data.get("resolved", False)),
        created_at=parse_timestamp(data.get("created_at")),
        updated_at=parse_timestamp(data.get("updated_at")),
        position=to_position(data.get("position")),
    )


def to_discussion(discussion: ProjectMergeRequestDiscussion) -> SourceDiscussion:
    notes: list[dict[str, Any]] = discussion.attributes.get("notes") or []
    return SourceDiscussion(id=str(discussion.get_id()), notes=tuple(to_note(note) for note in notes))


def to_merge_request(mr: ProjectMergeRequest) -> SourceMergeRequest:
    attributes: dict[str, Any] = mr.attributes
    # "work_in_progress" was superseded by "draft" in GitLab 14
    draft = attributes.get("draft", attributes.get("work_in_progress", False))
    return SourceMergeRequest(
        iid=attributes["iid"],
        project_id=attributes["project_id"],
        title=attributes.get("title") or "",
        description=attributes.get("description") or "",
        state=attributes.get("state") or "",
        source_branch=attributes.get("source_branch") or "",
        target_branch=attributes.get("target_branch") or "",
        author=to_author(attributes.get("author")),
        web_url=attributes.get("web_url") or "",
        work_in_progress=bool(draft),
        merge_commit_sha=attributes.get("merge_commit_sha") or None,
        created_at=parse_timestamp(attributes.get("created_at")),
    )


def to_project(project: GitlabProject) -> SourceProject:
    return SourceProject(
        id=project.id,
        path=project.path,
        web_url=project.web_url,
        ssh_url_to_repo=project.ssh_url_to_repo,
        http_url_to_repo=project.http_url_to_repo,
    )


def _page_of(items: list[Any], page: int, page_size: int) -> Page[Any]:
    # A full page may be followed by more, a short one is the last
    next_page = page + 1 if len(items) >= page_size else 0
    return Page(items=items, current_page=page, next_page=next_page)


class GitlabSource:
    """Read access to GitLab projects through python-gitlab."""

    def __init__(self, client: Gitlab, *, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self.client: Gitlab = client
        self.page_size: int = page_size

    def validate_access(self) -> None:
        try:
            self.client.auth()
            logger.info("GitLab API access validated")
        except (GitlabAuthenticationError, GitlabError, requests.RequestException) as e:
            msg = f"GitLab API access failed: {e}"
            raise SourceError(msg) from e

    def get_project(self, project_id: int) -> SourceProject:
        try:
            return to_project(self.client.projects.get(project_id))
        except (GitlabError, requests.RequestException) as e:
            msg = f"Couldn't find GitLab project {project_id}, does your API key have permission to the project? ({e})"
            raise SourceError(msg) from e

    def iter_open_merge_requests(self, project_id: int) -> Iterator[SourceMergeRequest]:
        merge_requests = self.client.projects.get(project_id, lazy=True).mergerequests

        def fetch_page(page: int) -> Page[ProjectMergeRequest]:
            try:
                items = merge_requests.list(
                    state="opened",
                    order_by="created_at",
                    sort="asc",
                    page=page,
                    per_page=self.page_size,
                    get_all=False,
                )
            except (GitlabError, requests.RequestException) as e:
                msg = f"Could not fetch merge requests page {page} of project {project_id}: {e}"
                raise SourceError(msg) from e
            return _page_of(list(items), page, self.page_size)

        for mr in iter_pages(fetch_page):
            yield to_merge_request(mr)

    def iter_discussions(self, project_id: int, merge_request_iid: int) -> Iterator[SourceDiscussion]:
        project = self.client.projects.get(project_id, lazy=True)
        discussions = project.mergerequests.get(merge_request_iid, lazy=True).discussions

        def fetch_page(page: int) -> Page[ProjectMergeRequestDiscussion]:
            try:
                items = discussions.list(page=page, per_page=self.page_size, get_all=False)
            except (GitlabError, requests.RequestException) as e:
                msg = f"Could not fetch discussions page {page} of merge request !{merge_request_iid}: {e}"
                raise SourceError(msg) from e
            return _page_of(list(items), page, self.page_size)

        for discussion in iter_pages(fetch_page):
            yield to_discussion(discussion)

    def archive_project(self, project_id: int) -> None:
        try:
            self.client.projects.get(project_id, lazy=True).archive()
        except (GitlabError, requests.RequestException) as e:
            msg = f"Couldn't archive GitLab project {project_id}: {e}"
            raise SourceError(msg) from e
