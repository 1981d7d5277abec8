"""Data models exchanged between the GitLab source, the translator and Azure DevOps.

Source models are normalized snapshots of python-gitlab objects, destination
models describe the Azure DevOps payloads before they are turned into SDK
objects. None of them is mutated after construction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

ThreadStatus = Literal["active", "fixed"]
CommentType = Literal["text", "codeChange"]


@dataclass(frozen=True)
class Author:
    """A GitLab user as shown in attribution lines."""

    username: str
    name: str
    avatar_url: str = ""
    web_url: str = ""


@dataclass(frozen=True)
class SourceProject:
    id: int
    path: str
    web_url: str
    ssh_url_to_repo: str
    http_url_to_repo: str


@dataclass(frozen=True)
class SourceMergeRequest:
    """A GitLab merge request."""

    iid: int
    project_id: int
    title: str
    description: str
    state: str  # opened, closed, merged or locked
    source_branch: str
    target_branch: str
    author: Author
    web_url: str
    work_in_progress: bool = False
    merge_commit_sha: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class LineRange:
    start: int | None
    end: int | None


@dataclass(frozen=True)
class NotePosition:
    """Diff position of a note.

    ``new_line`` is None for notes on removed lines, which only carry ``old_line``.
    """

    new_path: str
    new_line: int | None = None
    old_line: int | None = None
    line_range: LineRange | None = None


@dataclass(frozen=True)
class SourceNote:
    id: int
    body: str
    author: Author
    system: bool = False
    resolved: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
    position: NotePosition | None = None


@dataclass(frozen=True)
class SourceDiscussion:
    """An ordered list of notes: the root comment followed by its replies."""

    id: str
    notes: tuple[SourceNote, ...] = ()


@dataclass(frozen=True)
class Repository:
    """A repository in Azure DevOps."""

    id: str
    name: str
    ssh_url: str = ""
    web_url: str = ""


@dataclass(frozen=True)
class PullRequest:
    repository_id: str
    title: str
    description: str
    source_ref_name: str
    target_ref_name: str
    is_draft: bool = False
    status: str = "active"
    author_username: str = ""
    author_name: str = ""
    creation_date: datetime | None = None
    last_merge_commit_id: str | None = None


@dataclass(frozen=True)
class ThreadContext:
    """File position a thread is attached to.

    ``side`` is "right" for the new version of the file and "left" for the old one.
    """

    file_path: str
    line: int | None
    side: Literal["right", "left"] = "right"


@dataclass(frozen=True)
class ThreadComment:
    id: int
    parent_id: int
    content: str
    comment_type: CommentType = "text"
    published_date: datetime | None = None
    last_updated_date: datetime | None = None


@dataclass(frozen=True)
class CommentThread:
    status: ThreadStatus
    comments: tuple[ThreadComment, ...] = field(default_factory=tuple)
    context: ThreadContext | None = None
    published_date: datetime | None = None


@dataclass(frozen=True)
class SingleThread:
    """A discussion that fits into one create call."""

    thread: CommentThread


@dataclass(frozen=True)
class SplitThread:
    """A discussion with replies.

    Azure DevOps only accepts replies on an existing thread and rejects file
    context on the update payload, so ``init`` creates the thread with the first
    comment and ``replies`` is appended to it afterwards.
    """

    init: CommentThread
    replies: CommentThread


ThreadPlan = SingleThread | SplitThread


@dataclass(frozen=True)
class ImportStatus:
    """State of an asynchronous repository import in Azure DevOps."""

    status: str  # queued, inProgress, completed, abandoned or failed
    error_message: str | None = None
