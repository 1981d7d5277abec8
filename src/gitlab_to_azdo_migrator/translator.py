"""Translate GitLab merge requests and discussions into Azure DevOps payloads.

Everything in this module is pure: no API calls, only data in and data out.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from .models import (
    CommentThread,
    PullRequest,
    SingleThread,
    SplitThread,
    ThreadComment,
    ThreadContext,
)
from .suggestions import strip_suggestion_ranges

if TYPE_CHECKING:
    from .models import (
        Author,
        CommentType,
        NotePosition,
        Repository,
        SourceDiscussion,
        SourceMergeRequest,
        SourceNote,
        ThreadPlan,
        ThreadStatus,
    )

SKIPPED_MERGE_REQUEST_STATES: Final[frozenset[str]] = frozenset({"closed", "merged"})
BRANCH_REF_PREFIX: Final[str] = "refs/heads/"
AVATAR_SIZE: Final[str] = "24x24"


def format_attribution(link: str, author: Author, suffix: str = "") -> str:
    """Build the italic "Migrated from" line that heads every migrated text."""
    return (
        f"*Migrated from [Gitlab]({link}) | Author: "
        f"![{author.name}]({author.avatar_url} ={AVATAR_SIZE}) [{author.name}]({author.web_url}){suffix}*"
    )


def prepare_note_link(note: SourceNote, mr: SourceMergeRequest) -> str:
    return f"{mr.web_url}/diffs#note_{note.id}"


def prepare_pull_request_description(mr: SourceMergeRequest) -> str:
    """Prefix the merge request description with its attribution line."""
    return f"{format_attribution(mr.web_url, mr.author)}\n\n{mr.description}"


def _multiline_range(note: SourceNote) -> tuple[int, int] | None:
    """Return (start, end) if the note is attached to more than one line."""
    if note.position is None or note.position.line_range is None:
        return None
    line_range = note.position.line_range
    if line_range.start is None or line_range.end is None or line_range.start == line_range.end:
        return None
    return line_range.start, line_range.end


def prepare_note_body(mr: SourceMergeRequest, note: SourceNote, comment_id: int) -> str:
    """Build the Azure DevOps comment content for a GitLab note.

    Azure DevOps has no multi-line comments, so the first comment of a thread that
    spans several lines gets a marker with the original range and its suggestions
    get a warning that they must be applied by hand.

    Args:
        mr: Merge request the note belongs to
        note: The GitLab note
        comment_id: 1-based position of the note in its discussion

    Returns:
        Markdown content with the attribution line prepended
    """
    line_range = ""
    body = note.body
    multiline = _multiline_range(note) if comment_id == 1 else None
    if multiline is not None:
        start, end = multiline
        line_range = f"| **🚩 Multiline comment {start}-{end}**"
        body = strip_suggestion_ranges(body, warn=True)
    body = strip_suggestion_ranges(body)
    return f"{format_attribution(prepare_note_link(note, mr), note.author, line_range)}\n\n{body}"


def translate_pull_request(mr: SourceMergeRequest, repository: Repository) -> PullRequest | None:
    """Map an open merge request to a pull request payload.

    Returns:
        The payload, or None for closed and merged merge requests
    """
    if mr.state in SKIPPED_MERGE_REQUEST_STATES:
        return None
    return PullRequest(
        repository_id=repository.id,
        title=mr.title,
        description=prepare_pull_request_description(mr),
        source_ref_name=f"{BRANCH_REF_PREFIX}{mr.source_branch}",
        target_ref_name=f"{BRANCH_REF_PREFIX}{mr.target_branch}",
        is_draft=mr.work_in_progress,
        status="active",
        author_username=mr.author.username,
        author_name=mr.author.name,
        creation_date=mr.created_at,
        last_merge_commit_id=mr.merge_commit_sha or None,
    )


def translate_position(position: NotePosition | None) -> ThreadContext | None:
    """Derive the thread file context from the position of a discussion's first note.

    A line range wins over the single line; the range start is used because
    Azure DevOps threads point at one line.
    """
    if position is None or not position.new_path:
        return None

    if position.line_range is not None and position.line_range.start is not None:
        return ThreadContext(file_path=f"/{position.new_path}", line=position.line_range.start)
    if position.new_line is None and position.old_line is not None:
        # Comment on a removed line
        return ThreadContext(file_path=f"/{position.new_path}", line=position.old_line, side="left")
    return ThreadContext(file_path=f"/{position.new_path}", line=position.new_line)


def translate_note(mr: SourceMergeRequest, note: SourceNote, comment_id: int, comment_type: CommentType) -> ThreadComment:
    return ThreadComment(
        id=comment_id,
        parent_id=comment_id - 1,
        content=prepare_note_body(mr, note, comment_id),
        comment_type=comment_type,
        published_date=note.created_at,
        last_updated_date=note.updated_at,
    )


def translate_discussion(mr: SourceMergeRequest, discussion: SourceDiscussion) -> ThreadPlan | None:
    """Map a GitLab discussion to the thread payload(s) needed to recreate it.

    Returns:
        None for discussions started by a system note, a SingleThread for a lone
        comment, or a SplitThread when the discussion has replies
    """
    if not discussion.notes:
        return None
    first_note = discussion.notes[0]
    if first_note.system:
        return None

    context = translate_position(first_note.position)
    comment_type: CommentType = "codeChange" if context is not None else "text"

    comments = tuple(
        translate_note(mr, note, comment_id, comment_type)
        for comment_id, note in enumerate(discussion.notes, start=1)
    )
    status: ThreadStatus = "fixed" if all(note.resolved for note in discussion.notes) else "active"

    if len(comments) == 1:
        return SingleThread(
            CommentThread(status=status, comments=comments, context=context, published_date=first_note.created_at)
        )

    return SplitThread(
        init=CommentThread(
            status=status,
            comments=comments[:1],
            context=context,
            published_date=first_note.created_at,
        ),
        replies=CommentThread(status=status, comments=comments[1:], published_date=first_note.created_at),
    )
