"""
Pytest configuration and fixtures.

The fixtures describe a small GitLab merge request with a plain comment and a
multi-line suggestion, shared by translator and orchestrator tests.
"""

from __future__ import annotations

import datetime as dt

import pytest

from gitlab_to_azdo_migrator.models import (
    Author,
    LineRange,
    NotePosition,
    Repository,
    SourceMergeRequest,
    SourceNote,
    SourceProject,
)

CREATED_AT = dt.datetime(2019, 11, 4, 15, 38, 53, 154000, tzinfo=dt.UTC)
UPDATED_AT = dt.datetime(2019, 11, 4, 15, 39, 3, 935000, tzinfo=dt.UTC)
MR_WEB_URL = "https://gitlab.com/gitlab-examples/php/-/merge_requests/1"


@pytest.fixture
def author() -> Author:
    return Author(
        username="john-doe",
        name="John Doe",
        avatar_url="https://www.gravatar.com/avatar/0",
        web_url="https://gitlab.com/john-doe",
    )


@pytest.fixture
def open_merge_request(author: Author) -> SourceMergeRequest:
    return SourceMergeRequest(
        iid=1,
        project_id=42,
        title="Foo",
        description="open merge request description",
        state="opened",
        source_branch="develop",
        target_branch="master",
        author=author,
        web_url=MR_WEB_URL,
        work_in_progress=True,
        merge_commit_sha="e83c5163316f89bfbde7d9ab23ca2e25604af290",
        created_at=CREATED_AT,
    )


@pytest.fixture
def single_note(author: Author) -> SourceNote:
    return SourceNote(
        id=10,
        body="single generic comment",
        author=author,
        created_at=CREATED_AT,
        updated_at=UPDATED_AT,
    )


@pytest.fixture
def suggestion_note(author: Author) -> SourceNote:
    return SourceNote(
        id=0,
        body="```suggestion:-1+0\nfoo\nbar\n```",
        author=author,
        created_at=CREATED_AT,
        updated_at=UPDATED_AT,
        position=NotePosition(new_path="README.md", new_line=1, line_range=LineRange(start=1, end=2)),
    )


@pytest.fixture
def repository() -> Repository:
    return Repository(
        id="6b0bbf5e-0000-4000-8000-000000000001",
        name="php",
        ssh_url="git@ssh.dev.azure.com:v3/myorg/MyProject/php",
        web_url="https://dev.azure.com/myorg/MyProject/_git/php",
    )


@pytest.fixture
def source_project() -> SourceProject:
    return SourceProject(
        id=42,
        path="php",
        web_url="https://gitlab.com/gitlab-examples/php",
        ssh_url_to_repo="git@gitlab.com:gitlab-examples/php.git",
        http_url_to_repo="https://gitlab.com/gitlab-examples/php.git",
    )
