"""Migration orchestrator that coordinates the GitLab source and the Azure DevOps target.

Migration Flow
--------------
Projects are migrated one after the other. For each project:

Phase 1: Repository
    - Read the GitLab project
    - With ``recreate_repository``, delete an Azure DevOps repository of the same name
    - Create an empty repository named after the GitLab project path
    - Start an import request pulling the GitLab HTTP clone URL
    - Poll the import until it is completed, failed or abandoned

Phase 2: Merge requests (only for projects with ``migrate_mrs``)
    For each open merge request, oldest first:
        a. Translate it to a pull request (closed/merged ones are skipped)
        b. Create the pull request
        c. For each discussion:
           - Translate it to a ThreadPlan
           - Create the thread with the first comment
           - Append the replies to the created thread, if any

Phase 3: Archive (only with ``archive_projects``)
    - Archive the GitLab project

Error Handling
--------------
- Project level (project not found, repository or import failure): the rest of
  the project is skipped, the run goes on with the next project
- Item level (one pull request or thread): logged and skipped
- Nothing is rolled back: a half-migrated project is left for inspection
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .config import MigrationSettings
from .exceptions import ImportFailedError, ImportTimeoutError, MigrationError
from .models import SingleThread
from .translator import prepare_note_link, translate_discussion, translate_pull_request

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from .config import ProjectSpec
    from .models import Repository, SourceDiscussion, SourceMergeRequest, SourceProject
    from .protocols import SourceSystem, TargetSystem

logger = logging.getLogger(__name__)


@dataclass
class MigrationStats:
    """Statistics collected during migration."""

    projects_processed: int = 0
    projects_migrated: int = 0
    projects_failed: int = 0
    pull_requests_created: int = 0
    pull_requests_failed: int = 0
    threads_created: int = 0
    threads_failed: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.projects_failed == 0

    def record_error(self, message: str) -> None:
        logger.error(message)
        self.errors.append(message)


def format_audit_line(project: SourceProject, repository: Repository) -> str:
    """Line recording where a GitLab repository now lives, for downstream auditing."""
    return (
        f"GIT:{project.id};{project.web_url};{project.ssh_url_to_repo};"
        f"{project.http_url_to_repo};{repository.ssh_url}"
    )


class Migrator:
    """Orchestrates migration of GitLab projects into Azure DevOps.

    Usage:
        source = GitlabSource(gitlab_client)
        target = AzdoTarget(azdo_connection)
        migrator = Migrator(source, target, MigrationSettings())
        stats = migrator.run(load_projects("projects.json"))
    """

    _source: SourceSystem
    _target: TargetSystem

    def __init__(
        self,
        source: SourceSystem,
        target: TargetSystem,
        settings: MigrationSettings | None = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the migrator.

        Args:
            source: Source system to migrate from
            target: Target system to migrate to
            settings: Run-wide options
            sleep: Called between two import status checks
            clock: Monotonic clock used to enforce the import timeout
        """
        self._source = source
        self._target = target
        self.settings: MigrationSettings = settings or MigrationSettings()
        self._sleep = sleep
        self._clock = clock

    def run(self, projects: Iterable[ProjectSpec]) -> MigrationStats:
        """Migrate every project in order and return the collected statistics."""
        stats = MigrationStats()
        project_list = list(projects)
        for index, spec in enumerate(project_list, start=1):
            logger.info(f"Processing project {spec.gitlab_id} ({index}/{len(project_list)})")
            stats.projects_processed += 1
            if self.migrate_project(spec, stats):
                stats.projects_migrated += 1
            else:
                stats.projects_failed += 1
        logger.info(
            f"Migrated {stats.projects_migrated}/{stats.projects_processed} projects, "
            f"{stats.pull_requests_created} pull requests and {stats.threads_created} threads"
        )
        return stats

    def migrate_project(self, spec: ProjectSpec, stats: MigrationStats) -> bool:
        """Migrate one project.

        Returns:
            True if the repository was imported, False if the project was abandoned
        """
        try:
            project = self._source.get_project(spec.gitlab_id)
            logger.debug(f"Creating import request for {project.http_url_to_repo} to project {spec.azdo_project}")
            repository = self.import_repository(spec, project)
        except MigrationError as e:
            stats.record_error(f"Project {spec.gitlab_id}: {e}")
            return False

        if spec.migrate_mrs:
            self.migrate_merge_requests(spec, project, repository, stats)

        if self.settings.archive_projects:
            logger.debug(f"Archiving project {spec.gitlab_id} in GitLab")
            try:
                self._source.archive_project(spec.gitlab_id)
            except MigrationError as e:
                stats.record_error(str(e))

        return True

    def import_repository(self, spec: ProjectSpec, project: SourceProject) -> Repository:
        """Create the Azure DevOps repository and import the GitLab repository into it.

        Raises:
            TargetError: If the repository or the import request cannot be created
            ImportFailedError: If the import fails, is abandoned or times out
        """
        repository = self._reinit_repository(spec, project)

        logger.debug(
            f"Create import request to transfer {project.http_url_to_repo} into new repo {project.path}"
        )
        import_request_id = self._target.create_import_request(
            spec.azdo_project,
            repository.id,
            project.http_url_to_repo,
            self.settings.service_endpoint_id,
        )

        self._wait_for_import(spec, repository, import_request_id)
        logger.info(format_audit_line(project, repository))
        return repository

    def _reinit_repository(self, spec: ProjectSpec, project: SourceProject) -> Repository:
        if self.settings.recreate_repository:
            logger.debug(f"Removing repository {project.path} if exists from {spec.azdo_project}")
            existing = self._target.get_repository(spec.azdo_project, project.path)
            if existing is not None:
                self._target.delete_repository(existing.id)
                logger.info(f"Deleted existing repository {existing.name} from {spec.azdo_project}")

        logger.debug(f"Create empty repository {project.path}")
        return self._target.create_repository(spec.azdo_project, project.path)

    def _wait_for_import(self, spec: ProjectSpec, repository: Repository, import_request_id: int) -> None:
        """Poll the import request until it reaches a final state."""
        timeout = self.settings.import_timeout
        deadline = self._clock() + timeout if timeout > 0 else None

        while True:
            status = self._target.get_import_status(spec.azdo_project, repository.id, import_request_id)
            if status is None:
                logger.warning(
                    f"Import request {import_request_id} returned no status, assuming it completed"
                )
                return
            if status.status == "completed":
                logger.debug(f"Import finished - {repository.web_url}")
                return
            if status.status == "abandoned":
                msg = "Import request abandoned"
                raise ImportFailedError(msg)
            if status.status == "failed":
                msg = f"Import request failed: {status.error_message or 'no error message'}"
                raise ImportFailedError(msg)

            if deadline is not None and self._clock() >= deadline:
                msg = f"Import request {import_request_id} did not finish within {timeout:g} seconds"
                raise ImportTimeoutError(msg)

            logger.debug(f"Waiting for import to finish, retry in {self.settings.poll_interval:g} seconds...")
            self._sleep(self.settings.poll_interval)

    def migrate_merge_requests(
        self,
        spec: ProjectSpec,
        project: SourceProject,
        repository: Repository,
        stats: MigrationStats,
    ) -> None:
        logger.debug(f"Migrate merge requests for repo {repository.name}")
        try:
            for mr in self._source.iter_open_merge_requests(project.id):
                self.migrate_merge_request(spec, mr, repository, stats)
        except MigrationError as e:
            stats.record_error(str(e))

    def migrate_merge_request(
        self,
        spec: ProjectSpec,
        mr: SourceMergeRequest,
        repository: Repository,
        stats: MigrationStats,
    ) -> None:
        pull_request = translate_pull_request(mr, repository)
        if pull_request is None:
            logger.debug(f"Skipping {mr.state} merge request !{mr.iid}")
            return

        try:
            pull_request_id = self._target.create_pull_request(spec.azdo_project, pull_request)
        except MigrationError as e:
            stats.pull_requests_failed += 1
            stats.record_error(f"Cannot migrate merge request !{mr.iid}: {e}")
            return
        stats.pull_requests_created += 1
        logger.debug(f"Created pull request {pull_request_id} for merge request !{mr.iid}")

        logger.debug(f"Migrate discussions for merge request !{mr.iid}")
        try:
            for discussion in self._source.iter_discussions(mr.project_id, mr.iid):
                self.migrate_discussion(spec, mr, repository, pull_request_id, discussion, stats)
        except MigrationError as e:
            stats.record_error(str(e))

    def migrate_discussion(
        self,
        spec: ProjectSpec,
        mr: SourceMergeRequest,
        repository: Repository,
        pull_request_id: int,
        discussion: SourceDiscussion,
        stats: MigrationStats,
    ) -> None:
        plan = translate_discussion(mr, discussion)
        if plan is None:
            return

        note_link = prepare_note_link(discussion.notes[0], mr)
        init = plan.thread if isinstance(plan, SingleThread) else plan.init
        try:
            thread_id = self._target.create_thread(spec.azdo_project, repository.id, pull_request_id, init)
        except MigrationError as e:
            stats.threads_failed += 1
            stats.record_error(f"Cannot create thread ({note_link}): {e}")
            return

        if not isinstance(plan, SingleThread):
            try:
                self._target.update_thread(spec.azdo_project, repository.id, pull_request_id, thread_id, plan.replies)
            except MigrationError as e:
                stats.threads_failed += 1
                stats.record_error(f"Cannot update thread ({note_link}): {e}")
                return
        stats.threads_created += 1
