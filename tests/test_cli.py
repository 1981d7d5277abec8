"""
Tests for CLI module.
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import TYPE_CHECKING, Any
from unittest.mock import patch

import pytest

from gitlab_to_azdo_migrator import SourceError
from gitlab_to_azdo_migrator.cli import build_settings, main, parse_arguments
from gitlab_to_azdo_migrator.orchestrator import MigrationStats
from gitlab_to_azdo_migrator.utils import setup_logging

if TYPE_CHECKING:
    from pathlib import Path

REQUIRED = ["--gitlab-token", "gl", "--azdo-org", "https://dev.azure.com/org", "--azdo-token", "az"]


@pytest.mark.unit
class TestParseArguments:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("GITLAB_TOKEN", raising=False)
        monkeypatch.delenv("AZDO_TOKEN", raising=False)
        args = parse_arguments(REQUIRED)
        assert args.config == "projects.json"
        assert args.recreate_repo is False
        assert args.archive_projects is True
        assert args.azdo_endpoint == ""
        assert args.gitlab_url == "https://gitlab.com"
        assert args.import_timeout == 3600.0
        assert args.verbose == 0

    def test_flags(self) -> None:
        args = parse_arguments([*REQUIRED, "--recreate-repo", "--no-archive-projects", "--config", "x.json", "-vv"])
        assert args.recreate_repo is True
        assert args.archive_projects is False
        assert args.config == "x.json"
        assert args.verbose == 2

    def test_tokens_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITLAB_TOKEN", "env-gl")
        monkeypatch.setenv("AZDO_TOKEN", "env-az")
        args = parse_arguments(["--azdo-org", "https://dev.azure.com/org"])
        assert args.gitlab_token == "env-gl"
        assert args.azdo_token == "env-az"

    def test_missing_token(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("GITLAB_TOKEN", raising=False)
        with pytest.raises(SystemExit):
            parse_arguments(["--azdo-org", "https://dev.azure.com/org", "--azdo-token", "az"])

    def test_missing_organization(self) -> None:
        with pytest.raises(SystemExit):
            parse_arguments(["--gitlab-token", "gl", "--azdo-token", "az"])

    def test_negative_timeout(self) -> None:
        with pytest.raises(SystemExit):
            parse_arguments([*REQUIRED, "--import-timeout", "-1"])


@pytest.mark.unit
class TestBuildSettings:
    def test_settings_from_arguments(self) -> None:
        endpoint = "6f1c2a9e-8a43-4d3e-9c1e-6f4a2b9f0d11"
        args = parse_arguments([*REQUIRED, "--azdo-endpoint", endpoint, "--recreate-repo", "--import-timeout", "60"])
        settings = build_settings(args)
        assert settings.recreate_repository is True
        assert settings.archive_projects is True
        assert settings.service_endpoint_id == uuid.UUID(endpoint)
        assert settings.import_timeout == 60.0


@pytest.mark.unit
class TestMain:
    def _config(self, tmp_path: Path) -> str:
        path = tmp_path / "projects.json"
        path.write_text(json.dumps({"projects": [{"gitlabID": 1, "azdoProject": "P", "migrateMRs": True}]}))
        return str(path)

    @patch("gitlab_to_azdo_migrator.cli.setup_logging")
    @patch("gitlab_to_azdo_migrator.cli.Migrator")
    @patch("gitlab_to_azdo_migrator.cli.azu")
    @patch("gitlab_to_azdo_migrator.cli.glu")
    def test_successful_run_exits_zero(self, mock_glu, mock_azu, mock_migrator_class, _logging, tmp_path: Path) -> None:
        mock_migrator_class.return_value.run.return_value = MigrationStats(projects_processed=1, projects_migrated=1)

        with pytest.raises(SystemExit) as exc_info:
            main([*REQUIRED, "--config", self._config(tmp_path)])

        assert exc_info.value.code == 0
        mock_glu.get_client.assert_called_once_with("gl", url="https://gitlab.com")
        mock_azu.get_connection.assert_called_once_with("https://dev.azure.com/org", "az")
        mock_glu.GitlabSource.return_value.validate_access.assert_called_once()
        mock_azu.AzdoTarget.return_value.validate_access.assert_called_once()
        projects = mock_migrator_class.return_value.run.call_args.args[0]
        assert [p.gitlab_id for p in projects] == [1]

    @patch("gitlab_to_azdo_migrator.cli.setup_logging")
    @patch("gitlab_to_azdo_migrator.cli.Migrator")
    @patch("gitlab_to_azdo_migrator.cli.azu")
    @patch("gitlab_to_azdo_migrator.cli.glu")
    def test_failed_project_exits_one(self, _glu, _azu, mock_migrator_class, _logging, tmp_path: Path) -> None:
        mock_migrator_class.return_value.run.return_value = MigrationStats(projects_processed=1, projects_failed=1)

        with pytest.raises(SystemExit) as exc_info:
            main([*REQUIRED, "--config", self._config(tmp_path)])

        assert exc_info.value.code == 1

    @patch("gitlab_to_azdo_migrator.cli.setup_logging")
    @patch("gitlab_to_azdo_migrator.cli.Migrator")
    def test_bad_config_is_fatal(self, mock_migrator_class, _logging, tmp_path: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([*REQUIRED, "--config", str(tmp_path / "missing.json")])

        assert exc_info.value.code == 1
        mock_migrator_class.assert_not_called()

    @patch("gitlab_to_azdo_migrator.cli.setup_logging")
    @patch("gitlab_to_azdo_migrator.cli.Migrator")
    @patch("gitlab_to_azdo_migrator.cli.azu")
    @patch("gitlab_to_azdo_migrator.cli.glu")
    def test_authentication_failure_is_fatal(
        self, mock_glu, _azu, mock_migrator_class, _logging, tmp_path: Path
    ) -> None:
        mock_glu.GitlabSource.return_value.validate_access.side_effect = SourceError("GitLab API access failed")

        with pytest.raises(SystemExit) as exc_info:
            main([*REQUIRED, "--config", self._config(tmp_path)])

        assert exc_info.value.code == 1
        mock_migrator_class.assert_not_called()

    @patch("gitlab_to_azdo_migrator.cli.setup_logging")
    @patch("gitlab_to_azdo_migrator.cli.Migrator")
    @patch("gitlab_to_azdo_migrator.cli.azu")
    @patch("gitlab_to_azdo_migrator.cli.glu")
    def test_unexpected_error_during_run_is_logged(
        self, _glu, _azu, mock_migrator_class, _logging, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        mock_migrator_class.return_value.run.side_effect = RuntimeError("unexpected")

        with caplog.at_level(logging.ERROR), pytest.raises(SystemExit) as exc_info:
            main([*REQUIRED, "--config", self._config(tmp_path)])

        assert exc_info.value.code == 1
        assert "Migration failed" in caplog.text


@pytest.mark.unit
class TestSetupLogging:
    """Test setup_logging verbosity levels."""

    def _console_handler(self, root_logger: logging.Logger) -> logging.StreamHandler[Any]:
        console_handlers = [
            h
            for h in root_logger.handlers
            if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        ]
        assert console_handlers, "Expected at least one console StreamHandler"
        return console_handlers[0]

    @pytest.fixture(autouse=True)
    def _restore_root_logger(self) -> Any:
        root_logger = logging.getLogger()
        original_handlers = root_logger.handlers[:]
        original_level = root_logger.level
        root_logger.handlers.clear()
        yield
        for h in root_logger.handlers:
            if h not in original_handlers:
                h.close()
        root_logger.handlers = original_handlers
        root_logger.setLevel(original_level)

    def test_default_shows_info_on_console(self) -> None:
        setup_logging(verbosity=0, log_file=None)
        assert self._console_handler(logging.getLogger()).level == logging.INFO
        assert logging.getLogger("msrest").level == logging.WARNING

    def test_verbose_shows_debug_on_console(self) -> None:
        setup_logging(verbosity=1, log_file=None)
        assert self._console_handler(logging.getLogger()).level == logging.DEBUG

    def test_file_handler_gets_debug(self, tmp_path: Path) -> None:
        log_file = tmp_path / "migration.log"
        setup_logging(verbosity=0, log_file=str(log_file))
        file_handlers = [h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)]
        assert len(file_handlers) == 1
        assert file_handlers[0].level == logging.DEBUG
