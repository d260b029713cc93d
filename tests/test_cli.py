"""Unit tests for the pyneocities CLI commands."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from pyneocities.cli import main
from pyneocities.config import Config
from pyneocities.exceptions import (
    NeocitiesAuthenticationError,
    NeocitiesFileTypeError,
    NeocitiesMissingFilesError,
    NeocitiesNetworkError,
    NeocitiesUnknownError,
    SyncIOError,
)
from pyneocities.sync import SyncStats


@pytest.fixture
def runner():
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def no_env_api_key(monkeypatch):
    monkeypatch.delenv("NEOCITIES_API_KEY", raising=False)


@pytest.fixture
def mock_client_class():
    """Patch the API client used by the CLI."""
    with patch("pyneocities.cli.NeocitiesClient") as mock_class:
        client = MagicMock()
        mock_class.return_value.__enter__.return_value = client
        yield mock_class


class TestMainGroup:
    """Tests for the main CLI group."""

    def test_main_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "PyNeocities" in result.output
        assert "--api-key" in result.output
        assert "login" in result.output
        assert "logout" in result.output
        assert "sync" in result.output

    def test_sync_help(self, runner):
        result = runner.invoke(main, ["sync", "--help"])
        assert result.exit_code == 0
        assert "--state" in result.output
        assert "--ignore-disallowed-file-types" in result.output
        assert "--dry-run" in result.output


class TestLoginCommand:
    """Tests for the login command."""

    @patch("pyneocities.cli.config")
    def test_login_success_sets_default(self, mock_config, mock_client_class, runner):
        client = mock_client_class.return_value.__enter__.return_value
        client.get_api_key.return_value = "new_key"
        mock_config.get_default_username.return_value = None

        result = runner.invoke(main, ["login"], input="mysite\nsecret\n")

        assert result.exit_code == 0
        assert "Login successful" in result.output
        client.get_api_key.assert_called_once_with("mysite", "secret")
        mock_client_class.assert_called_once_with(require_key=False)
        mock_config.save_api_key.assert_called_once_with("mysite", "new_key")
        mock_config.set_default_username.assert_called_once_with("mysite")

    @patch("pyneocities.cli.config")
    def test_login_keeps_existing_default(
        self, mock_config, mock_client_class, runner
    ):
        client = mock_client_class.return_value.__enter__.return_value
        client.get_api_key.return_value = "new_key"
        mock_config.get_default_username.return_value = "othersite"

        result = runner.invoke(main, ["login", "-u", "mysite", "-p", "secret"])

        assert result.exit_code == 0
        mock_config.set_default_username.assert_not_called()

    @patch("pyneocities.cli.config")
    def test_login_wrong_password(self, mock_config, mock_client_class, runner):
        client = mock_client_class.return_value.__enter__.return_value
        client.get_api_key.return_value = None

        result = runner.invoke(main, ["login", "-u", "mysite", "-p", "wrong"])

        assert result.exit_code == 1
        assert "incorrect" in result.output
        mock_config.save_api_key.assert_not_called()

    @patch("pyneocities.cli.config")
    def test_login_network_error(self, mock_config, mock_client_class, runner):
        client = mock_client_class.return_value.__enter__.return_value
        client.get_api_key.side_effect = NeocitiesNetworkError("offline")

        result = runner.invoke(main, ["login", "-u", "mysite", "-p", "secret"])

        assert result.exit_code == 1
        assert "Login failed" in result.output


class TestLogoutCommand:
    """Tests for the logout command."""

    @patch("pyneocities.cli.config")
    def test_logout_default_user(self, mock_config, runner):
        mock_config.get_default_username.return_value = "mysite"
        mock_config.remove_api_key.return_value = True

        result = runner.invoke(main, ["logout"])

        assert result.exit_code == 0
        assert "Logout successful" in result.output
        mock_config.remove_api_key.assert_called_once_with("mysite")
        mock_config.remove_default_username.assert_called_once()

    @patch("pyneocities.cli.config")
    def test_logout_other_user_keeps_default(self, mock_config, runner):
        mock_config.get_default_username.return_value = "mysite"
        mock_config.remove_api_key.return_value = True

        result = runner.invoke(main, ["logout", "-u", "othersite"])

        assert result.exit_code == 0
        mock_config.remove_api_key.assert_called_once_with("othersite")
        mock_config.remove_default_username.assert_not_called()

    @patch("pyneocities.cli.config")
    def test_logout_not_logged_in(self, mock_config, runner):
        mock_config.get_default_username.return_value = None

        result = runner.invoke(main, ["logout"])

        assert result.exit_code == 1
        assert "Not logged in" in result.output

    @patch("pyneocities.cli.config")
    def test_logout_unknown_user(self, mock_config, runner):
        mock_config.get_default_username.return_value = None
        mock_config.remove_api_key.return_value = False

        result = runner.invoke(main, ["logout", "-u", "ghost"])

        assert result.exit_code == 1
        assert "not logged in" in result.output


class TestSyncCommand:
    """Tests for the sync command."""

    @pytest.fixture
    def mock_engine_class(self):
        with patch("pyneocities.cli.SyncEngine") as mock_class:
            mock_class.return_value.sync.return_value = SyncStats(
                uploaded=3, deleted=1
            )
            yield mock_class

    @pytest.fixture
    def mock_cli_config(self):
        with patch("pyneocities.cli.config") as mock:
            mock.workers = 4
            yield mock

    def test_sync_not_logged_in(self, runner, tmp_path):
        with patch("pyneocities.auth.config") as mock_auth_config:
            mock_auth_config.get_default_username.return_value = None

            result = runner.invoke(main, ["sync", str(tmp_path)])

        assert result.exit_code == 1
        assert "Not logged in" in result.output

    def test_sync_with_stored_key(
        self, runner, tmp_path, mock_client_class, mock_engine_class, mock_cli_config
    ):
        with patch("pyneocities.auth.config") as mock_auth_config:
            mock_auth_config.get_default_username.return_value = "mysite"
            mock_auth_config.get_api_key.return_value = "stored_key"

            result = runner.invoke(main, ["sync", str(tmp_path)])

        assert result.exit_code == 0
        mock_client_class.assert_called_once_with(api_key="stored_key")
        mock_auth_config.get_api_key.assert_called_once_with("mysite")

    def test_sync_success(
        self, runner, tmp_path, mock_client_class, mock_engine_class, mock_cli_config
    ):
        result = runner.invoke(main, ["-k", "key", "sync", str(tmp_path)])

        assert result.exit_code == 0
        assert "uploaded 3, deleted 1" in result.output
        mock_engine_class.return_value.sync.assert_called_once_with(
            tmp_path,
            state_path=tmp_path / ".state",
            ignore_disallowed_file_types=False,
            dry_run=False,
            refetch_state=False,
        )
        _, kwargs = mock_engine_class.call_args
        assert kwargs["max_workers"] == 4

    def test_sync_defaults_to_current_directory(
        self, runner, mock_client_class, mock_engine_class, mock_cli_config
    ):
        result = runner.invoke(main, ["-k", "key", "sync"])

        assert result.exit_code == 0
        args, kwargs = mock_engine_class.return_value.sync.call_args
        assert args == (Path("."),)
        assert kwargs["state_path"] == Path(".") / ".state"

    def test_sync_options(
        self, runner, tmp_path, mock_client_class, mock_engine_class, mock_cli_config
    ):
        state = tmp_path / "my.state"
        result = runner.invoke(
            main,
            [
                "-k",
                "key",
                "sync",
                str(tmp_path),
                "--state",
                str(state),
                "-i",
                "--dry-run",
                "-w",
                "2",
            ],
        )

        assert result.exit_code == 0
        assert "would upload 3" in result.output
        mock_engine_class.return_value.sync.assert_called_once_with(
            tmp_path,
            state_path=state,
            ignore_disallowed_file_types=True,
            dry_run=True,
            refetch_state=False,
        )
        _, kwargs = mock_engine_class.call_args
        assert kwargs["max_workers"] == 2

    def test_sync_refetch_state_removes_state_file(
        self, runner, tmp_path, mock_client_class, mock_engine_class, mock_cli_config
    ):
        state = tmp_path / ".state"
        state.write_text("a.html:123\n")

        result = runner.invoke(
            main, ["-k", "key", "sync", str(tmp_path), "--refetch-state"]
        )

        assert result.exit_code == 0
        assert not state.exists()

    def test_sync_refetch_state_dry_run_keeps_state_file(
        self, runner, tmp_path, mock_client_class, mock_engine_class, mock_cli_config
    ):
        state = tmp_path / ".state"
        state.write_text("a.html:123\n")

        result = runner.invoke(
            main,
            ["-k", "key", "sync", str(tmp_path), "--refetch-state", "--dry-run"],
        )

        assert result.exit_code == 0
        assert state.exists()
        _, kwargs = mock_engine_class.return_value.sync.call_args
        assert kwargs["refetch_state"] is True
        assert kwargs["dry_run"] is True

    def test_sync_invalid_config_file(self, runner, tmp_path, mock_client_class):
        broken = Config(config_dir=tmp_path / "config")
        broken.config_dir.mkdir()
        broken.get_config_path().write_text("{not json")
        site = tmp_path / "site"
        site.mkdir()

        with patch("pyneocities.auth.config", broken), patch(
            "pyneocities.cli.config", broken
        ):
            result = runner.invoke(main, ["sync", str(site)])

        assert result.exit_code == 1
        assert "Invalid config file" in result.output
        mock_client_class.assert_not_called()

    @pytest.mark.parametrize(
        "error,message",
        [
            (NeocitiesAuthenticationError("bad key"), "Invalid session"),
            (NeocitiesFileTypeError("bad type"), "Invalid file type"),
            (NeocitiesMissingFilesError("missing"), "Out of sync"),
            (NeocitiesUnknownError("too_large", "big"), "too_large"),
            (NeocitiesNetworkError("Network error: offline"), "offline"),
            (SyncIOError("Failed to read a.html"), "Failed to read"),
        ],
    )
    def test_sync_error_messages(
        self,
        runner,
        tmp_path,
        mock_client_class,
        mock_engine_class,
        mock_cli_config,
        error,
        message,
    ):
        mock_engine_class.return_value.sync.side_effect = error

        result = runner.invoke(main, ["-k", "key", "sync", str(tmp_path)])

        assert result.exit_code == 1
        assert message in result.output

    def test_sync_keyboard_interrupt(
        self, runner, tmp_path, mock_client_class, mock_engine_class, mock_cli_config
    ):
        mock_engine_class.return_value.sync.side_effect = KeyboardInterrupt

        result = runner.invoke(main, ["-k", "key", "sync", str(tmp_path)])

        assert result.exit_code == 130

    def test_sync_end_to_end(
        self, runner, tmp_path, mock_client_class, mock_cli_config
    ):
        """Run the real engine against a mocked client."""
        client = mock_client_class.return_value.__enter__.return_value
        client.list_files.return_value = []
        (tmp_path / "index.html").write_text("hello")

        result = runner.invoke(main, ["-k", "key", "sync", str(tmp_path)])

        assert result.exit_code == 0
        assert "uploaded 1, deleted 0" in result.output
        client.upload.assert_called_once_with({"index.html": b"hello"})
        assert (tmp_path / ".state").exists()
