# Tests for the authrelay command line entry point.
# Created: 2026-10-19

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from authrelay.__main__ import main
from authrelay.config import Settings
from tests.conftest import make_settings


def _invalid_settings_error() -> ValidationError:
    try:
        Settings(session_ttl_seconds=0)
    except ValidationError as exc:
        return exc
    raise AssertionError("expected a ValidationError")


class TestMain:
    @patch("authrelay.api.serve.run_server")
    @patch("authrelay.__main__.setup_logging")
    @patch("authrelay.__main__.get_settings")
    def test_starts_server_with_overrides(self, mock_settings, mock_logging, mock_run):
        settings = make_settings(log_level="WARNING")
        mock_settings.return_value = settings

        assert main(["--port", "8080", "--host", "0.0.0.0"]) == 0

        mock_logging.assert_called_once_with(level="WARNING")
        mock_run.assert_called_once_with(settings, host="0.0.0.0", port=8080, dev=False)

    @patch("authrelay.api.serve.run_server")
    @patch("authrelay.__main__.setup_logging")
    @patch("authrelay.__main__.get_settings")
    def test_log_level_flag_wins(self, mock_settings, mock_logging, mock_run):
        mock_settings.return_value = make_settings()
        main(["--log-level", "DEBUG", "--dev"])
        mock_logging.assert_called_once_with(level="DEBUG")
        assert mock_run.call_args.kwargs["dev"] is True

    @patch("authrelay.api.serve.run_server")
    @patch("authrelay.__main__.setup_logging")
    @patch("authrelay.__main__.get_settings")
    def test_invalid_configuration(self, mock_settings, mock_logging, mock_run):
        mock_settings.side_effect = _invalid_settings_error()
        assert main([]) == 2
        mock_run.assert_not_called()

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert capsys.readouterr().out.startswith("authrelay ")

    @patch("authrelay.api.serve.run_server")
    @patch("authrelay.__main__.setup_logging")
    @patch("authrelay.__main__.get_settings")
    def test_unknown_log_level_flag(self, mock_settings, mock_logging, mock_run, capsys):
        mock_settings.return_value = make_settings()
        with pytest.raises(SystemExit) as exc_info:
            main(["--log-level", "bogus"])
        assert exc_info.value.code == 2
        assert "invalid choice" in capsys.readouterr().err
        mock_run.assert_not_called()

    @patch("authrelay.api.serve.run_server")
    @patch("authrelay.__main__.setup_logging")
    @patch("authrelay.__main__.get_settings")
    def test_log_level_flag_case_insensitive(self, mock_settings, mock_logging, mock_run):
        mock_settings.return_value = make_settings()
        main(["--log-level", "warning"])
        mock_logging.assert_called_once_with(level="WARNING")

    @patch("authrelay.api.serve.run_server")
    @patch("authrelay.__main__.setup_logging")
    @patch("authrelay.__main__.get_settings")
    def test_unknown_log_level_setting(self, mock_settings, mock_logging, mock_run):
        try:
            Settings(log_level="bogus")
        except ValidationError as exc:
            mock_settings.side_effect = exc
        assert main([]) == 2
        mock_run.assert_not_called()
