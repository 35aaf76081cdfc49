"""Tests for logging configuration."""
from unittest.mock import patch

import pytest

from aipod.logging import BUILD_SOURCE, _log_format, configure_logging, log_server_startup


def _record(level: str = "INFO", extra: dict | None = None, exception: object = None) -> dict:
    class Level:
        name = level

    return {"level": Level(), "extra": extra or {}, "exception": exception}


class TestLogFormat:
    def test_plain(self) -> None:
        fmt = _log_format(_record())

        assert "{message}" in fmt
        assert fmt.endswith("\n")
        assert "{exception}" not in fmt

    def test_extra_fields(self) -> None:
        fmt = _log_format(_record(extra={"pid": 42, "port": 9876}))
        assert "pid=42 port=9876" in fmt

    def test_extra_braces_escaped(self) -> None:
        fmt = _log_format(_record(extra={"value": "{x}"}))
        assert "'{{x}}'" in fmt

    def test_container_tag(self) -> None:
        fmt = _log_format(_record(extra={"container": "claude-0123456789ab", "port": 9876}))

        assert "[claude-0123456789ab]" in fmt
        assert fmt.index("[claude-0123456789ab]") < fmt.index("{message}")
        assert "container=" not in fmt
        assert "port=9876" in fmt

    def test_build_output_tagged(self) -> None:
        fmt = _log_format(_record(level="DEBUG", extra={"source": BUILD_SOURCE}))

        assert "build" in fmt
        assert "{name}" not in fmt
        assert "source=" not in fmt

    def test_markup_in_extra_escaped(self) -> None:
        fmt = _log_format(_record(extra={"image": "<none>"}))
        assert r"\<none>" in fmt

    def test_exception_appended(self) -> None:
        fmt = _log_format(_record(level="ERROR", exception=object()))
        assert fmt.endswith("{exception}\n")


class TestConfigureLogging:
    def test_replaces_handlers(self) -> None:
        with patch("aipod.logging.logger") as mock_logger:
            configure_logging("debug")

        mock_logger.remove.assert_called_once_with()
        mock_add = mock_logger.add
        assert mock_add.call_args.kwargs["level"] == "DEBUG"
        assert mock_add.call_args.kwargs["format"] is _log_format


def test_log_server_startup(capsys: pytest.CaptureFixture[str]) -> None:
    log_server_startup("0.0.0.0", 9876, "0.1.0")

    err = capsys.readouterr().err
    assert "v0.1.0" in err
    assert "http://0.0.0.0:9876" in err
