"""Tests for desktop notification delivery."""
import subprocess
from unittest.mock import patch

from aipod.server.notify import _notification_command, send_notification


NOTIFY_CMD = "aipod.server.notify._notification_command"


class TestNotificationCommand:
    def test_linux_uses_notify_send(self) -> None:
        with (
            patch("aipod.server.notify.sys.platform", "linux"),
            patch("aipod.server.notify.shutil.which", return_value="/usr/bin/notify-send"),
        ):
            cmd = _notification_command("Claude Code", "Task completed.")

        assert cmd == ["notify-send", "Claude Code", "Task completed."]

    def test_linux_without_tool(self) -> None:
        with (
            patch("aipod.server.notify.sys.platform", "linux"),
            patch("aipod.server.notify.shutil.which", return_value=None),
        ):
            assert _notification_command("t", "m") is None

    def test_macos_quotes_applescript(self) -> None:
        with patch("aipod.server.notify.sys.platform", "darwin"):
            cmd = _notification_command('Say "hi"', "done")

        assert cmd is not None
        assert cmd[:2] == ["osascript", "-e"]
        assert cmd[2] == 'display notification "done" with title "Say \\"hi\\""'


class TestSendNotification:
    def test_runs_command(self) -> None:
        with (
            patch(NOTIFY_CMD, return_value=["notify-send", "t", "m"]),
            patch("aipod.server.notify.subprocess.run") as mock_run,
        ):
            send_notification("t", "m")

        assert mock_run.call_args[0][0] == ["notify-send", "t", "m"]
        assert mock_run.call_args.kwargs["check"] is True

    def test_no_tool_is_silent(self) -> None:
        with (
            patch(NOTIFY_CMD, return_value=None),
            patch("aipod.server.notify.subprocess.run") as mock_run,
        ):
            send_notification("t", "m")

        mock_run.assert_not_called()

    def test_failure_not_raised(self) -> None:
        with (
            patch(NOTIFY_CMD, return_value=["notify-send", "t", "m"]),
            patch(
                "aipod.server.notify.subprocess.run",
                side_effect=subprocess.CalledProcessError(1, "notify-send"),
            ),
        ):
            send_notification("t", "m")

    def test_missing_binary_not_raised(self) -> None:
        with (
            patch(NOTIFY_CMD, return_value=["notify-send", "t", "m"]),
            patch("aipod.server.notify.subprocess.run", side_effect=FileNotFoundError),
        ):
            send_notification("t", "m")
