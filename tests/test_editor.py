from contextlib import contextmanager
from pathlib import Path

from textual.app import SuspendNotSupported

import loupe.editor as editor
from loupe.editor import editor_command, launch_editor


@contextmanager
def _suspend():
    yield


def test_editor_command_prefers_visual() -> None:
    environ = {"VISUAL": "code --wait", "EDITOR": "vim"}

    assert editor_command(environ) == ["code", "--wait"]
    assert editor_command({"EDITOR": "nvim -p", "VISUAL": "  "}) == ["nvim", "-p"]
    assert editor_command({}) is None


def test_launch_editor_without_editor_returns_message() -> None:
    message = launch_editor(Path("a.txt"), _suspend, environ={})

    assert message == "Cannot open file: $EDITOR is not set."


def test_launch_editor_runs_command_inside_suspend(monkeypatch) -> None:
    events = []

    @contextmanager
    def _tracking_suspend():
        events.append("suspend")
        yield
        events.append("resume")

    def _fake_run(command, check):
        events.append(("run", command, check))

    monkeypatch.setattr(editor.subprocess, "run", _fake_run)

    message = launch_editor(
        Path("/repo/a.txt"), _tracking_suspend, environ={"EDITOR": "vim"}
    )

    assert message is None
    assert events == ["suspend", ("run", ["vim", "/repo/a.txt"], False), "resume"]


def test_launch_editor_reports_unsupported_suspend() -> None:
    def _unsupported():
        raise SuspendNotSupported("no suspend")

    message = launch_editor(Path("a.txt"), _unsupported, environ={"EDITOR": "vim"})

    assert message is not None
    assert "does not support suspending" in message


def test_launch_editor_reports_missing_binary(monkeypatch) -> None:
    def _fake_run(command, check):
        raise FileNotFoundError("no such editor")

    monkeypatch.setattr(editor.subprocess, "run", _fake_run)

    message = launch_editor(Path("a.txt"), _suspend, environ={"EDITOR": "nope"})

    assert message == "Failed to launch editor: no such editor"
