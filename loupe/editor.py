"""Launch ``$EDITOR`` on a file while the TUI is suspended.

Errors come back as a message string so the caller can show a notification.
"""

from __future__ import annotations

import os
import shlex
import subprocess
from collections.abc import Callable, Mapping
from contextlib import AbstractContextManager
from pathlib import Path

from textual.app import SuspendNotSupported


def editor_command(environ: Mapping[str, str] | None = None) -> list[str] | None:
    environ = os.environ if environ is None else environ
    for name in ("VISUAL", "EDITOR"):
        value = environ.get(name, "").strip()
        if value:
            command = shlex.split(value)
            if command:
                return command
    return None


def launch_editor(
    target: Path,
    suspend: Callable[[], AbstractContextManager[object]],
    *,
    environ: Mapping[str, str] | None = None,
) -> str | None:
    command = editor_command(environ)
    if command is None:
        return "Cannot open file: $EDITOR is not set."

    try:
        with suspend():
            subprocess.run([*command, str(target)], check=False)
    except SuspendNotSupported:
        return "Cannot open file: this terminal does not support suspending."
    except OSError as exc:
        return f"Failed to launch editor: {exc}"
    return None
