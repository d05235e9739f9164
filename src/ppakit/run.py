# This file is part of ppakit, a tool for publishing upstream releases to Ubuntu PPAs.
#
# Copyright 2025 Canonical Ltd.
#
# SPDX-License-Identifier: GPL-3.0-only
#
# ppakit is free software: you can redistribute it and/or modify it under
# the terms of the GNU General Public License version 3, as published by the
# Free Software Foundation.
#
# ppakit is distributed in the hope that it will be useful, but WITHOUT
# ANY WARRANTY; without even the implied warranties of MERCHANTABILITY,
# SATISFACTORY QUALITY, or FITNESS FOR A PARTICULAR PURPOSE. See the GNU
# General Public License for more details.
#
# You should have received a copy of the GNU General Public License along with
# ppakit. If not, see <http://www.gnu.org/licenses/>.

"""Per-invocation run directories for ppakit commands.

Each command executes inside a ``RunContext``. The context owns one
directory under ``runs_root`` named after the start time, the command and
a short random suffix. While it is active, everything printed to
stdout/stderr goes to ``logs/stdout.log`` and ``logs/stderr.log``, tool
output lands next to them, and structured events are appended to
``logs/events.jsonl``. On exit a ``summary.json`` records the outcome.

Terminal output that the user should see while the streams are captured
goes through ``activity()`` and ``report_error()``, which write to the
interpreter's original streams.
"""

from __future__ import annotations

import contextlib
import datetime
import json
import sys
import uuid
from pathlib import Path
from typing import IO, Any

from ppakit.config import load_config, resolve_paths


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


def _new_run_id(command: str) -> str:
    return f"{_utcnow():%Y%m%dT%H%M%SZ}-{command}-{uuid.uuid4().hex[:8]}"


class RunContext:
    """A captured, logged execution of one CLI command.

    The summary status stays "failed" if a command already recorded it via
    ``write_summary(status="failed")``, even when no exception escapes.

    Usage:
        with RunContext("build") as run:
            run.log_event({"event": "build.start"})
    """

    def __init__(self, command: str) -> None:
        self.command = command
        self.cfg = load_config()
        self.paths = resolve_paths(self.cfg)
        self.runs_root = self.paths.get("runs_root", Path.home() / ".cache" / "ppakit" / "runs")
        self.run_id = _new_run_id(command)
        self.run_path = self.runs_root / self.run_id
        self.logs_path = self.run_path / "logs"
        self.summary: dict[str, Any] = {"command": command, "start_utc": _utcnow().isoformat()}
        self._files = contextlib.ExitStack()
        self._events: IO[str] | None = None

    def _open_log(self, filename: str, mode: str = "w") -> IO[str]:
        return self._files.enter_context((self.logs_path / filename).open(mode, encoding="utf-8"))

    def __enter__(self) -> RunContext:
        self.logs_path.mkdir(parents=True, exist_ok=True)
        stdout = self._open_log("stdout.log")
        stderr = self._open_log("stderr.log")
        self._events = self._open_log("events.jsonl", "a")
        self._files.enter_context(contextlib.redirect_stdout(stdout))
        self._files.enter_context(contextlib.redirect_stderr(stderr))

        self.log_event({"event": "run.start", "run_id": self.run_id})
        return self

    def log_event(self, event: dict[str, Any]) -> None:
        """Append one timestamped event to events.jsonl."""
        if self._events is None:  # pragma: no cover
            return
        record = {"timestamp": _utcnow().isoformat(), **event}
        print(json.dumps(record, default=str), file=self._events, flush=True)

    def tool_log_path(self, name: str) -> Path:
        """Return the path of a log file for one external tool invocation."""
        return self.logs_path / f"{name}.log"

    def write_summary(self, **fields: Any) -> None:
        self.summary.update(fields)
        (self.run_path / "summary.json").write_text(json.dumps(self.summary, indent=2, default=str))

    def __exit__(self, exc_type: type[BaseException] | None, exc: BaseException | None, tb: object) -> None:
        if exc is not None:
            self.summary["error"] = str(exc)
            status = "failed"
        else:
            status = self.summary.get("status", "success")

        self.write_summary(status=status, end_utc=_utcnow().isoformat())
        self.log_event({"event": "run.end", "status": status})

        # Unwinding restores sys.stdout/sys.stderr before the files close.
        self._events = None
        self._files.close()

        if status != "success":
            with contextlib.suppress(Exception):
                print(f"[report] Logs: {self.run_path}", file=sys.__stdout__)


def activity(phase: str, description: str) -> None:
    """Print a progress line on the terminal, bypassing captured streams."""
    with contextlib.suppress(Exception):
        print(f"[{phase}] {description}", file=sys.__stdout__, flush=True)


def report_error(message: str) -> None:
    """Write a single diagnostic line to the real error stream."""
    with contextlib.suppress(Exception):
        print(f"Error: {message}", file=sys.__stderr__, flush=True)
