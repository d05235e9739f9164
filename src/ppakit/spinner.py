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

"""TTY-aware spinner for long-running external tools.

debuild, pbuilder and dput can run for many minutes. On a TTY a Rich spinner
shows the running step; otherwise the step is announced once. Either way the
finished step is reported with its elapsed time. Output goes to the real
terminal (sys.__stdout__) and never into captured run logs.
"""

from __future__ import annotations

import contextlib
import sys
import time
from collections.abc import Iterator

from rich.console import Console
from rich.live import Live
from rich.spinner import Spinner


def is_tty() -> bool:
    """Return True if stdout is a TTY."""
    try:
        if sys.__stdout__ is None:
            return False  # pragma: no cover
        return sys.__stdout__.isatty()
    except Exception:  # pragma: no cover
        return False


def format_elapsed(seconds: float) -> str:
    """Format elapsed seconds as ``42s`` or ``3m05s``."""
    whole = int(seconds)
    if whole < 60:
        return f"{whole}s"
    minutes, secs = divmod(whole, 60)
    return f"{minutes}m{secs:02d}s"


def _emit(text: str) -> None:
    with contextlib.suppress(Exception):  # pragma: no cover
        print(text, file=sys.__stdout__, flush=True)


@contextlib.contextmanager
def activity_spinner(phase: str, description: str, disable: bool = False) -> Iterator[None]:
    """Show a spinner while the wrapped block runs.

    Args:
        phase: Short phase label (e.g., "build", "upload").
        description: What is running.
        disable: Force plain output even on a TTY.
    """
    text = f"[{phase}] {description}"
    started = time.monotonic()

    if disable or not is_tty():
        _emit(text)
        yield
    else:
        console = Console(file=sys.__stdout__, force_terminal=True)
        with Live(Spinner("dots", text=text), console=console, refresh_per_second=12, transient=True):
            yield

    _emit(f"{text} (done in {format_elapsed(time.monotonic() - started)})")
