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

"""Keeps cached sudo credentials alive during long chroot builds.

pbuilder runs under sudo, and a multi-distribution run easily outlasts the
sudo timestamp timeout. ``SudoKeepAlive`` validates credentials once up front
(prompting if needed) and then refreshes them from a background thread until
the ``with`` block exits, whether it exits normally or by exception.
"""

from __future__ import annotations

import logging
import os
import subprocess
import threading
from types import TracebackType

from ppakit.exceptions import BuildToolError
from ppakit.run import activity

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_SECONDS = 60.0


def sudo_credentials_cached() -> bool:
    """Check if sudo credentials are cached (no password prompt needed)."""
    result = subprocess.run(
        ["sudo", "-n", "true"],
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        check=False,
    )
    return result.returncode == 0


def ensure_sudo_cached() -> None:
    """Prompt for the sudo password up front and cache credentials.

    Raises:
        BuildToolError: If sudo refuses to validate.
    """
    if sudo_credentials_cached():
        return
    activity("sudo", "sudo access required for chroot builds")
    result = subprocess.run(["sudo", "-v"], check=False)
    if result.returncode != 0:
        raise BuildToolError(
            message="Could not obtain sudo credentials",
            tool="sudo",
            command=["sudo", "-v"],
            returncode=result.returncode,
        )


class SudoKeepAlive:
    """Context manager refreshing sudo credentials on an interval.

    Usage:
        with SudoKeepAlive(enabled=options.chroot):
            orchestrator.run()
    """

    def __init__(self, interval: float = DEFAULT_REFRESH_SECONDS, enabled: bool = True) -> None:
        self.interval = interval
        # Root needs no sudo at all.
        self.enabled = enabled and os.geteuid() != 0
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self.refreshes = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _refresh_loop(self) -> None:
        while not self._stop.wait(self.interval):
            result = subprocess.run(
                ["sudo", "-n", "-v"],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
            )
            self.refreshes += 1
            if result.returncode != 0:
                logger.warning("sudo credential refresh failed (exit %s)", result.returncode)

    def start(self) -> None:
        if not self.enabled or self.running:
            return
        ensure_sudo_cached()
        self._stop.clear()
        self._thread = threading.Thread(target=self._refresh_loop, name="sudo-keepalive", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    def __enter__(self) -> SudoKeepAlive:
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.stop()
