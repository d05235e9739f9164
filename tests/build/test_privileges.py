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

"""Tests for ppakit.build.privileges module."""

from __future__ import annotations

import subprocess
import time
from collections.abc import Callable
from unittest.mock import patch

import pytest

from ppakit.build import privileges
from ppakit.exceptions import BuildToolError


def _completed(returncode: int = 0) -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(args=[], returncode=returncode)


def _wait_for(predicate: Callable[[], bool], timeout: float = 5.0) -> None:
    deadline = time.monotonic() + timeout
    while not predicate():
        assert time.monotonic() < deadline, "timed out"
        time.sleep(0.005)


class TestEnsureSudoCached:
    def test_already_cached(self) -> None:
        with patch("subprocess.run", return_value=_completed(0)) as mock_run:
            privileges.ensure_sudo_cached()
        mock_run.assert_called_once()
        assert mock_run.call_args.args[0] == ["sudo", "-n", "true"]

    def test_prompts_when_not_cached(self) -> None:
        with patch("subprocess.run", side_effect=[_completed(1), _completed(0)]) as mock_run:
            privileges.ensure_sudo_cached()
        assert mock_run.call_args.args[0] == ["sudo", "-v"]

    def test_refused(self) -> None:
        with (
            patch("subprocess.run", side_effect=[_completed(1), _completed(1)]),
            pytest.raises(BuildToolError) as excinfo,
        ):
            privileges.ensure_sudo_cached()
        assert excinfo.value.tool == "sudo"


class TestSudoKeepAlive:
    def test_disabled_does_nothing(self) -> None:
        with patch("subprocess.run") as mock_run, privileges.SudoKeepAlive(enabled=False) as keepalive:
            assert not keepalive.running
        mock_run.assert_not_called()

    def test_disabled_for_root(self) -> None:
        with patch("os.geteuid", return_value=0):
            assert privileges.SudoKeepAlive().enabled is False

    def test_refreshes_until_stopped(self) -> None:
        with patch("os.geteuid", return_value=1000), patch("subprocess.run", return_value=_completed(0)) as mock_run:
            keepalive = privileges.SudoKeepAlive(interval=0.01)
            with keepalive:
                assert keepalive.running
                _wait_for(lambda: keepalive.refreshes >= 2)
            assert not keepalive.running

        refresh_calls = [c for c in mock_run.call_args_list if c.args[0] == ["sudo", "-n", "-v"]]
        assert len(refresh_calls) >= 2

    def test_stopped_on_exception(self) -> None:
        with patch("os.geteuid", return_value=1000), patch("subprocess.run", return_value=_completed(0)):
            keepalive = privileges.SudoKeepAlive(interval=0.01)
            with pytest.raises(RuntimeError), keepalive:
                raise RuntimeError("build failed")
            assert not keepalive.running

    def test_failed_refresh_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with (
            patch("os.geteuid", return_value=1000),
            patch("subprocess.run", side_effect=[_completed(0)] + [_completed(1)] * 1000),
        ):
            keepalive = privileges.SudoKeepAlive(interval=0.01)
            with keepalive:
                _wait_for(lambda: keepalive.refreshes >= 1)

        assert "refresh failed" in caplog.text
