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

"""Helpers shared by the ppakit commands."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from ppakit.build.orchestrator import BuildOptions, FailurePolicy
from ppakit.exceptions import ConfigurationError, PpakitError
from ppakit.run import activity, report_error

if TYPE_CHECKING:
    from ppakit.run import RunContext

EXIT_SUCCESS = 0


def _flag(raw: Mapping[str, Any], key: str) -> bool:
    value = raw.get(key, False)
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "yes", "1", "on"):
        return True
    if isinstance(value, str) and value.strip().lower() in ("false", "no", "0", "off", ""):
        return False
    raise ConfigurationError(message=f"'{key}' must be a boolean, got {value!r}")


def resolve_options(
    cfg: dict[str, Any],
    raw: Mapping[str, Any],
    *,
    chroot: bool = False,
    no_upload: bool = False,
    no_tests: bool = False,
    continue_on_error: bool = False,
) -> BuildOptions:
    """Combine tool config, package config toggles and CLI flags.

    A CLI flag switches its toggle on even when the package config leaves
    it off.
    """
    chroot = chroot or _flag(raw, "chroot")
    no_upload = no_upload or _flag(raw, "no_upload")
    no_tests = no_tests or _flag(raw, "no_tests")

    overrides: dict[str, Any] = {
        "chroot": chroot,
        "upload": not no_upload,
        "run_tests": not no_tests,
    }
    if continue_on_error:
        overrides["failure_policy"] = FailurePolicy.CONTINUE
    return BuildOptions.from_config(cfg, **overrides)


def command_error(run: RunContext, phase: str, error: PpakitError) -> int:
    """Report a failed command and return its exit code.

    One diagnostic line goes to stderr; the run log gets a structured event
    and a failed summary. Nothing on disk is cleaned up.
    """
    report_error(error.message)
    activity(phase, f"ERROR: {error.message}")
    run.log_event(
        {
            "event": f"{phase}.error",
            "error_type": type(error).__name__,
            "message": error.message,
            "exit_code": error.exit_code,
        }
    )
    run.write_summary(status="failed", error=error.message, exit_code=error.exit_code)
    return error.exit_code
