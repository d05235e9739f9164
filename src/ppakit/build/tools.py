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

"""External tool validation and invocation for ppakit builds.

Validates presence of the packaging tools (dh_make, debuild) and, depending
on the run options, pbuilder/sudo for chroot builds and dput for uploads.
``run_tool`` is the single place external commands are executed.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from ppakit.exceptions import BuildToolError, ToolchainMissingError

logger = logging.getLogger(__name__)


@dataclass
class ToolCheck:
    """Result of checking for required external tools."""

    tools: dict[str, Path | None] = field(default_factory=dict)
    missing: list[str] = field(default_factory=list)

    def is_complete(self) -> bool:
        """Return True if all required tools are available."""
        return len(self.missing) == 0


# Required for every run
REQUIRED_TOOLS = [
    "dh_make",
    "debuild",
]

CHROOT_TOOLS = [
    "pbuilder",
    "sudo",
]

UPLOAD_TOOLS = [
    "dput",
]

# Package names for apt install command
TOOL_PACKAGES: dict[str, str] = {
    "dh_make": "dh-make",
    "debuild": "devscripts",
    "pbuilder": "pbuilder",
    "sudo": "sudo",
    "dput": "dput",
}


def find_tool(name: str) -> Path | None:
    """Find an executable tool in PATH."""
    path = shutil.which(name)
    if path:
        return Path(path)
    return None


def check_required_tools(chroot: bool = False, upload: bool = True) -> ToolCheck:
    """Check for the external tools a run needs.

    Args:
        chroot: Also require pbuilder and sudo.
        upload: Also require dput.

    Returns:
        ToolCheck with available tools and list of missing tools.
    """
    wanted = list(REQUIRED_TOOLS)
    if chroot:
        wanted.extend(CHROOT_TOOLS)
    if upload:
        wanted.extend(UPLOAD_TOOLS)

    result = ToolCheck()
    for tool in wanted:
        path = find_tool(tool)
        result.tools[tool] = path
        if path is None:
            result.missing.append(tool)
    return result


def get_missing_tools_message(missing: list[str]) -> str:
    """Generate a user-friendly message for installing missing tools."""
    if not missing:
        return ""
    packages = sorted({TOOL_PACKAGES.get(t, t) for t in missing})
    return f"Missing required tools: {', '.join(missing)} (install with: sudo apt install {' '.join(packages)})"


def require_tools(chroot: bool = False, upload: bool = True) -> ToolCheck:
    """Like check_required_tools, but raise when anything is missing.

    Raises:
        ToolchainMissingError: Naming every missing tool.
    """
    check = check_required_tools(chroot=chroot, upload=upload)
    if not check.is_complete():
        raise ToolchainMissingError(
            message=get_missing_tools_message(check.missing),
            missing=list(check.missing),
        )
    return check


def run_tool(
    cmd: list[str],
    *,
    tool: str,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
    log_path: Path | None = None,
) -> str:
    """Run an external tool synchronously and fail loudly.

    There is deliberately no timeout: a hung build blocks until the process
    is terminated from outside.

    Args:
        cmd: Command and arguments.
        tool: Tool name used in error messages.
        cwd: Working directory.
        env: Environment for the child process.
        log_path: When given, combined output is also written there.

    Returns:
        Combined stdout/stderr of the tool.

    Raises:
        ToolchainMissingError: If the executable cannot be started.
        BuildToolError: If the tool exits non-zero.
    """
    logger.debug("Running %s in %s", " ".join(cmd), cwd or Path.cwd())
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            env=dict(env) if env is not None else None,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            check=False,
        )
    except FileNotFoundError:
        raise ToolchainMissingError(
            message=get_missing_tools_message([cmd[0]]),
            missing=[cmd[0]],
        ) from None

    output = result.stdout or ""
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        log_path.write_text(output, encoding="utf-8")

    if result.returncode != 0:
        message = f"{tool} failed with exit code {result.returncode}"
        if log_path is not None:
            message = f"{message} (log: {log_path})"
        logger.debug("%s output:\n%s", tool, output)
        raise BuildToolError(
            message=message,
            tool=tool,
            command=list(cmd),
            returncode=result.returncode,
            output=output,
        )
    return output
