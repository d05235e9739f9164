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

"""Uploads to the hosted package archive with dput."""

from __future__ import annotations

from pathlib import Path

from ppakit.build.tools import run_tool
from ppakit.exceptions import BuildToolError


def build_dput_command(ppa: str, changes_path: Path) -> list[str]:
    """Build the dput command line (e.g., dput ppa:owner/name foo_source.changes)."""
    return ["dput", ppa, str(changes_path)]


def upload_changes(ppa: str, changes_path: Path, log_path: Path | None = None) -> None:
    """Upload a source .changes file to the archive.

    Raises:
        BuildToolError: If the changes file is missing or dput fails.
    """
    if not changes_path.exists():
        raise BuildToolError(message=f"Changes file not found: {changes_path}", tool="dput")
    run_tool(build_dput_command(ppa, changes_path), tool="dput", log_path=log_path)
