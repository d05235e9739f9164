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

"""Skeleton generation with dh_make.

dh_make runs once per package, before any distribution is built, and writes
the debian/ directory that ``ControlFileTemplater`` then edits.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from ppakit.build.tools import run_tool
from ppakit.debpkg.metadata import PackageMetadata
from ppakit.exceptions import ConfigurationError


def build_dh_make_command(metadata: PackageMetadata) -> list[str]:
    """Build the dh_make command line for a package.

    Args:
        metadata: Resolved package metadata.

    Returns:
        dh_make command as a list of arguments.
    """
    cmd = [
        "dh_make",
        "--yes",
        "--single",
        "--createorig",
        "--packagename",
        f"{metadata.name}_{metadata.version}",
        "--email",
        metadata.email,
        "--copyright",
        metadata.copyright.license,
    ]
    if metadata.copyright.is_custom and metadata.copyright.path is not None:
        cmd.extend(["--copyrightfile", str(metadata.copyright.path)])
    return cmd


def dh_make_env(metadata: PackageMetadata) -> dict[str, str]:
    """Environment for dh_make so the maintainer line is right."""
    env = os.environ.copy()
    env["DEBFULLNAME"] = metadata.maintainer_name
    env["DEBEMAIL"] = metadata.email
    return env


def generate_skeleton(
    source_dir: Path,
    metadata: PackageMetadata,
    overwrite: bool = False,
    log_path: Path | None = None,
) -> Path:
    """Run dh_make in a source tree and return its debian/ directory.

    Args:
        source_dir: Extracted upstream source tree.
        metadata: Resolved package metadata.
        overwrite: Remove an existing debian/ directory first.
        log_path: Optional file receiving dh_make output.

    Raises:
        ConfigurationError: If debian/ exists and overwrite is False.
        BuildToolError: If dh_make fails.
    """
    if not source_dir.is_dir():
        raise ConfigurationError(message=f"Source directory not found: {source_dir}")

    debian_dir = source_dir / "debian"
    if debian_dir.exists():
        if not overwrite:
            raise ConfigurationError(
                message=f"{debian_dir} already exists; remove it or pass --overwrite"
            )
        shutil.rmtree(debian_dir)

    run_tool(
        build_dh_make_command(metadata),
        tool="dh_make",
        cwd=source_dir,
        env=dh_make_env(metadata),
        log_path=log_path,
    )
    return debian_dir
