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

"""Source package builds with debuild."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ppakit.build.tools import run_tool

# Options passed to every debuild invocation:
#   --no-tgz-check  the orig tarball is not required to be present
#   --no-lintian    lintian runs are left to the archive
#   -d              build-deps are not installed on the build host (xenial
#                   toolchains in particular never are)
#   -S              source-only upload
#   -z1             fastest compression
#   -i^$ -I^$       ignore patterns matching nothing, so dotfiles shipped in
#                   the upstream release are kept
DEBUILD_OPTIONS = [
    "--no-tgz-check",
    "--no-lintian",
    "-d",
    "-S",
    "-z1",
    "-i^$",
    "-I^$",
]


@dataclass
class SourceBuildResult:
    """Paths of the artifacts debuild -S writes next to the source tree."""

    dsc_path: Path
    changes_path: Path


def build_debuild_command(extra_args: list[str] | None = None) -> list[str]:
    """Build the debuild command line."""
    return ["debuild", *DEBUILD_OPTIONS, *(extra_args or [])]


def source_artifacts(source_dir: Path, package: str, version: str) -> SourceBuildResult:
    """Return where debuild -S puts the .dsc and _source.changes files."""
    parent = source_dir.resolve().parent
    return SourceBuildResult(
        dsc_path=parent / f"{package}_{version}.dsc",
        changes_path=parent / f"{package}_{version}_source.changes",
    )


def build_source_package(
    source_dir: Path,
    package: str,
    version: str,
    log_path: Path | None = None,
) -> SourceBuildResult:
    """Run debuild in a source tree.

    Args:
        source_dir: Source tree with a populated debian/ directory.
        package: Source package name.
        version: Version in the top changelog entry.
        log_path: Optional file receiving debuild output.

    Raises:
        BuildToolError: If debuild fails.
    """
    run_tool(build_debuild_command(), tool="debuild", cwd=source_dir, log_path=log_path)
    return source_artifacts(source_dir, package, version)
