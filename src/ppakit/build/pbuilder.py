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

"""Chroot builds with pbuilder.

Each distribution has a prebuilt base tarball ``<pbuilder_root>/<dist>.tgz``
(created once with ``pbuilder --create``). Binary packages land in a single
system-wide result directory. The base tarball is not locked; two runs
building the same distribution at once must be kept apart by the caller.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from ppakit.build.tools import run_tool
from ppakit.exceptions import ConfigurationError

DEFAULT_PBUILDER_ROOT = Path("/var/cache/pbuilder")
DEFAULT_BUILD_RESULT = Path("/var/cache/pbuilder/result")


@dataclass
class PbuilderConfig:
    """Configuration for one pbuilder invocation."""

    dsc_path: Path
    distribution: str
    pbuilder_root: Path = DEFAULT_PBUILDER_ROOT
    build_result: Path = DEFAULT_BUILD_RESULT
    extra_args: list[str] = field(default_factory=list)

    @property
    def basetgz(self) -> Path:
        return self.pbuilder_root / f"{self.distribution}.tgz"


@dataclass
class ChrootBuildResult:
    """Result of a chroot build."""

    result_dir: Path
    binaries: list[Path] = field(default_factory=list)


def build_pbuilder_command(config: PbuilderConfig) -> list[str]:
    """Build the pbuilder command line, prefixed with sudo unless root."""
    cmd = [
        "pbuilder",
        "--build",
        "--basetgz",
        str(config.basetgz),
        "--distribution",
        config.distribution,
        "--buildresult",
        str(config.build_result),
        *config.extra_args,
        str(config.dsc_path),
    ]
    if os.geteuid() != 0:
        cmd.insert(0, "sudo")
    return cmd


def find_binaries(result_dir: Path, version: str) -> list[Path]:
    """Find .deb files built for a version in the result directory.

    Binary package names may differ from the source name, so only the
    version is matched.
    """
    if not result_dir.is_dir():
        return []
    return sorted(result_dir.glob(f"*_{version}_*.deb"))


def run_pbuilder(config: PbuilderConfig, version: str, log_path: Path | None = None) -> ChrootBuildResult:
    """Build binary packages from a .dsc inside the distribution's chroot.

    Raises:
        ConfigurationError: If the distribution has no base tarball.
        BuildToolError: If pbuilder fails.
    """
    if not config.basetgz.exists():
        raise ConfigurationError(
            message=f"No pbuilder chroot for {config.distribution}: {config.basetgz} does not exist"
        )
    run_tool(build_pbuilder_command(config), tool="pbuilder", log_path=log_path)
    return ChrootBuildResult(
        result_dir=config.build_result,
        binaries=find_binaries(config.build_result, version),
    )
