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

"""Turns a dh_make skeleton into a populated debian/ directory.

``template_package`` applies the distribution-independent edits once per
package. ``apply_distribution`` is called by the build orchestrator for each
target series and rewrites the changelog header and the debhelper compat
declaration. All edits are anchored (see ``ppakit.debpkg.anchors``).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from ppakit.debpkg.changelog import replace_placeholder_entry, rewrite_top_entry
from ppakit.debpkg.compat import CompatibilityDescriptor
from ppakit.debpkg.control import apply_compat, update_control
from ppakit.debpkg.metadata import PackageMetadata
from ppakit.debpkg.rules import update_rules

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DebianPaths:
    """Locations of the files the templater edits."""

    debian_dir: Path

    @classmethod
    def for_source(cls, source_dir: Path) -> DebianPaths:
        return cls(debian_dir=source_dir / "debian")

    @property
    def changelog(self) -> Path:
        return self.debian_dir / "changelog"

    @property
    def control(self) -> Path:
        return self.debian_dir / "control"

    @property
    def rules(self) -> Path:
        return self.debian_dir / "rules"

    @property
    def compat(self) -> Path:
        return self.debian_dir / "compat"


class ControlFileTemplater:
    """Applies package metadata to the debian/ files of one source tree."""

    def __init__(self, source_dir: Path, metadata: PackageMetadata) -> None:
        self.source_dir = source_dir
        self.metadata = metadata
        self.paths = DebianPaths.for_source(source_dir)

    def template_package(self, run_tests: bool = True) -> None:
        """Apply the once-per-package edits.

        Args:
            run_tests: When False, the test target is overridden to do nothing.
        """
        logger.debug("Templating %s", self.paths.debian_dir)
        replace_placeholder_entry(self.paths.changelog, self.metadata.version)
        update_control(self.paths.control, self.metadata)
        update_rules(self.paths.rules, run_tests=run_tests)

    def apply_distribution(
        self,
        version: str,
        descriptor: CompatibilityDescriptor,
        urgency: str = "medium",
    ) -> None:
        """Point the tree at one distribution: changelog header and compat."""
        self.rewrite_changelog(version, descriptor.distribution, urgency)
        self.apply_compat(descriptor)

    def rewrite_changelog(self, version: str, distribution: str, urgency: str = "medium") -> None:
        rewrite_top_entry(self.paths.changelog, version, distribution, urgency)

    def apply_compat(self, descriptor: CompatibilityDescriptor) -> None:
        logger.debug(
            "debhelper compat %s for %s (legacy file: %s)",
            descriptor.level,
            descriptor.distribution,
            descriptor.write_compat_file,
        )
        apply_compat(self.paths.control, self.paths.compat, descriptor)
