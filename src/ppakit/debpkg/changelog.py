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

"""Debian changelog handling for ppakit builds.

The dh_make changelog carries exactly one entry. Its description is replaced
once per package; its header line (version, distribution, urgency) is then
rewritten in place for each target distribution, so at any instant the
changelog describes only the distribution currently being built.
"""

from __future__ import annotations

from pathlib import Path

from debian.changelog import Changelog

from ppakit.debpkg.anchors import read_text, replace_anchor
from ppakit.exceptions import TemplatingError

PLACEHOLDER_ENTRY = r"^[ \t]*\* Initial release[^\n]*$"


def upstream_marker(version: str) -> str:
    """Return the changelog entry text used for an upstream version."""
    return f"  * New upstream version {version}."


def generate_build_version(
    upstream_version: str,
    revision: str,
    distribution: str,
    archive_revision: int = 1,
) -> str:
    """Generate the version string for one distribution's upload.

    Format: <upstream>-<revision>~<distribution><archive_revision>

    The "~" sorts the per-distribution versions below the plain
    "<upstream>-<revision>" and the distribution name keeps uploads of the
    same release to different series distinct.
    """
    return f"{upstream_version}-{revision}~{distribution}{archive_revision}"


def replace_placeholder_entry(changelog_path: Path, version: str) -> None:
    """Replace dh_make's "Initial release" entry with the upstream marker."""
    content = read_text(changelog_path)
    content = replace_anchor(
        content,
        PLACEHOLDER_ENTRY,
        upstream_marker(version),
        "* Initial release",
        changelog_path,
    )
    changelog_path.write_text(content, encoding="utf-8")


def rewrite_top_entry(
    changelog_path: Path,
    version: str,
    distribution: str,
    urgency: str = "medium",
) -> None:
    """Overwrite version, distribution and urgency of the top entry.

    Args:
        changelog_path: Path to debian/changelog.
        version: Full build version for this distribution.
        distribution: Target series (e.g., "focal").
        urgency: Upload urgency.

    Raises:
        TemplatingError: If the changelog has no parsable entry.
    """
    content = read_text(changelog_path)
    cl = Changelog(content)
    if len(cl) == 0:
        raise TemplatingError(
            message=f"Anchor 'top changelog entry' not found in {changelog_path}",
            anchor="top changelog entry",
            path=str(changelog_path),
        )

    cl.version = version
    cl.distributions = distribution
    cl.urgency = urgency

    with changelog_path.open("w", encoding="utf-8") as f:
        cl.write_to_open_file(f)


def get_top_line(changelog_path: Path) -> str:
    """Return the header line of the top changelog entry."""
    with changelog_path.open(encoding="utf-8") as f:
        return f.readline().rstrip("\n")
