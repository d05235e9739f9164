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

"""Edits to the debian/control file generated by dh_make."""

from __future__ import annotations

import re
from pathlib import Path

from ppakit.debpkg.anchors import read_text, replace_anchor, rewrite_field
from ppakit.debpkg.compat import CompatibilityDescriptor
from ppakit.debpkg.metadata import PackageMetadata
from ppakit.exceptions import TemplatingError

LONG_DESCRIPTION_PLACEHOLDER = r"^[ \t]*<insert long description[^\n]*$"
DEBHELPER_TOKEN = re.compile(r"^debhelper(?:-compat)?(?:\s|\(|$)")


def append_dependencies(content: str, field: str, deps: tuple[str, ...], path: Path) -> str:
    """Append dependencies to a field, keeping what dh_make put there."""
    if not deps:
        return content
    return rewrite_field(content, field, lambda items: items + list(deps), path)


def replace_compat_dependency(content: str, descriptor: CompatibilityDescriptor, path: Path) -> str:
    """Swap the debhelper/debhelper-compat entry in Build-Depends."""

    def _swap(items: list[str]) -> list[str]:
        for idx, item in enumerate(items):
            if DEBHELPER_TOKEN.match(item):
                return items[:idx] + [descriptor.dependency] + items[idx + 1 :]
        raise TemplatingError(
            message=f"Anchor 'debhelper' not found in Build-Depends of {path}",
            anchor="debhelper",
            path=str(path),
        )

    return rewrite_field(content, "Build-Depends", _swap, path)


def populate_control(content: str, metadata: PackageMetadata, path: Path) -> str:
    """Fill the dh_make control skeleton with package metadata.

    Args:
        content: Current debian/control text.
        metadata: Resolved package metadata.
        path: Path of the file (for error messages).

    Returns:
        The edited control text.
    """
    content = append_dependencies(content, "Build-Depends", metadata.build_depends, path)
    content = append_dependencies(content, "Depends", metadata.depends, path)

    content = replace_anchor(content, r"^Section:[^\n]*$", f"Section: {metadata.section}", "Section:", path)
    content = replace_anchor(
        content, r"^Homepage:[^\n]*$", f"Homepage: {metadata.homepage}", "Homepage:", path
    )
    content = replace_anchor(
        content,
        r"^Description:[^\n]*$",
        f"Description: {metadata.description}",
        "Description:",
        path,
    )
    content = replace_anchor(
        content,
        LONG_DESCRIPTION_PLACEHOLDER,
        metadata.long_description,
        "<insert long description>",
        path,
    )

    # Absent URLs leave the directives commented out.
    if metadata.vcs_browser:
        content = replace_anchor(
            content,
            r"^#\s*Vcs-Browser:[^\n]*$",
            f"Vcs-Browser: {metadata.vcs_browser}",
            "#Vcs-Browser:",
            path,
        )
    if metadata.vcs_git:
        content = replace_anchor(
            content, r"^#\s*Vcs-Git:[^\n]*$", f"Vcs-Git: {metadata.vcs_git}", "#Vcs-Git:", path
        )
    return content


def update_control(control_path: Path, metadata: PackageMetadata) -> None:
    """Populate debian/control in place."""
    content = read_text(control_path)
    control_path.write_text(populate_control(content, metadata, control_path), encoding="utf-8")


def apply_compat(control_path: Path, compat_path: Path, descriptor: CompatibilityDescriptor) -> None:
    """Apply a compatibility descriptor to debian/control and debian/compat.

    The same tree is rebuilt for every distribution, so a debian/compat left
    behind by a legacy distribution is removed for declarative ones
    (debhelper refuses to build with both).
    """
    content = read_text(control_path)
    control_path.write_text(replace_compat_dependency(content, descriptor, control_path), encoding="utf-8")

    if descriptor.write_compat_file:
        compat_path.write_text(f"{descriptor.level}\n", encoding="utf-8")
    else:
        compat_path.unlink(missing_ok=True)
