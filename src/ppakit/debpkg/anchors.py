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

"""Anchored text edits for files generated by dh_make.

The skeleton dh_make writes is edited in place. Every edit names the anchor
(a line or token the skeleton is known to contain) and fails with a
TemplatingError when the anchor is absent, so a changed skeleton format can
never produce a half-populated control file.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from pathlib import Path

from ppakit.exceptions import TemplatingError


def read_text(path: Path) -> str:
    """Read a skeleton file, treating a missing file as a missing anchor."""
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise TemplatingError(
            message=f"Expected file not found: {path}",
            anchor=path.name,
            path=str(path),
        ) from None


def require_anchor(content: str, pattern: str, anchor: str, path: Path) -> re.Match[str]:
    """Return the first match of pattern or raise TemplatingError."""
    match = re.search(pattern, content, re.MULTILINE)
    if match is None:
        raise TemplatingError(
            message=f"Anchor '{anchor}' not found in {path}",
            anchor=anchor,
            path=str(path),
        )
    return match


def replace_anchor(content: str, pattern: str, replacement: str, anchor: str, path: Path) -> str:
    """Replace the first match of pattern with literal replacement text."""
    match = require_anchor(content, pattern, anchor, path)
    return content[: match.start()] + replacement + content[match.end() :]


def field_pattern(name: str) -> str:
    """Pattern for a deb822 field including its continuation lines."""
    return rf"^{re.escape(name)}:[^\n]*(?:\n[ \t]+[^\n]*)*"


def field_items(field_text: str) -> list[str]:
    """Split a (possibly folded) relationship field value into entries."""
    value = field_text.split(":", 1)[1]
    return [item.strip() for item in value.replace("\n", " ").split(",") if item.strip()]


def rewrite_field(
    content: str,
    name: str,
    transform: Callable[[list[str]], list[str]],
    path: Path,
) -> str:
    """Rewrite a relationship field's entries, folding it onto one line.

    dh_make has written these fields both on one line and wrapped one entry
    per line; both forms are accepted and the result is always one line.
    """
    match = require_anchor(content, field_pattern(name), f"{name}:", path)
    items = transform(field_items(match.group(0)))
    rendered = f"{name}: {', '.join(items)}"
    return content[: match.start()] + rendered + content[match.end() :]
