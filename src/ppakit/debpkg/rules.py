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

"""Edits to the debian/rules file generated by dh_make."""

from __future__ import annotations

import re
from pathlib import Path

from ppakit.debpkg.anchors import read_text, replace_anchor, require_anchor

VERBOSE_TOGGLE = r"^#?[ \t]*export DH_VERBOSE[ \t]*=[^\n]*$"
DH_CATCH_ALL = r"^%:"

# dh_dwz aborts on binaries whose debug sections are already compressed.
DWZ_OVERRIDE = "override_dh_dwz:\n\t# debug sections are shipped compressed; nothing to do\n"
NO_TESTS_OVERRIDE = "override_dh_auto_test:\n\t# test suite disabled by configuration\n"


def has_override(content: str, override_name: str) -> bool:
    """Check if rules text has a specific override target.

    Args:
        content: debian/rules text.
        override_name: Name of the override (e.g., 'dh_dwz').
    """
    return bool(re.search(rf"^override_{re.escape(override_name)}\s*:", content, re.MULTILINE))


def enable_verbose(content: str, path: Path) -> str:
    """Force DH_VERBOSE on by rewriting its (usually commented) assignment."""
    return replace_anchor(content, VERBOSE_TOGGLE, "export DH_VERBOSE = 1", "export DH_VERBOSE", path)


def append_override(content: str, override_name: str, block: str, path: Path) -> str:
    """Append an override target after the dh catch-all rule.

    Existing overrides of the same target are left alone.
    """
    require_anchor(content, DH_CATCH_ALL, "%:", path)
    if has_override(content, override_name):
        return content
    return content.rstrip("\n") + "\n\n" + block


def populate_rules(content: str, path: Path, run_tests: bool = True) -> str:
    """Apply the verbose toggle and build-rule overrides."""
    content = enable_verbose(content, path)
    content = append_override(content, "dh_dwz", DWZ_OVERRIDE, path)
    if not run_tests:
        content = append_override(content, "dh_auto_test", NO_TESTS_OVERRIDE, path)
    return content


def update_rules(rules_path: Path, run_tests: bool = True) -> None:
    """Edit debian/rules in place."""
    content = read_text(rules_path)
    rules_path.write_text(populate_rules(content, rules_path, run_tests=run_tests), encoding="utf-8")
