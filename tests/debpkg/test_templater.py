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

"""Tests for ppakit.debpkg.templater module."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from ppakit.debpkg.changelog import get_top_line
from ppakit.debpkg.compat import resolve_compat
from ppakit.debpkg.metadata import PackageMetadata
from ppakit.debpkg.templater import ControlFileTemplater, DebianPaths
from ppakit.exceptions import TemplatingError


class TestDebianPaths:
    def test_for_source(self, tmp_path: Path) -> None:
        paths = DebianPaths.for_source(tmp_path)
        assert paths.debian_dir == tmp_path / "debian"
        assert paths.changelog == tmp_path / "debian" / "changelog"
        assert paths.control == tmp_path / "debian" / "control"
        assert paths.rules == tmp_path / "debian" / "rules"
        assert paths.compat == tmp_path / "debian" / "compat"


class TestControlFileTemplater:
    def test_template_package(self, make_skeleton: Callable[..., Path], metadata: PackageMetadata) -> None:
        templater = ControlFileTemplater(make_skeleton(), metadata)

        templater.template_package(run_tests=False)

        assert "New upstream version 1.0." in templater.paths.changelog.read_text()
        assert "Section: misc" in templater.paths.control.read_text()
        rules_text = templater.paths.rules.read_text()
        assert "override_dh_dwz:" in rules_text
        assert "override_dh_auto_test:" in rules_text

    def test_apply_distribution_sequence(
        self, make_skeleton: Callable[..., Path], metadata: PackageMetadata
    ) -> None:
        templater = ControlFileTemplater(make_skeleton(), metadata)
        templater.template_package()

        templater.apply_distribution("1.0-sav1~xenial1", resolve_compat("xenial"))
        assert get_top_line(templater.paths.changelog) == "foo (1.0-sav1~xenial1) xenial; urgency=medium"
        assert templater.paths.compat.read_text() == "9\n"

        templater.apply_distribution("1.0-sav1~noble1", resolve_compat("noble"))
        assert get_top_line(templater.paths.changelog) == "foo (1.0-sav1~noble1) noble; urgency=medium"
        assert not templater.paths.compat.exists()
        assert "debhelper-compat (= 13)" in templater.paths.control.read_text()

    def test_failure_leaves_partial_edits(
        self, make_skeleton: Callable[..., Path], metadata: PackageMetadata
    ) -> None:
        source = make_skeleton(rules="#!/usr/bin/make -f\n")
        templater = ControlFileTemplater(source, metadata)

        with pytest.raises(TemplatingError):
            templater.template_package()

        # Earlier edits stay on disk for inspection.
        assert "Section: misc" in templater.paths.control.read_text()
