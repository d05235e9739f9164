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

"""Tests for ppakit.debpkg.control module."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from pathlib import Path

import pytest

from ppakit.debpkg import control
from ppakit.debpkg.compat import resolve_compat
from ppakit.debpkg.metadata import PackageMetadata
from ppakit.exceptions import TemplatingError


class TestPopulateControl:
    def test_fills_skeleton(self, make_skeleton: Callable[..., Path], metadata: PackageMetadata) -> None:
        path = make_skeleton() / "debian" / "control"
        content = control.populate_control(path.read_text(), metadata, path)

        assert "Section: misc\n" in content
        assert "Homepage: https://example.com/foo\n" in content
        assert "Description: frobnicates widgets\n frobnicates widgets\n" in content
        assert "<insert" not in content

    def test_appends_dependencies(self, make_skeleton: Callable[..., Path], metadata: PackageMetadata) -> None:
        md = replace(metadata, build_depends=("cmake", "libssl-dev"), depends=("python3",))
        path = make_skeleton() / "debian" / "control"

        content = control.populate_control(path.read_text(), md, path)

        assert "Build-Depends: debhelper-compat (= 13), cmake, libssl-dev\n" in content
        assert "Depends: ${shlibs:Depends}, ${misc:Depends}, python3\n" in content

    def test_vcs_left_commented_when_absent(
        self, make_skeleton: Callable[..., Path], metadata: PackageMetadata
    ) -> None:
        path = make_skeleton() / "debian" / "control"
        content = control.populate_control(path.read_text(), metadata, path)

        assert "#Vcs-Git:" in content
        assert "#Vcs-Browser:" in content

    def test_vcs_uncommented_when_set(self, make_skeleton: Callable[..., Path], metadata: PackageMetadata) -> None:
        md = replace(metadata, vcs_browser="https://git.example.com/foo", vcs_git="https://git.example.com/foo.git")
        path = make_skeleton() / "debian" / "control"

        content = control.populate_control(path.read_text(), md, path)

        assert "\nVcs-Browser: https://git.example.com/foo\n" in content
        assert "\nVcs-Git: https://git.example.com/foo.git\n" in content

    def test_multiline_long_description(
        self, make_skeleton: Callable[..., Path], metadata: PackageMetadata
    ) -> None:
        md = replace(metadata, long_description=" Widgets.\n .\n More widgets.")
        path = make_skeleton() / "debian" / "control"

        content = control.populate_control(path.read_text(), md, path)

        assert content.endswith("Description: frobnicates widgets\n Widgets.\n .\n More widgets.\n")

    @pytest.mark.parametrize(
        ("drop", "anchor"),
        [
            ("Section: unknown\n", "Section:"),
            ("Homepage: <insert the upstream URL, if relevant>\n", "Homepage:"),
            (" <insert long description, indented with spaces>\n", "<insert long description>"),
        ],
    )
    def test_missing_anchor_raises(
        self,
        make_skeleton: Callable[..., Path],
        metadata: PackageMetadata,
        drop: str,
        anchor: str,
    ) -> None:
        path = make_skeleton() / "debian" / "control"
        content = path.read_text().replace(drop, "")

        with pytest.raises(TemplatingError) as excinfo:
            control.populate_control(content, metadata, path)

        assert excinfo.value.anchor == anchor

    def test_missing_vcs_anchor_raises_only_when_needed(
        self, make_skeleton: Callable[..., Path], metadata: PackageMetadata
    ) -> None:
        path = make_skeleton() / "debian" / "control"
        content = "\n".join(line for line in path.read_text().splitlines() if "Vcs-" not in line) + "\n"

        control.populate_control(content, metadata, path)
        with pytest.raises(TemplatingError):
            control.populate_control(content, replace(metadata, vcs_git="https://git.example.com/foo.git"), path)


class TestUpdateControl:
    def test_missing_control_file(self, tmp_path: Path, metadata: PackageMetadata) -> None:
        with pytest.raises(TemplatingError):
            control.update_control(tmp_path / "debian" / "control", metadata)


class TestApplyCompat:
    def test_legacy_writes_compat_file(self, make_skeleton: Callable[..., Path]) -> None:
        debian = make_skeleton() / "debian"

        control.apply_compat(debian / "control", debian / "compat", resolve_compat("xenial"))

        assert (debian / "compat").read_text() == "9\n"
        text = (debian / "control").read_text()
        assert "Build-Depends: debhelper (>= 9)\n" in text
        assert "debhelper-compat" not in text

    def test_declarative_removes_compat_file(self, make_skeleton: Callable[..., Path]) -> None:
        debian = make_skeleton() / "debian"
        control.apply_compat(debian / "control", debian / "compat", resolve_compat("xenial"))

        control.apply_compat(debian / "control", debian / "compat", resolve_compat("focal"))

        assert not (debian / "compat").exists()
        text = (debian / "control").read_text()
        assert "Build-Depends: debhelper-compat (= 12)\n" in text
        assert "debhelper (>=" not in text

    def test_keeps_other_build_depends(self, make_skeleton: Callable[..., Path]) -> None:
        source = make_skeleton()
        ctl = source / "debian" / "control"
        ctl.write_text(ctl.read_text().replace("debhelper-compat (= 13)", "cmake, debhelper (>= 11), python3"))

        control.apply_compat(ctl, source / "debian" / "compat", resolve_compat("noble"))

        assert "Build-Depends: cmake, debhelper-compat (= 13), python3\n" in ctl.read_text()

    def test_no_debhelper_entry_raises(self, make_skeleton: Callable[..., Path]) -> None:
        source = make_skeleton()
        ctl = source / "debian" / "control"
        ctl.write_text(ctl.read_text().replace("debhelper-compat (= 13)", "cmake"))

        with pytest.raises(TemplatingError) as excinfo:
            control.apply_compat(ctl, source / "debian" / "compat", resolve_compat("focal"))
        assert excinfo.value.anchor == "debhelper"

    def test_debhelper_token_does_not_match_other_packages(self) -> None:
        assert control.DEBHELPER_TOKEN.match("debhelper (>= 9)")
        assert control.DEBHELPER_TOKEN.match("debhelper-compat (= 13)")
        assert control.DEBHELPER_TOKEN.match("debhelper")
        assert not control.DEBHELPER_TOKEN.match("debhelper-dev")
        assert not control.DEBHELPER_TOKEN.match("dh-python")
