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

"""Tests for ppakit.build.pbuilder module."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from ppakit.build import pbuilder
from ppakit.exceptions import ConfigurationError


@pytest.fixture
def chroot_config(tmp_path: Path) -> pbuilder.PbuilderConfig:
    root = tmp_path / "pbuilder"
    root.mkdir()
    (root / "focal.tgz").write_bytes(b"")
    return pbuilder.PbuilderConfig(
        dsc_path=tmp_path / "foo_1.0-1~focal1.dsc",
        distribution="focal",
        pbuilder_root=root,
        build_result=root / "result",
    )


class TestBuildPbuilderCommand:
    def test_command_as_user(self, chroot_config: pbuilder.PbuilderConfig) -> None:
        with patch("os.geteuid", return_value=1000):
            cmd = pbuilder.build_pbuilder_command(chroot_config)

        assert cmd == [
            "sudo",
            "pbuilder",
            "--build",
            "--basetgz",
            str(chroot_config.pbuilder_root / "focal.tgz"),
            "--distribution",
            "focal",
            "--buildresult",
            str(chroot_config.build_result),
            str(chroot_config.dsc_path),
        ]

    def test_no_sudo_as_root(self, chroot_config: pbuilder.PbuilderConfig) -> None:
        with patch("os.geteuid", return_value=0):
            cmd = pbuilder.build_pbuilder_command(chroot_config)
        assert cmd[0] == "pbuilder"

    def test_extra_args_before_dsc(self, chroot_config: pbuilder.PbuilderConfig) -> None:
        chroot_config.extra_args = ["--debbuildopts", "-b"]
        with patch("os.geteuid", return_value=0):
            cmd = pbuilder.build_pbuilder_command(chroot_config)
        assert cmd[-3:] == ["--debbuildopts", "-b", str(chroot_config.dsc_path)]


class TestFindBinaries:
    def test_matches_version_only(self, tmp_path: Path) -> None:
        for name in (
            "foo_1.0-1~focal1_amd64.deb",
            "libfoo1_1.0-1~focal1_amd64.deb",
            "foo_1.0-1~jammy1_amd64.deb",
            "foo_1.0-1~focal1.dsc",
        ):
            (tmp_path / name).write_bytes(b"")

        found = pbuilder.find_binaries(tmp_path, "1.0-1~focal1")

        assert [p.name for p in found] == ["foo_1.0-1~focal1_amd64.deb", "libfoo1_1.0-1~focal1_amd64.deb"]

    def test_missing_dir(self, tmp_path: Path) -> None:
        assert pbuilder.find_binaries(tmp_path / "nope", "1.0") == []


class TestRunPbuilder:
    def test_missing_base_tarball(self, chroot_config: pbuilder.PbuilderConfig) -> None:
        chroot_config.distribution = "noble"
        with pytest.raises(ConfigurationError, match="noble.tgz"):
            pbuilder.run_pbuilder(chroot_config, "1.0-1~noble1")

    def test_collects_binaries(self, chroot_config: pbuilder.PbuilderConfig) -> None:
        chroot_config.build_result.mkdir()
        (chroot_config.build_result / "foo_1.0-1~focal1_all.deb").write_bytes(b"")

        with patch("subprocess.run") as mock_run:
            mock_run.return_value = subprocess.CompletedProcess(args=[], returncode=0, stdout="")
            result = pbuilder.run_pbuilder(chroot_config, "1.0-1~focal1")

        assert result.result_dir == chroot_config.build_result
        assert [b.name for b in result.binaries] == ["foo_1.0-1~focal1_all.deb"]
