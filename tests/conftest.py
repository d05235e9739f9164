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

"""Pytest fixtures and configuration for ppakit tests."""

from __future__ import annotations

import tempfile
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest

from ppakit.debpkg.metadata import PackageMetadata, resolve_metadata

# What dh_make writes for a single-binary package.
DH_MAKE_CHANGELOG = """\
{name} ({version}-1) UNRELEASED; urgency=medium

  * Initial release (Closes: #nnnn)  <nnnn is the bug number of your ITP>

 -- Jane Doe <jane@example.com>  Mon, 01 Jan 2024 12:00:00 +0000
"""

DH_MAKE_CONTROL = """\
Source: {name}
Section: unknown
Priority: optional
Maintainer: Jane Doe <jane@example.com>
Build-Depends: debhelper-compat (= 13)
Standards-Version: 4.6.2
Homepage: <insert the upstream URL, if relevant>
Rules-Requires-Root: no
#Vcs-Git: https://salsa.debian.org/debian/{name}.git
#Vcs-Browser: https://salsa.debian.org/debian/{name}

Package: {name}
Architecture: any
Depends: ${{shlibs:Depends}}, ${{misc:Depends}}
Description: <insert up to 60 chars description>
 <insert long description, indented with spaces>
"""

DH_MAKE_RULES = """\
#!/usr/bin/make -f
# See debhelper(7) (uncomment to enable)
# output every command that modifies files on the build system.
#export DH_VERBOSE = 1


# see FEATURE AREAS in dpkg-buildflags(1)
#export DEB_BUILD_MAINT_OPTIONS = hardening=+all

%:
\tdh $@
"""


@pytest.fixture
def temp_home(monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """Create a temporary home directory and set HOME/XDG paths."""
    with tempfile.TemporaryDirectory() as tmpdir:
        home = Path(tmpdir)
        monkeypatch.setenv("HOME", str(home))
        monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
        monkeypatch.setenv("XDG_CACHE_HOME", str(home / ".cache"))
        # Also patch Path.home() to return our temp home
        monkeypatch.setattr(Path, "home", lambda: home)
        yield home


@pytest.fixture
def mock_config(temp_home: Path) -> Path:
    """Create a tool config whose paths all live under the temp home."""
    config_dir = temp_home / ".config" / "ppakit"
    config_dir.mkdir(parents=True, exist_ok=True)
    (temp_home / "packaged").mkdir()
    config_file = config_dir / "config.yaml"
    config_file.write_text("""
paths:
  cache_root: "~/.cache/ppakit"
  runs_root: "~/.cache/ppakit/runs"
  work_root: "~/.cache/ppakit/work"
  tracking_dir: "~/packaged"
  pbuilder_root: "~/pbuilder"
  build_result: "~/pbuilder/result"

defaults:
  archive_revision: 1
  urgency: "medium"
  failure_policy: "abort"
  sudo_refresh_seconds: 60
""")
    return config_file


@pytest.fixture
def package_raw() -> dict[str, Any]:
    """A complete flat package configuration."""
    return {
        "name": "foo",
        "version": "1.0-sav1",
        "copyright": "mit",
        "ppa": "ppa:example/foo",
        "email": "jane@example.com",
        "maintainer": "Jane Doe",
        "description": "frobnicates widgets",
        "homepage": "https://example.com/foo",
        "distributions": ["bionic", "focal"],
    }


@pytest.fixture
def metadata(package_raw: dict[str, Any]) -> PackageMetadata:
    return resolve_metadata(package_raw)


def write_dh_make_files(
    source_dir: Path,
    name: str,
    version: str,
    control: str | None = None,
    changelog: str | None = None,
    rules: str | None = None,
) -> Path:
    """Write debian/changelog, control and rules the way dh_make does."""
    debian = source_dir / "debian"
    debian.mkdir(parents=True)
    (debian / "changelog").write_text(
        changelog if changelog is not None else DH_MAKE_CHANGELOG.format(name=name, version=version)
    )
    (debian / "control").write_text(control if control is not None else DH_MAKE_CONTROL.format(name=name))
    (debian / "rules").write_text(rules if rules is not None else DH_MAKE_RULES)
    return debian


@pytest.fixture
def dh_make_writer() -> Callable[..., Path]:
    """Return write_dh_make_files for fakes standing in for dh_make."""
    return write_dh_make_files


@pytest.fixture
def make_skeleton(tmp_path: Path) -> Callable[..., Path]:
    """Return a factory writing a dh_make style debian/ directory.

    The factory returns the source directory containing debian/.
    """

    def _make(name: str = "foo", version: str = "1.0", **files: str) -> Path:
        source_dir = tmp_path / f"{name}-{version}"
        write_dh_make_files(source_dir, name, version, **files)
        return source_dir

    return _make
