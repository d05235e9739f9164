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

"""Implementation of `ppakit automate` command.

Discovers upstream releases on a download index and packages every release
that has not been packaged before.
"""

from __future__ import annotations

import sys
from pathlib import Path

import requests
import typer

from ppakit.build.pipeline import automate_releases
from ppakit.commands.common import EXIT_SUCCESS, command_error, resolve_options
from ppakit.config import load_package_config
from ppakit.exceptions import ConfigurationError, PpakitError
from ppakit.run import RunContext, activity
from ppakit.tracker import VersionTracker
from ppakit.upstream.releases import discover_releases


def automate(
    config: Path = typer.Option(..., "--config", "-c", help="Package configuration (YAML)"),
    index_url: str = typer.Option("", "--index-url", help="Download index listing release tarballs"),
    upstream_name: str = typer.Option("", "--upstream-name", help="Tarball name prefix (default: package name)"),
    version_filter: str = typer.Option("", "--version-filter", help="Regex versions must match"),
    chroot: bool = typer.Option(False, "--chroot", help="Also build binary packages with pbuilder"),
    no_upload: bool = typer.Option(False, "--no-upload", help="Build only, do not run dput"),
    no_tests: bool = typer.Option(False, "--no-tests", help="Disable the package test suite"),
) -> None:
    """Package every new upstream release found on a download index."""
    exit_code = EXIT_SUCCESS
    with RunContext("automate") as run:
        try:
            raw = load_package_config(config)
            index = index_url or raw.get("index_url")
            if not index:
                raise ConfigurationError(message="No release index: pass --index-url or set index_url")
            prefix = upstream_name or raw.get("upstream_name") or raw.get("name")
            if not prefix:
                raise ConfigurationError(message="No upstream tarball name: set upstream_name or name")
            options = resolve_options(run.cfg, raw, chroot=chroot, no_upload=no_upload, no_tests=no_tests)
            tracker = VersionTracker(run.paths["tracking_dir"])
            tracker.ensure_ready()

            session = requests.Session()
            releases = discover_releases(
                str(index),
                str(prefix),
                version_filter=version_filter or raw.get("version_filter"),
                session=session,
            )
            activity("automate", f"Found {len(releases)} releases at {index}")

            report = automate_releases(
                releases,
                raw,
                tracker,
                options,
                run.paths["work_root"],
                base_dir=config.parent,
                session=session,
                run=run,
            )
            activity(
                "automate",
                f"Packaged {len(report.packaged)}, skipped {len(report.skipped)} already packaged",
            )
            run.write_summary(**report.to_dict())
        except PpakitError as e:
            exit_code = command_error(run, "automate", e)

    sys.exit(exit_code)
