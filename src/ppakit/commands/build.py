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

"""Implementation of `ppakit build` command.

Packages one upstream source tree for every configured distribution and
uploads the results.
"""

from __future__ import annotations

import sys
from pathlib import Path

import typer

from ppakit.build.pipeline import package_source
from ppakit.commands.common import EXIT_SUCCESS, command_error, resolve_options
from ppakit.config import load_package_config
from ppakit.debpkg.metadata import resolve_metadata
from ppakit.exceptions import PpakitError
from ppakit.run import RunContext, activity


def build(
    source_dir: Path = typer.Argument(..., help="Extracted upstream source tree"),
    config: Path = typer.Option(..., "--config", "-c", help="Package configuration (YAML)"),
    distribution: list[str] = typer.Option(
        None, "--distribution", "-d", help="Target distribution (repeatable; default: from config)"
    ),
    chroot: bool = typer.Option(False, "--chroot", help="Also build binary packages with pbuilder"),
    no_upload: bool = typer.Option(False, "--no-upload", help="Build only, do not run dput"),
    no_tests: bool = typer.Option(False, "--no-tests", help="Disable the package test suite"),
    continue_on_error: bool = typer.Option(
        False, "--continue-on-error", help="Attempt remaining distributions after a failure"
    ),
    overwrite: bool = typer.Option(False, "--overwrite", help="Replace an existing debian/ directory"),
) -> None:
    """Build source packages for one source tree and upload them."""
    exit_code = EXIT_SUCCESS
    with RunContext("build") as run:
        try:
            raw = load_package_config(config)
            if distribution:
                raw = {**raw, "distributions": list(distribution)}
            metadata = resolve_metadata(raw, base_dir=config.parent)
            options = resolve_options(
                run.cfg,
                raw,
                chroot=chroot,
                no_upload=no_upload,
                no_tests=no_tests,
                continue_on_error=continue_on_error,
            )
            run.log_event(
                {
                    "event": "build.start",
                    "package": metadata.name,
                    "version": metadata.full_version,
                    "distributions": list(metadata.distributions),
                }
            )
            records = package_source(source_dir, metadata, options, overwrite=overwrite, run=run)
            for record in records:
                activity("build", f"{record.distribution}: {record.version} {record.state.value}")
            run.write_summary(records=[r.to_dict() for r in records])
        except PpakitError as e:
            exit_code = command_error(run, "build", e)

    sys.exit(exit_code)
