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

"""Implementation of `ppakit compat` command."""

from __future__ import annotations

import typer

from ppakit.debpkg.compat import SUPPORTED_DISTRIBUTIONS, resolve_compat
from ppakit.exceptions import PpakitError
from ppakit.run import report_error


def compat(
    distributions: list[str] = typer.Argument(None, help="Distributions to show (default: all supported)"),
) -> None:
    """Show how each distribution declares its debhelper compat level."""
    for dist in distributions or SUPPORTED_DISTRIBUTIONS:
        try:
            descriptor = resolve_compat(dist)
        except PpakitError as e:
            report_error(e.message)
            raise typer.Exit(e.exit_code) from None
        compat_file = "debian/compat" if descriptor.write_compat_file else "-"
        typer.echo(f"{dist:<8} level {descriptor.level:<3} {descriptor.dependency:<26} {compat_file}")
