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

"""ppakit exception types with associated exit codes."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class PpakitError(Exception):
    """Base class for ppakit errors with an exit code."""

    message: str = "An error occurred"
    exit_code: int = field(default=1)

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.message} (exit {self.exit_code})"


@dataclass
class ConfigurationError(PpakitError):
    """Invalid package or tool configuration."""

    exit_code: int = field(default=1)


@dataclass
class MissingConfigurationError(ConfigurationError):
    """A mandatory configuration field is absent."""

    field_name: str = ""


@dataclass
class ToolchainMissingError(PpakitError):
    """A required external executable could not be found."""

    exit_code: int = field(default=2)
    missing: list[str] = field(default_factory=list)


@dataclass
class TemplatingError(PpakitError):
    """An expected anchor was not found while editing debian/ files."""

    exit_code: int = field(default=3)
    anchor: str = ""
    path: str = ""


@dataclass
class BuildToolError(PpakitError):
    """An external build, chroot-build or upload tool failed."""

    exit_code: int = field(default=4)
    tool: str = ""
    command: list[str] = field(default_factory=list)
    returncode: int | None = None
    output: str = ""


@dataclass
class UpstreamError(PpakitError):
    """Release discovery, download or extraction failed."""

    exit_code: int = field(default=5)
    url: str = ""
