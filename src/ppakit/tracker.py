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

"""Tracking of upstream versions that completed the whole pipeline.

A version is recorded as an empty marker file named after it in the tracking
directory. A marker is written only after templating, every distribution's
build and every upload succeeded, and is never updated or removed by ppakit.
A failed run leaves no marker, so the version is redone in full next time.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

from ppakit.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_TRACKING_DIR = Path("/var/lib/ppakit/packaged")

# Versions become file names.
_VALID_VERSION = re.compile(r"^[A-Za-z0-9][A-Za-z0-9.+~:-]*$")


class VersionTracker:
    """Marker-file registry of packaged upstream versions."""

    def __init__(self, directory: Path = DEFAULT_TRACKING_DIR) -> None:
        self.directory = directory

    def ensure_ready(self) -> None:
        """Check the tracking directory exists and is writable.

        Raises:
            ConfigurationError: If it is missing or not writable.
        """
        if not self.directory.is_dir():
            raise ConfigurationError(message=f"Tracking directory does not exist: {self.directory}")
        if not os.access(self.directory, os.W_OK | os.X_OK):
            raise ConfigurationError(message=f"Tracking directory is not writable: {self.directory}")

    def marker_path(self, version: str) -> Path:
        if not _VALID_VERSION.match(version):
            raise ConfigurationError(message=f"Invalid upstream version for tracking: {version!r}")
        return self.directory / version

    def is_packaged(self, version: str) -> bool:
        """Return True if the version already went through the pipeline."""
        return self.marker_path(version).exists()

    def mark_packaged(self, version: str) -> Path:
        """Record a version as packaged and return the marker path."""
        marker = self.marker_path(version)
        marker.touch(exist_ok=True)
        logger.debug("Recorded %s as packaged at %s", version, marker)
        return marker
