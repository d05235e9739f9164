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

"""Download and extraction of upstream release tarballs."""

from __future__ import annotations

import logging
import shutil
import tarfile
from pathlib import Path

import requests

from ppakit.exceptions import UpstreamError
from ppakit.upstream.releases import UpstreamRelease

logger = logging.getLogger(__name__)


def download_release(
    release: UpstreamRelease,
    dest_dir: Path,
    session: requests.Session | None = None,
    timeout: int = 300,
) -> Path:
    """Download a release tarball unless it is already present.

    Args:
        release: Release to fetch.
        dest_dir: Download directory.
        session: Optional requests session.
        timeout: Per-request timeout in seconds.

    Returns:
        Path of the downloaded tarball.

    Raises:
        UpstreamError: On HTTP or write errors.
    """
    dest = dest_dir / release.filename
    if dest.exists():
        logger.debug("Using downloaded %s", dest)
        return dest

    dest_dir.mkdir(parents=True, exist_ok=True)
    partial = dest.with_name(dest.name + ".part")
    session = session or requests.Session()
    try:
        with session.get(release.url, timeout=timeout, stream=True) as resp:
            resp.raise_for_status()
            with partial.open("wb") as f:
                for chunk in resp.iter_content(chunk_size=65536):
                    f.write(chunk)
    except (requests.RequestException, OSError) as e:
        partial.unlink(missing_ok=True)
        raise UpstreamError(message=f"Could not download {release.url}: {e}", url=release.url) from e

    partial.rename(dest)
    return dest


def find_source_dir(extract_dir: Path) -> Path:
    """Return the single top-level directory of an extraction, if any."""
    entries = list(extract_dir.iterdir())
    if len(entries) == 1 and entries[0].is_dir():
        return entries[0]
    return extract_dir


def extract_release(tarball_path: Path, dest_dir: Path) -> Path:
    """Extract a tarball into a fresh directory and return the source tree.

    Any previous extraction in dest_dir is removed first: a retried version
    always starts from pristine sources.

    Raises:
        UpstreamError: If the archive cannot be read.
    """
    if dest_dir.exists():
        shutil.rmtree(dest_dir)
    dest_dir.mkdir(parents=True)

    try:
        with tarfile.open(tarball_path, "r:*") as tar:
            tar.extractall(path=dest_dir, filter="data")
    except (tarfile.TarError, OSError) as e:
        raise UpstreamError(message=f"Failed to extract {tarball_path}: {e}") from e

    return find_source_dir(dest_dir)
