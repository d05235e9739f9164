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

"""Upstream release discovery.

Scrapes an HTML download index for release tarball links and produces the
(version, archive location) pairs the automation flow iterates over.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from urllib.parse import urljoin, urlsplit

import requests
from debian.debian_support import Version

from ppakit.exceptions import UpstreamError

logger = logging.getLogger(__name__)

HREF_PATTERN = re.compile(r"""href\s*=\s*["']([^"']+)["']""", re.IGNORECASE)

# Preferred compression when a release is offered in several formats
COMPRESSION_PREFERENCE = ("tar.xz", "tar.gz", "tgz", "tar.bz2")


@dataclass(frozen=True)
class UpstreamRelease:
    """One upstream release and where its tarball lives."""

    version: str
    url: str

    @property
    def filename(self) -> str:
        return urlsplit(self.url).path.rsplit("/", 1)[-1]


def tarball_pattern(name: str) -> re.Pattern[str]:
    """Pattern matching "<name>-<version>.tar.xz" (or .tar.gz, .tgz, .tar.bz2)."""
    return re.compile(rf"^{re.escape(name)}-(?P<version>\d[^/]*?)\.(?P<ext>tar\.xz|tar\.gz|tgz|tar\.bz2)$")


def parse_release_links(
    html: str,
    base_url: str,
    name: str,
    version_filter: str | None = None,
) -> list[UpstreamRelease]:
    """Extract releases from the links of an index page.

    Args:
        html: Index page markup.
        base_url: URL the page was fetched from (relative links resolve
            against it).
        name: Upstream tarball name prefix (e.g., "Python").
        version_filter: Optional regex the version must fully match.

    Returns:
        Releases sorted oldest first, one per version.
    """
    pattern = tarball_pattern(name)
    wanted = re.compile(version_filter) if version_filter else None
    found: dict[str, tuple[int, UpstreamRelease]] = {}

    for href in HREF_PATTERN.findall(html):
        url = urljoin(base_url, href)
        filename = urlsplit(url).path.rsplit("/", 1)[-1]
        match = pattern.match(filename)
        if not match:
            continue
        version = match.group("version")
        if wanted is not None and not wanted.fullmatch(version):
            continue
        try:
            Version(version)
        except ValueError:
            logger.warning("Ignoring %s: %r is not a valid Debian upstream version", filename, version)
            continue
        rank = COMPRESSION_PREFERENCE.index(match.group("ext"))
        current = found.get(version)
        if current is None or rank < current[0]:
            found[version] = (rank, UpstreamRelease(version=version, url=url))

    return sorted((rel for _, rel in found.values()), key=lambda r: Version(r.version))


def discover_releases(
    index_url: str,
    name: str,
    version_filter: str | None = None,
    session: requests.Session | None = None,
    timeout: int = 30,
) -> list[UpstreamRelease]:
    """Fetch an index page and return the releases it links to.

    Raises:
        UpstreamError: If the page cannot be fetched.
    """
    session = session or requests.Session()
    try:
        resp = session.get(index_url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as e:
        raise UpstreamError(message=f"Could not fetch release index {index_url}: {e}", url=index_url) from e

    releases = parse_release_links(resp.text, index_url, name, version_filter)
    logger.debug("Found %d releases of %s at %s", len(releases), name, index_url)
    return releases
