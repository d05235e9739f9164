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

"""debhelper compatibility levels per target distribution.

Each supported Ubuntu series ships a debhelper able to handle one compat
level. From level 11 onwards (bionic) the level is declared through the
``debhelper-compat (= N)`` virtual package. Older series (xenial) predate
that mechanism, so the level has to be written to ``debian/compat`` and the
build dependency must be a lower bound on ``debhelper`` itself. An exact
``debhelper (= 9)`` pin would never resolve against xenial's real
``9.20160115ubuntu3`` version string.
"""

from __future__ import annotations

from dataclasses import dataclass

from ppakit.exceptions import ConfigurationError

# Levels at or below this need debian/compat and a debhelper lower bound.
LEGACY_COMPAT_THRESHOLD = 10

# Ordered oldest first; the order is the default build order.
DEBHELPER_COMPAT_LEVELS: dict[str, int] = {
    "xenial": 9,
    "bionic": 11,
    "focal": 12,
    "jammy": 13,
    "noble": 13,
}

SUPPORTED_DISTRIBUTIONS: tuple[str, ...] = tuple(DEBHELPER_COMPAT_LEVELS)


@dataclass(frozen=True)
class CompatibilityDescriptor:
    """How a distribution's build declares its debhelper compat level."""

    distribution: str
    level: int
    dependency: str
    write_compat_file: bool


def is_supported(distribution: str) -> bool:
    """Return True if the distribution has a known compat level."""
    return distribution in DEBHELPER_COMPAT_LEVELS


def resolve_compat(distribution: str) -> CompatibilityDescriptor:
    """Return the compatibility descriptor for a target distribution.

    Args:
        distribution: Ubuntu series codename (e.g., "focal").

    Returns:
        CompatibilityDescriptor selecting exactly one of the legacy or the
        declarative mechanism.

    Raises:
        ConfigurationError: If the distribution is not supported.
    """
    try:
        level = DEBHELPER_COMPAT_LEVELS[distribution]
    except KeyError:
        supported = ", ".join(SUPPORTED_DISTRIBUTIONS)
        raise ConfigurationError(
            message=f"Unsupported distribution '{distribution}' (supported: {supported})"
        ) from None

    if level <= LEGACY_COMPAT_THRESHOLD:
        return CompatibilityDescriptor(
            distribution=distribution,
            level=level,
            dependency=f"debhelper (>= {level})",
            write_compat_file=True,
        )
    return CompatibilityDescriptor(
        distribution=distribution,
        level=level,
        dependency=f"debhelper-compat (= {level})",
        write_compat_file=False,
    )
