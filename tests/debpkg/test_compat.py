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

"""Tests for ppakit.debpkg.compat module."""

from __future__ import annotations

import pytest

from ppakit.debpkg import compat
from ppakit.exceptions import ConfigurationError


class TestResolveCompat:
    def test_xenial_is_legacy(self) -> None:
        descriptor = compat.resolve_compat("xenial")

        assert descriptor.level == 9
        assert descriptor.dependency == "debhelper (>= 9)"
        assert descriptor.write_compat_file is True

    def test_focal_is_declarative(self) -> None:
        descriptor = compat.resolve_compat("focal")

        assert descriptor.level == 12
        assert descriptor.dependency == "debhelper-compat (= 12)"
        assert descriptor.write_compat_file is False

    @pytest.mark.parametrize("dist", compat.SUPPORTED_DISTRIBUTIONS)
    def test_pure_and_exactly_one_mode(self, dist: str) -> None:
        first = compat.resolve_compat(dist)
        second = compat.resolve_compat(dist)

        assert first == second
        legacy = first.dependency.startswith("debhelper (>=")
        declarative = first.dependency.startswith("debhelper-compat (=")
        assert legacy != declarative
        assert first.write_compat_file == legacy
        assert (first.level <= compat.LEGACY_COMPAT_THRESHOLD) == legacy

    def test_unsupported(self) -> None:
        with pytest.raises(ConfigurationError, match="Unsupported distribution 'trusty'"):
            compat.resolve_compat("trusty")

    def test_supported_order_is_oldest_first(self) -> None:
        assert compat.SUPPORTED_DISTRIBUTIONS == ("xenial", "bionic", "focal", "jammy", "noble")

    def test_is_supported(self) -> None:
        assert compat.is_supported("jammy")
        assert not compat.is_supported("Jammy")
