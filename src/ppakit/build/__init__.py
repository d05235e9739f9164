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

"""Build module for ppakit.

Runs the external Debian tools (dh_make, debuild, pbuilder, dput) and
drives the per-distribution build state machine.
"""

from ppakit.build.orchestrator import (
    BuildOptions,
    BuildOrchestrator,
    BuildState,
    DistributionBuildRecord,
    FailurePolicy,
)
from ppakit.build.tools import ToolCheck, check_required_tools, require_tools, run_tool

__all__ = [
    "BuildOptions",
    "BuildOrchestrator",
    "BuildState",
    "DistributionBuildRecord",
    "FailurePolicy",
    "ToolCheck",
    "check_required_tools",
    "require_tools",
    "run_tool",
]
