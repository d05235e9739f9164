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

"""Allow `python -m ppakit`."""

from ppakit.cli import app

if __name__ == "__main__":
    app()
