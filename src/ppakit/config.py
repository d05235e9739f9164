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

"""Configuration utilities for ppakit.

Two kinds of configuration exist:

- the tool configuration in ``~/.config/ppakit/config.yaml`` (paths and run
  defaults), merged over ``DEFAULT_CONFIG``;
- the flat package configuration (``package.yaml``) describing one package,
  which is handed to ``ppakit.debpkg.metadata.resolve_metadata``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from ppakit.exceptions import ConfigurationError

DEFAULT_CONFIG: dict[str, Any] = {
    "paths": {
        "cache_root": "~/.cache/ppakit",
        "runs_root": "~/.cache/ppakit/runs",
        "work_root": "~/.cache/ppakit/work",
        "tracking_dir": "/var/lib/ppakit/packaged",
        "pbuilder_root": "/var/cache/pbuilder",
        "build_result": "/var/cache/pbuilder/result",
    },
    "defaults": {
        "archive_revision": 1,
        "urgency": "medium",
        "failure_policy": "abort",
        "sudo_refresh_seconds": 60,
    },
}


def get_config_path() -> Path:
    """Return the path to the config file."""
    return Path.home() / ".config" / "ppakit" / "config.yaml"


def ensure_config_exists() -> None:
    """Create the config file with defaults if it does not exist."""
    cfg_path = get_config_path()
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    if not cfg_path.exists():
        cfg_path.write_text(yaml.safe_dump(DEFAULT_CONFIG))


def load_config() -> dict[str, Any]:
    """Load configuration from disk and merge with defaults.

    Top-level sections are merged shallowly so a config file that only sets
    ``paths.tracking_dir`` keeps every other default.
    """
    ensure_config_exists()
    cfg_path = get_config_path()
    try:
        raw = yaml.safe_load(cfg_path.read_text()) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(message=f"Invalid config file {cfg_path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigurationError(message=f"Config file {cfg_path} must contain a mapping")

    merged: dict[str, Any] = {}
    for key, val in DEFAULT_CONFIG.items():
        if isinstance(raw.get(key), dict):
            merged[key] = {**val, **raw[key]}
        else:
            merged[key] = dict(val)

    for pkey, pval in merged["paths"].items():
        merged["paths"][pkey] = str(Path(pval).expanduser())

    return merged


def resolve_paths(cfg: dict[str, Any]) -> dict[str, Path]:
    """Return resolved Path objects for configured paths."""
    return {key: Path(str(val)).expanduser().resolve() for key, val in cfg.get("paths", {}).items()}


def load_package_config(path: Path) -> dict[str, Any]:
    """Read a flat package configuration mapping from a YAML file.

    Args:
        path: Path to the package YAML file.

    Returns:
        The raw mapping, unvalidated.

    Raises:
        ConfigurationError: If the file is missing, unparsable or not a mapping.
    """
    if not path.is_file():
        raise ConfigurationError(message=f"Package config not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigurationError(message=f"Invalid package config {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(message=f"Package config {path} must contain a mapping")
    return data


if __name__ == "__main__":
    print(json.dumps(load_config(), indent=2))
