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

"""Package metadata resolution.

Turns the flat package configuration mapping into one immutable
``PackageMetadata`` value that every later step receives explicitly.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ppakit.debpkg.compat import SUPPORTED_DISTRIBUTIONS, is_supported
from ppakit.exceptions import ConfigurationError, MissingConfigurationError

logger = logging.getLogger(__name__)

MANDATORY_FIELDS = (
    "name",
    "version",
    "copyright",
    "ppa",
    "email",
    "description",
    "homepage",
)

# License identifiers understood by dh_make --copyright
DH_MAKE_LICENSES = frozenset(
    {
        "apache",
        "artistic",
        "bsd",
        "gpl",
        "gpl2",
        "gpl3",
        "isc",
        "lgpl",
        "lgpl2",
        "lgpl3",
        "mit",
        "custom",
    }
)

DEFAULT_SECTION = "misc"
DEFAULT_REVISION = "1"
DEPENDENCY_DELIMITER = ","
# Placeholder for an empty line inside a deb822 multi-line field.
EMPTY_LINE_PLACEHOLDER = "."


@dataclass(frozen=True)
class CopyrightSpec:
    """Copyright selection passed to dh_make.

    Attributes:
        mode: "custom" when a copyright file is supplied, else "license".
        license: dh_make license identifier ("custom" in custom mode).
        path: Custom copyright file, if any.
    """

    mode: str
    license: str
    path: Path | None = None

    @property
    def is_custom(self) -> bool:
        return self.mode == "custom"


@dataclass(frozen=True)
class PackageMetadata:
    """Validated metadata for one source package."""

    name: str
    version: str
    revision: str
    copyright: CopyrightSpec
    ppa: str
    email: str
    description: str
    long_description: str
    homepage: str
    section: str = DEFAULT_SECTION
    vcs_browser: str | None = None
    vcs_git: str | None = None
    build_depends: tuple[str, ...] = ()
    depends: tuple[str, ...] = ()
    distributions: tuple[str, ...] = SUPPORTED_DISTRIBUTIONS
    maintainer_name: str = ""

    @property
    def full_version(self) -> str:
        """Upstream version plus packaging revision (e.g., "1.0-sav1")."""
        return f"{self.version}-{self.revision}"

    @property
    def maintainer(self) -> str:
        return f"{self.maintainer_name} <{self.email}>"


def _value(raw: Mapping[str, Any], key: str) -> str | None:
    val = raw.get(key)
    if val is None:
        return None
    text = str(val).strip()
    return text or None


def _require(raw: Mapping[str, Any], key: str) -> str:
    val = _value(raw, key)
    if val is None:
        raise MissingConfigurationError(
            message=f"Missing required configuration field: {key}",
            field_name=key,
        )
    return val


def split_list(value: Any) -> list[str]:
    """Split a delimited string (or pass a list through) into entries."""
    if value is None:
        return []
    if isinstance(value, str):
        items: Iterable[Any] = value.split(DEPENDENCY_DELIMITER)
    elif isinstance(value, Iterable):
        items = value
    else:
        items = [value]
    return [str(item) for item in items if str(item) != ""]


def parse_dependencies(value: Any, field_name: str) -> tuple[str, ...]:
    """Parse a dependency field into atomic tokens.

    Entries are split on commas; surrounding whitespace is not trimmed
    because an entry such as ``python3 (>= 3.6)`` or ``a, b`` is exactly
    the configuration mistake that must be rejected.

    Raises:
        ConfigurationError: If any entry contains whitespace.
    """
    deps: list[str] = []
    for entry in split_list(value):
        if re.search(r"\s", entry):
            raise ConfigurationError(
                message=f"Dependency {entry!r} in '{field_name}' contains whitespace"
            )
        deps.append(entry)
    return tuple(deps)


def parse_distributions(value: Any) -> tuple[str, ...]:
    """Validate the target distribution list, defaulting to all supported."""
    if value is None:
        return SUPPORTED_DISTRIBUTIONS

    names: list[str] = []
    for entry in split_list(value):
        name = entry.strip()
        if not name:
            continue
        if not is_supported(name):
            supported = ", ".join(SUPPORTED_DISTRIBUTIONS)
            raise ConfigurationError(
                message=f"Unsupported distribution '{name}' (supported: {supported})"
            )
        if name not in names:
            names.append(name)

    if not names:
        raise ConfigurationError(message="Target distribution list is empty")
    return tuple(names)


def split_version(version: str, revision: str | None) -> tuple[str, str]:
    """Split "1.0-sav1" into upstream and packaging revision.

    An explicit revision wins over one embedded in the version string.
    """
    upstream = version
    embedded = None
    if "-" in version:
        idx = version.rfind("-")
        upstream, embedded = version[:idx], version[idx + 1 :]
        if not upstream or not embedded:
            raise ConfigurationError(message=f"Invalid version '{version}'")
    return upstream, revision or embedded or DEFAULT_REVISION


def normalize_long_description(text: str) -> str:
    """Render a multi-line description as deb822 continuation lines.

    Every line gets exactly one leading space; empty lines become " ." so
    they stay valid continuation lines.
    """
    lines = []
    for line in text.strip("\n").splitlines():
        line = line.rstrip()
        if not line.strip():
            lines.append(f" {EMPTY_LINE_PLACEHOLDER}")
        else:
            lines.append(f" {line}")
    return "\n".join(lines)


def resolve_copyright(value: str, base_dir: Path | None = None, strict: bool = False) -> CopyrightSpec:
    """Resolve the copyright setting to a custom file or a license identifier.

    Args:
        value: Path to a copyright file, or a dh_make license identifier.
        base_dir: Directory relative paths are resolved against.
        strict: Reject identifiers dh_make does not know.
    """
    candidate = Path(value).expanduser()
    if not candidate.is_absolute() and base_dir is not None:
        candidate = base_dir / candidate
    if candidate.is_file():
        return CopyrightSpec(
            mode="custom",
            license="custom",
            path=candidate.resolve(),
        )

    if value not in DH_MAKE_LICENSES:
        if strict:
            known = ", ".join(sorted(DH_MAKE_LICENSES))
            raise ConfigurationError(
                message=f"Unknown license '{value}' and no such copyright file (known: {known})"
            )
        logger.warning("License '%s' is not a known dh_make license; passing it through", value)
    return CopyrightSpec(mode="license", license=value)


def resolve_metadata(
    raw: Mapping[str, Any],
    *,
    base_dir: Path | None = None,
    upstream_version: str | None = None,
) -> PackageMetadata:
    """Validate a flat configuration mapping into PackageMetadata.

    Args:
        raw: Flat mapping of configuration values.
        base_dir: Directory relative file references are resolved against
            (normally the directory holding the package config).
        upstream_version: Upstream release to package instead of the
            configured version. It is taken verbatim, hyphens included, and
            the revision comes from the "revision" key alone.

    Returns:
        Immutable PackageMetadata.

    Raises:
        MissingConfigurationError: If a mandatory field is absent.
        ConfigurationError: On whitespace inside a dependency, an unsupported
            distribution or an invalid version.
    """
    if upstream_version is not None:
        raw = {**raw, "version": upstream_version}
    values = {key: _require(raw, key) for key in MANDATORY_FIELDS}

    build_depends = parse_dependencies(raw.get("build_depends"), "build_depends")
    depends = parse_dependencies(raw.get("depends"), "depends")
    distributions = parse_distributions(raw.get("distributions"))

    if upstream_version is not None:
        version, revision = upstream_version, _value(raw, "revision") or DEFAULT_REVISION
    else:
        version, revision = split_version(values["version"], _value(raw, "revision"))
    copyright_spec = resolve_copyright(
        values["copyright"],
        base_dir=base_dir,
        strict=bool(raw.get("strict_license", False)),
    )

    long_description = raw.get("long_description")
    if long_description is None or not str(long_description).strip():
        long_description = values["description"]

    email = values["email"]
    maintainer_name = _value(raw, "maintainer") or email.split("@", 1)[0]

    return PackageMetadata(
        name=values["name"],
        version=version,
        revision=revision,
        copyright=copyright_spec,
        ppa=values["ppa"],
        email=email,
        description=values["description"],
        long_description=normalize_long_description(str(long_description)),
        homepage=values["homepage"],
        section=_value(raw, "section") or DEFAULT_SECTION,
        vcs_browser=_value(raw, "vcs_browser"),
        vcs_git=_value(raw, "vcs_git"),
        build_depends=build_depends,
        depends=depends,
        distributions=distributions,
        maintainer_name=maintainer_name,
    )
