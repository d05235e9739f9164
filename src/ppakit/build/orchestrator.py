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

"""Multi-distribution build and upload orchestration.

For each target distribution, in order, the orchestrator walks one
``DistributionBuildRecord`` through::

    VERSION_ASSIGNED -> CHANGELOG_REWRITTEN -> COMPAT_RESOLVED
        -> SOURCE_BUILT -> [CHROOT_BUILT] -> [UPLOADED] -> DONE

All distributions share one source tree, which is rewritten for each of
them. The run is sequential. What happens after a distribution fails is
decided by ``FailurePolicy``: ABORT (the default) stops the run at once,
CONTINUE attempts the remaining distributions and fails at the end. Nothing
is retried and earlier uploads are never rolled back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ppakit.build.debuild import build_source_package
from ppakit.build.pbuilder import (
    DEFAULT_BUILD_RESULT,
    DEFAULT_PBUILDER_ROOT,
    PbuilderConfig,
    run_pbuilder,
)
from ppakit.build.upload import upload_changes
from ppakit.debpkg.changelog import generate_build_version
from ppakit.debpkg.compat import resolve_compat
from ppakit.debpkg.metadata import PackageMetadata
from ppakit.debpkg.templater import ControlFileTemplater
from ppakit.exceptions import BuildToolError, ConfigurationError, PpakitError
from ppakit.run import activity
from ppakit.spinner import activity_spinner

if TYPE_CHECKING:
    from ppakit.run import RunContext

logger = logging.getLogger(__name__)


class BuildState(str, Enum):
    """Pipeline state of one distribution's build."""

    VERSION_ASSIGNED = "version_assigned"
    CHANGELOG_REWRITTEN = "changelog_rewritten"
    COMPAT_RESOLVED = "compat_resolved"
    SOURCE_BUILT = "source_built"
    CHROOT_BUILT = "chroot_built"
    UPLOADED = "uploaded"
    DONE = "done"
    FAILED = "failed"


class FailurePolicy(str, Enum):
    """What to do with the remaining distributions after one fails."""

    ABORT = "abort"
    CONTINUE = "continue"


@dataclass(frozen=True)
class BuildOptions:
    """Run options shared by every distribution of a run."""

    chroot: bool = False
    upload: bool = True
    run_tests: bool = True
    archive_revision: int = 1
    urgency: str = "medium"
    failure_policy: FailurePolicy = FailurePolicy.ABORT
    pbuilder_root: Path = DEFAULT_PBUILDER_ROOT
    build_result: Path = DEFAULT_BUILD_RESULT
    sudo_refresh_seconds: float = 60.0

    @classmethod
    def from_config(cls, cfg: dict[str, Any], **overrides: Any) -> BuildOptions:
        """Build options from the tool config, then apply overrides.

        Raises:
            ConfigurationError: On an unknown failure policy.
        """
        defaults = cfg.get("defaults", {})
        paths = cfg.get("paths", {})
        try:
            policy = FailurePolicy(str(defaults.get("failure_policy", "abort")))
        except ValueError:
            raise ConfigurationError(
                message=f"Unknown failure_policy '{defaults.get('failure_policy')}' (use abort or continue)"
            ) from None

        options = cls(
            archive_revision=int(defaults.get("archive_revision", 1)),
            urgency=str(defaults.get("urgency", "medium")),
            failure_policy=policy,
            pbuilder_root=Path(paths.get("pbuilder_root", DEFAULT_PBUILDER_ROOT)),
            build_result=Path(paths.get("build_result", DEFAULT_BUILD_RESULT)),
            sudo_refresh_seconds=float(defaults.get("sudo_refresh_seconds", 60)),
        )
        return replace(options, **{k: v for k, v in overrides.items() if v is not None})


@dataclass
class DistributionBuildRecord:
    """Progress of one (package, distribution) build within a run."""

    distribution: str
    version: str
    state: BuildState = BuildState.VERSION_ASSIGNED
    history: list[BuildState] = field(default_factory=lambda: [BuildState.VERSION_ASSIGNED])
    dsc_path: Path | None = None
    changes_path: Path | None = None
    result_dir: Path | None = None
    binaries: list[Path] = field(default_factory=list)
    error: str = ""

    def advance(self, state: BuildState) -> None:
        self.state = state
        self.history.append(state)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for event logging and summaries."""
        return {
            "distribution": self.distribution,
            "version": self.version,
            "state": self.state.value,
            "dsc": str(self.dsc_path) if self.dsc_path else None,
            "changes": str(self.changes_path) if self.changes_path else None,
            "result_dir": str(self.result_dir) if self.result_dir else None,
            "binaries": [str(b) for b in self.binaries],
            "error": self.error,
        }


class BuildOrchestrator:
    """Builds (and uploads) one templated source tree for each distribution."""

    def __init__(
        self,
        source_dir: Path,
        metadata: PackageMetadata,
        options: BuildOptions,
        templater: ControlFileTemplater | None = None,
        run: RunContext | None = None,
    ) -> None:
        self.source_dir = source_dir
        self.metadata = metadata
        self.options = options
        self.templater = templater or ControlFileTemplater(source_dir, metadata)
        self.run_context = run
        self.records: list[DistributionBuildRecord] = []

    def assign_version(self, distribution: str) -> str:
        return generate_build_version(
            self.metadata.version,
            self.metadata.revision,
            distribution,
            self.options.archive_revision,
        )

    def _log_path(self, distribution: str, tool: str) -> Path | None:
        if self.run_context is None:
            return None
        return self.run_context.tool_log_path(f"{distribution}-{tool}")

    def _event(self, event: str, record: DistributionBuildRecord, **data: Any) -> None:
        if self.run_context is not None:
            self.run_context.log_event({"event": event, **record.to_dict(), **data})

    def build_distribution(self, record: DistributionBuildRecord) -> DistributionBuildRecord:
        """Drive one distribution through the pipeline.

        Raises:
            PpakitError: From the first failing step; the record is left in
                the last state it reached.
        """
        dist = record.distribution
        name = self.metadata.name

        self.templater.rewrite_changelog(record.version, dist, self.options.urgency)
        record.advance(BuildState.CHANGELOG_REWRITTEN)

        descriptor = resolve_compat(dist)
        self.templater.apply_compat(descriptor)
        record.advance(BuildState.COMPAT_RESOLVED)

        with activity_spinner("build", f"Building source package {name} {record.version}"):
            source = build_source_package(
                self.source_dir,
                name,
                record.version,
                log_path=self._log_path(dist, "debuild"),
            )
        record.dsc_path = source.dsc_path
        record.changes_path = source.changes_path
        record.advance(BuildState.SOURCE_BUILT)
        self._event("build.source", record)

        if self.options.chroot:
            config = PbuilderConfig(
                dsc_path=source.dsc_path,
                distribution=dist,
                pbuilder_root=self.options.pbuilder_root,
                build_result=self.options.build_result,
            )
            with activity_spinner("chroot", f"Building {name} {record.version} in the {dist} chroot"):
                chroot = run_pbuilder(config, record.version, log_path=self._log_path(dist, "pbuilder"))
            record.result_dir = chroot.result_dir
            record.binaries = chroot.binaries
            record.advance(BuildState.CHROOT_BUILT)
            activity("chroot", f"Binary packages for {dist} are in {chroot.result_dir}")
            self._event("build.chroot", record)

        if self.options.upload:
            with activity_spinner("upload", f"Uploading {source.changes_path.name} to {self.metadata.ppa}"):
                upload_changes(
                    self.metadata.ppa,
                    source.changes_path,
                    log_path=self._log_path(dist, "dput"),
                )
            record.advance(BuildState.UPLOADED)
            self._event("build.upload", record, ppa=self.metadata.ppa)

        record.advance(BuildState.DONE)
        return record

    def run(self) -> list[DistributionBuildRecord]:
        """Build every target distribution in order.

        Returns:
            One record per distribution, all in state DONE.

        Raises:
            PpakitError: Under ABORT, the first failure as raised.
            BuildToolError: Under CONTINUE, after all distributions were
                attempted, naming the ones that failed.
        """
        self.records = []
        failed: list[DistributionBuildRecord] = []

        for dist in self.metadata.distributions:
            record = DistributionBuildRecord(distribution=dist, version=self.assign_version(dist))
            self.records.append(record)
            activity("build", f"{self.metadata.name}: {dist} -> {record.version}")
            try:
                self.build_distribution(record)
            except PpakitError as e:
                record.error = e.message
                record.advance(BuildState.FAILED)
                self._event("build.failed", record)
                if self.options.failure_policy is FailurePolicy.ABORT:
                    raise
                logger.warning("Build for %s failed, continuing: %s", dist, e.message)
                failed.append(record)
                continue
            self._event("build.done", record)

        if failed:
            names = ", ".join(r.distribution for r in failed)
            raise BuildToolError(
                message=f"Builds failed for {len(failed)} of {len(self.records)} distributions: {names}",
                tool="orchestrator",
            )
        return self.records
