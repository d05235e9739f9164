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

"""End-to-end packaging flows.

``package_source`` packages one prepared source tree for all its target
distributions. ``automate_releases`` runs that for a list of discovered
upstream releases, skipping the versions the ``VersionTracker`` already
knows about and recording the ones that complete.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ppakit.build.orchestrator import BuildOptions, BuildOrchestrator, DistributionBuildRecord
from ppakit.build.privileges import SudoKeepAlive
from ppakit.build.tools import require_tools
from ppakit.debpkg.metadata import PackageMetadata, resolve_metadata
from ppakit.debpkg.skeleton import generate_skeleton
from ppakit.debpkg.templater import ControlFileTemplater
from ppakit.run import activity
from ppakit.spinner import activity_spinner
from ppakit.tracker import VersionTracker
from ppakit.upstream.releases import UpstreamRelease
from ppakit.upstream.tarball import download_release, extract_release

if TYPE_CHECKING:
    import requests

    from ppakit.run import RunContext

logger = logging.getLogger(__name__)


@dataclass
class AutomationReport:
    """Outcome of an automation run."""

    packaged: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    records: dict[str, list[DistributionBuildRecord]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "packaged": self.packaged,
            "skipped": self.skipped,
            "records": {v: [r.to_dict() for r in recs] for v, recs in self.records.items()},
        }


def package_source(
    source_dir: Path,
    metadata: PackageMetadata,
    options: BuildOptions,
    *,
    overwrite: bool = False,
    run: RunContext | None = None,
) -> list[DistributionBuildRecord]:
    """Generate, template, build and upload one source tree.

    Args:
        source_dir: Extracted upstream source tree.
        metadata: Resolved package metadata.
        options: Run options.
        overwrite: Replace an existing debian/ directory.
        run: Optional RunContext for logs and events.

    Returns:
        One completed record per target distribution.

    Raises:
        PpakitError: On the first unrecovered failure.
    """
    require_tools(chroot=options.chroot, upload=options.upload)

    with activity_spinner("skeleton", f"Generating debian/ for {metadata.name} {metadata.version}"):
        generate_skeleton(
            source_dir,
            metadata,
            overwrite=overwrite,
            log_path=run.tool_log_path("dh_make") if run else None,
        )

    templater = ControlFileTemplater(source_dir, metadata)
    templater.template_package(run_tests=options.run_tests)
    activity("template", f"Populated {templater.paths.debian_dir}")
    if run:
        run.log_event({"event": "template.done", "package": metadata.name, "version": metadata.version})

    orchestrator = BuildOrchestrator(source_dir, metadata, options, templater=templater, run=run)
    with SudoKeepAlive(interval=options.sudo_refresh_seconds, enabled=options.chroot):
        return orchestrator.run()


def automate_releases(
    releases: Iterable[UpstreamRelease],
    raw_config: Mapping[str, Any],
    tracker: VersionTracker,
    options: BuildOptions,
    work_root: Path,
    *,
    base_dir: Path | None = None,
    session: requests.Session | None = None,
    run: RunContext | None = None,
) -> AutomationReport:
    """Package every release the tracker has not seen yet.

    Each release runs the full pipeline (download, extract, skeleton,
    templating, all distributions). The tracker is only written after the
    whole pipeline succeeded for that version; a failure propagates at once
    and leaves the version untracked.

    Args:
        releases: Discovered releases, processed in order.
        raw_config: Flat package configuration. Each release version is
            packaged verbatim with the configured "revision" (default 1).
        tracker: Version tracker.
        options: Run options.
        work_root: Scratch directory for downloads and source trees.
        base_dir: Directory relative config file references resolve against.
        session: Optional requests session.
        run: Optional RunContext.

    Raises:
        ConfigurationError: If the tracking directory is not usable.
        PpakitError: On the first failing release.
    """
    tracker.ensure_ready()
    report = AutomationReport()

    for release in releases:
        if tracker.is_packaged(release.version):
            activity("automate", f"{release.version} already packaged, skipping")
            if run:
                run.log_event({"event": "automate.skip", "version": release.version})
            report.skipped.append(release.version)
            continue

        metadata = resolve_metadata(raw_config, base_dir=base_dir, upstream_version=release.version)
        activity("automate", f"Packaging {metadata.name} {release.version}")

        with activity_spinner("fetch", f"Downloading {release.url}"):
            tarball = download_release(release, work_root / "downloads", session=session)
        source_dir = extract_release(tarball, work_root / "sources" / release.version)

        records = package_source(source_dir, metadata, options, overwrite=True, run=run)

        tracker.mark_packaged(release.version)
        report.packaged.append(release.version)
        report.records[release.version] = records
        if run:
            run.log_event({"event": "automate.packaged", "version": release.version})

    return report
