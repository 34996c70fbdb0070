"""Clone missing bundles and update existing ones.

Bundles are independent, so they are processed on a bounded thread pool. A
worker handles one bundle at a time from start to finish and hands its report
block to the sink. sync_bundles() returns only after every worker is done.

Per bundle:
1. Directory missing -> clone (falling back to the default branch when the
   requested branch cannot be cloned)
2. Update requested and HEAD attached -> pull (bounded retries), then list the
   new commits and refresh submodules
3. Otherwise -> nothing to do, nothing reported
"""

import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from bundlesync.core.descriptor import BundleDescriptor
from bundlesync.core.git.abc import Git
from bundlesync.core.options import SyncOptions
from bundlesync.core.registry import BundleRegistry
from bundlesync.core.report import BLOCK_MARKER, DETAIL_MARKER, ReportSink

logger = logging.getLogger(__name__)

PULL_ATTEMPTS = 3
# git pull prints "Already up to date." when nothing was fetched. Only the first
# character is compared; RealGit pins LC_ALL=C so the message is not translated.
ALREADY_UP_TO_DATE_MARKER = "A"
NEW_COMMITS_RANGE = "ORIG_HEAD..HEAD"
SUBMODULES_FILE = ".gitmodules"


class SyncStatus(Enum):
    CLONED = "cloned"
    CLONED_DEFAULT_BRANCH = "cloned-default-branch"
    CLONE_FAILED = "clone-failed"
    UPDATED = "updated"
    UP_TO_DATE = "up-to-date"
    PULL_FAILED = "pull-failed"
    DETACHED = "detached"
    PRESENT = "present"
    SKIPPED = "skipped"
    FAILED = "failed"

    @property
    def is_failure(self) -> bool:
        return self in (SyncStatus.CLONE_FAILED, SyncStatus.PULL_FAILED, SyncStatus.FAILED)


@dataclass(frozen=True)
class BundleReport:
    """Outcome of synchronizing one bundle.

    text is the block shown to the user; it is empty when nothing happened.
    """

    descriptor: BundleDescriptor
    status: SyncStatus
    text: str = ""
    submodule_error: str | None = None


def pull_brought_changes(output: str) -> bool:
    """Tell a pull that fetched commits from one that was a no-op."""
    return bool(output) and not output.startswith(ALREADY_UP_TO_DATE_MARKER)


def select_bundles(registry: BundleRegistry, options: SyncOptions) -> list[BundleDescriptor]:
    """Descriptors whose owner/project matches the filter pattern."""
    return [d for d in registry if options.filter_pattern.search(d.repo_path)]


def claim_directories(
    descriptors: Iterable[BundleDescriptor],
) -> tuple[list[BundleDescriptor], list[BundleReport]]:
    """Give each local directory to the first descriptor that maps onto it.

    Returns:
        (descriptors to process, skip reports for the ones left without a directory)
    """
    owners: dict[str, BundleDescriptor] = {}
    claimed: list[BundleDescriptor] = []
    skipped: list[BundleReport] = []
    for descriptor in descriptors:
        owner = owners.setdefault(descriptor.project, descriptor)
        if owner is descriptor:
            claimed.append(descriptor)
            continue
        logger.warning(
            "%s and %s share the directory %s",
            owner.repo_path,
            descriptor.repo_path,
            owner.project,
        )
        skipped.append(
            BundleReport(
                descriptor=descriptor,
                status=SyncStatus.SKIPPED,
                text=(
                    f"{BLOCK_MARKER}{descriptor.url} skipped: directory "
                    f"{descriptor.project} already claimed by {owner.repo_path}"
                ),
            )
        )
    return claimed, skipped


def sync_bundles(
    registry: BundleRegistry,
    *,
    git: Git,
    reports: ReportSink,
    bundle_root: Path,
    options: SyncOptions,
) -> list[BundleReport]:
    """Clone or update every selected bundle.

    Failures are confined to the bundle they happen in and show up only in its
    report. Reports come back in registry order, skipped bundles last.
    """
    selected = select_bundles(registry, options)
    claimed, skipped = claim_directories(selected)
    for report in skipped:
        reports.emit(report.text)

    logger.debug(
        "Synchronizing %d bundle(s) with up to %d worker(s)", len(claimed), options.max_parallel
    )

    def worker(descriptor: BundleDescriptor) -> BundleReport:
        report = _guarded_sync(descriptor, git=git, bundle_root=bundle_root, update=options.update)
        if report.text:
            reports.emit(report.text)
        return report

    results: list[BundleReport] = []
    if claimed:
        with ThreadPoolExecutor(
            max_workers=options.max_parallel, thread_name_prefix="bundlesync"
        ) as executor:
            results = list(executor.map(worker, claimed))
    return results + skipped


def _guarded_sync(
    descriptor: BundleDescriptor, *, git: Git, bundle_root: Path, update: bool
) -> BundleReport:
    try:
        return sync_bundle(descriptor, git=git, bundle_root=bundle_root, update=update)
    except Exception as e:
        logger.debug("Unexpected error while synchronizing %s", descriptor.url, exc_info=True)
        return BundleReport(
            descriptor=descriptor,
            status=SyncStatus.FAILED,
            text=f"{BLOCK_MARKER}{descriptor.url} failed: {e}",
        )


def sync_bundle(
    descriptor: BundleDescriptor, *, git: Git, bundle_root: Path, update: bool
) -> BundleReport:
    """Clone or update a single bundle."""
    dest = bundle_root / descriptor.project
    if not dest.exists():
        return _clone(descriptor, dest, git)
    if not update:
        return BundleReport(descriptor=descriptor, status=SyncStatus.PRESENT)
    if not git.is_head_attached(dest):
        logger.debug("Not updating %s: HEAD is detached", dest)
        return BundleReport(descriptor=descriptor, status=SyncStatus.DETACHED)
    return _update(descriptor, dest, git)


def _clone(descriptor: BundleDescriptor, dest: Path, git: Git) -> BundleReport:
    header = f"{BLOCK_MARKER}{descriptor.url} "
    try:
        git.clone(descriptor.url, dest, branch=descriptor.branch or None)
    except RuntimeError as e:
        if not descriptor.branch:
            return BundleReport(
                descriptor=descriptor,
                status=SyncStatus.CLONE_FAILED,
                text=f"{header}cannot be cloned!\n{e}",
            )
        logger.debug(
            "Cloning %s at %s failed, trying the default branch", descriptor.url, descriptor.branch
        )
    else:
        return BundleReport(
            descriptor=descriptor, status=SyncStatus.CLONED, text=f"{header}cloned."
        )

    # Assume the requested branch does not exist
    try:
        git.clone(descriptor.url, dest, branch=None)
    except RuntimeError as e:
        return BundleReport(
            descriptor=descriptor,
            status=SyncStatus.CLONE_FAILED,
            text=f"{header}cannot be cloned!\n{e}",
        )
    return BundleReport(
        descriptor=descriptor,
        status=SyncStatus.CLONED_DEFAULT_BRANCH,
        text=f"{header}cloned, but the branch '{descriptor.branch}' does not exist.",
    )


def _pull_with_retries(dest: Path, git: Git) -> str:
    """Pull up to PULL_ATTEMPTS times; the last attempt's failure propagates."""
    for attempt in range(1, PULL_ATTEMPTS):
        try:
            return git.pull(dest)
        except RuntimeError as e:
            logger.debug("Pull %d/%d failed in %s: %s", attempt, PULL_ATTEMPTS, dest, e)
    return git.pull(dest)


def _update(descriptor: BundleDescriptor, dest: Path, git: Git) -> BundleReport:
    header = f"{BLOCK_MARKER}{descriptor.url} "
    try:
        output = _pull_with_retries(dest, git)
    except RuntimeError as e:
        return BundleReport(
            descriptor=descriptor, status=SyncStatus.PULL_FAILED, text=f"{header}pull failed: {e}"
        )

    if not pull_brought_changes(output):
        return BundleReport(descriptor=descriptor, status=SyncStatus.UP_TO_DATE)

    lines = [f"{header}updated."]
    try:
        new_commits = git.log_oneline(dest, NEW_COMMITS_RANGE).strip()
    except RuntimeError as e:
        logger.debug("Could not list new commits in %s: %s", dest, e)
        new_commits = ""
    if new_commits:
        lines.append(new_commits)

    submodule_error: str | None = None
    if (dest / SUBMODULES_FILE).exists():
        submodule_error = _refresh_submodules(dest, git)
        if submodule_error is not None:
            lines.append(f"{DETAIL_MARKER}Submodule update failed: {submodule_error}")

    return BundleReport(
        descriptor=descriptor,
        status=SyncStatus.UPDATED,
        text="\n".join(lines),
        submodule_error=submodule_error,
    )


def _refresh_submodules(dest: Path, git: Git) -> str | None:
    """Sync submodule URLs, then init/update them; return the update error if any."""
    try:
        git.sync_submodules(dest)
    except RuntimeError as e:
        logger.warning("Submodule sync failed in %s: %s", dest, e)
    try:
        git.update_submodules(dest)
    except RuntimeError as e:
        return str(e)
    return None
