"""Remove bundle directories that are no longer declared."""

import logging
import os
import shutil
import stat
from collections.abc import Callable, Collection
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from bundlesync.core.registry import BundleRegistry
from bundlesync.core.report import BLOCK_MARKER, ReportSink

logger = logging.getLogger(__name__)


class CleanStatus(Enum):
    WOULD_REMOVE = "would-remove"
    REMOVED = "removed"
    FAILED = "failed"


@dataclass(frozen=True)
class CleanReport:
    """Outcome for one unmatched directory."""

    path: Path
    status: CleanStatus
    text: str


def find_unmatched(bundle_root: Path, keep: Collection[str]) -> list[Path]:
    """Immediate child directories of bundle_root whose name is not in keep.

    Names are compared case-sensitively. Hidden entries and plain files are
    never candidates, and a missing bundle_root has no children.
    """
    if not bundle_root.is_dir():
        return []
    return sorted(
        child
        for child in bundle_root.iterdir()
        if child.is_dir() and not child.name.startswith(".") and child.name not in keep
    )


def _make_writable_and_retry(func: Callable[..., Any], path: str, exc: BaseException) -> None:
    """rmtree error handler for read-only entries (git objects are read-only)."""
    if not isinstance(exc, PermissionError):
        raise exc
    parent = os.path.dirname(path)
    os.chmod(parent, os.stat(parent).st_mode | stat.S_IWRITE | stat.S_IEXEC)
    if not os.path.islink(path):
        os.chmod(path, os.stat(path).st_mode | stat.S_IWRITE)
    func(path)


def remove_tree(path: Path) -> None:
    """Delete path recursively, read-only files included.

    Raises:
        OSError: If something could not be removed
    """
    if path.is_symlink():
        path.unlink()
        return
    shutil.rmtree(path, onexc=_make_writable_and_retry)


def clean_bundles(
    registry: BundleRegistry,
    *,
    bundle_root: Path,
    dry_run: bool,
    reports: ReportSink,
) -> list[CleanReport]:
    """Remove every directory under bundle_root that no declared bundle owns.

    In dry-run mode nothing is touched; each candidate is only reported. A
    failed removal is reported and the pass continues with the next directory;
    an unreadable bundle_root yields a single failed report.
    """
    try:
        unmatched = find_unmatched(bundle_root, registry.project_names())
    except OSError as e:
        report = CleanReport(
            path=bundle_root,
            status=CleanStatus.FAILED,
            text=f"{BLOCK_MARKER}Failed reading {bundle_root}: {e}",
        )
        reports.emit(report.text)
        return [report]

    results: list[CleanReport] = []
    for path in unmatched:
        if dry_run:
            report = CleanReport(
                path=path,
                status=CleanStatus.WOULD_REMOVE,
                text=f"{BLOCK_MARKER}{path} would be removed.",
            )
        else:
            report = _remove(path)
        reports.emit(report.text)
        results.append(report)
    return results


def _remove(path: Path) -> CleanReport:
    logger.debug("Removing %s", path)
    try:
        remove_tree(path)
    except OSError as e:
        return CleanReport(
            path=path,
            status=CleanStatus.FAILED,
            text=f"{BLOCK_MARKER}Failed removing {path}: {e}",
        )
    return CleanReport(path=path, status=CleanStatus.REMOVED, text=f"{BLOCK_MARKER}{path} removed.")
