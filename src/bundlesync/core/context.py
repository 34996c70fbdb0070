"""Application context with dependency injection."""

from dataclasses import dataclass

from bundlesync.core.executables import ExecutableNotFound, locate_executable
from bundlesync.core.git.abc import Git
from bundlesync.core.git.real import RealGit
from bundlesync.core.global_config import GlobalConfig, load_global_config
from bundlesync.core.help_index import EDITOR_CANDIDATES, HelpIndex, VimHelpIndex
from bundlesync.core.report import ConsoleReportSink, ReportSink


@dataclass(frozen=True)
class BundleSyncContext:
    """Immutable context holding all dependencies for bundlesync operations.

    Created at CLI entry point and threaded through the application.
    Frozen to prevent accidental modification at runtime.
    """

    git: Git
    help_index: HelpIndex
    reports: ReportSink
    global_config: GlobalConfig


def create_context(
    global_config: GlobalConfig | None = None,
) -> BundleSyncContext | ExecutableNotFound:
    """Create production context with real implementations.

    Called at CLI entry point to create the context for the entire
    command execution.

    Args:
        global_config: Configuration to use instead of loading the config file

    Returns:
        BundleSyncContext with real implementations, or ExecutableNotFound when
        git is not installed. A missing editor is not an error here; help tag
        regeneration reports it when it runs.

    Raises:
        ValueError: If the config file is malformed
    """
    git_path = locate_executable("git")
    if isinstance(git_path, ExecutableNotFound):
        return git_path

    config = global_config if global_config is not None else load_global_config()
    return BundleSyncContext(
        git=RealGit(git_path),
        help_index=VimHelpIndex(locate_executable(*EDITOR_CANDIDATES), config.runtime_dir),
        reports=ConsoleReportSink(),
        global_config=config,
    )
