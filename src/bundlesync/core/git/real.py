"""Production Git implementation using subprocess.

This module provides the real Git implementation that executes actual git
commands via subprocess.
"""

import os
from pathlib import Path

from bundlesync.core.git.abc import Git
from bundlesync.core.subprocess import run_subprocess_with_context

# ============================================================================
# Production Implementation
# ============================================================================


class RealGit(Git):
    """Production implementation using subprocess.

    The executable is resolved once at startup and passed in, so no PATH
    lookup happens while workers are running.
    """

    def __init__(self, executable: Path) -> None:
        self._executable = str(executable)

    def clone(self, url: str, dest: Path, *, branch: str | None) -> None:
        """Shallow, recursive, quiet clone of url into dest."""
        cmd = [self._executable, "clone", "--depth", "1", "--recursive", "--quiet"]
        if branch:
            cmd.extend(["--branch", branch])
        cmd.extend([url, str(dest)])
        run_subprocess_with_context(cmd, operation_context=f"clone {url}")

    def pull(self, repo_dir: Path) -> str:
        """Pull the current branch and return git's stdout.

        The C locale keeps the "Already up to date." message untranslated.
        """
        env = {**os.environ, "LC_ALL": "C"}
        result = run_subprocess_with_context(
            [self._executable, "-C", str(repo_dir), "pull"],
            operation_context=f"pull in {repo_dir}",
            env=env,
        )
        return result.stdout

    def log_oneline(self, repo_dir: Path, revision_range: str) -> str:
        """One-line log of non-merge commits in revision_range."""
        result = run_subprocess_with_context(
            [
                self._executable,
                "-C",
                str(repo_dir),
                "log",
                "--no-merges",
                "--oneline",
                revision_range,
            ],
            operation_context=f"list new commits in {repo_dir}",
        )
        return result.stdout

    def sync_submodules(self, repo_dir: Path) -> None:
        """Synchronize submodule remote URLs with .gitmodules."""
        run_subprocess_with_context(
            [self._executable, "-C", str(repo_dir), "submodule", "sync"],
            operation_context=f"sync submodules in {repo_dir}",
        )

    def update_submodules(self, repo_dir: Path) -> None:
        """Initialize and update submodules recursively."""
        run_subprocess_with_context(
            [
                self._executable,
                "-C",
                str(repo_dir),
                "submodule",
                "update",
                "--init",
                "--recursive",
            ],
            operation_context=f"update submodules in {repo_dir}",
        )

    def is_head_attached(self, repo_dir: Path) -> bool:
        """Read .git/HEAD directly; a symbolic ref ("ref: refs/heads/x") has a slash."""
        head_file = repo_dir / ".git" / "HEAD"
        try:
            content = head_file.read_text(encoding="utf-8", errors="replace")
        except OSError:
            return True
        return any("/" in line for line in content.splitlines())
