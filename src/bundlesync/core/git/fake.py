"""Fake Git operations for testing.

FakeGit is an in-memory implementation that accepts pre-configured state
in its constructor. Construct instances directly with keyword arguments.
"""

import threading
import time
from collections.abc import Iterable
from pathlib import Path

from bundlesync.core.git.abc import Git

ALREADY_UP_TO_DATE = "Already up to date.\n"


class FakeGit(Git):
    """In-memory fake implementation of git operations.

    This class has NO public setup methods. All state is provided via constructor
    using keyword arguments with sensible defaults. Calls are recorded for test
    assertions and the fake is safe to share between worker threads.
    """

    def __init__(
        self,
        *,
        clone_failures: Iterable[tuple[str, str | None]] = (),
        pull_results: dict[Path, list[str | Exception]] | None = None,
        logs: dict[Path, str] | None = None,
        submodule_sync_errors: dict[Path, str] | None = None,
        submodule_update_errors: dict[Path, str] | None = None,
        detached: Iterable[Path] = (),
        operation_delay: float = 0.0,
    ) -> None:
        """Create FakeGit with pre-configured state.

        Args:
            clone_failures: (url, branch) pairs whose clone raises; branch None
                stands for a clone of the default branch
            pull_results: Mapping of repo dir -> successive pull outcomes. A str is
                returned as stdout, an Exception is raised. Once exhausted, pulls
                report "Already up to date."
            logs: Mapping of repo dir -> output of log_oneline()
            submodule_sync_errors: Mapping of repo dir -> error raised by sync_submodules()
            submodule_update_errors: Mapping of repo dir -> error raised by update_submodules()
            detached: Repo dirs whose HEAD is detached
            operation_delay: Seconds each clone/pull blocks, to make overlap observable
        """
        self._clone_failures = set(clone_failures)
        self._pull_results = {path: list(results) for path, results in (pull_results or {}).items()}
        self._logs = logs or {}
        self._submodule_sync_errors = submodule_sync_errors or {}
        self._submodule_update_errors = submodule_update_errors or {}
        self._detached = set(detached)
        self._operation_delay = operation_delay

        self._lock = threading.Lock()
        self._in_flight = 0
        self._max_in_flight = 0
        self._clone_calls: list[tuple[str, Path, str | None]] = []
        self._pull_calls: list[Path] = []
        self._log_calls: list[tuple[Path, str]] = []
        self._submodule_sync_calls: list[Path] = []
        self._submodule_update_calls: list[Path] = []

    @property
    def clone_calls(self) -> list[tuple[str, Path, str | None]]:
        """Recorded clone() calls as (url, dest, branch) tuples."""
        return self._clone_calls

    @property
    def pull_calls(self) -> list[Path]:
        """Recorded pull() calls."""
        return self._pull_calls

    @property
    def log_calls(self) -> list[tuple[Path, str]]:
        """Recorded log_oneline() calls as (repo_dir, revision_range) tuples."""
        return self._log_calls

    @property
    def submodule_sync_calls(self) -> list[Path]:
        return self._submodule_sync_calls

    @property
    def submodule_update_calls(self) -> list[Path]:
        return self._submodule_update_calls

    @property
    def max_concurrent_operations(self) -> int:
        """Highest number of clone/pull calls observed running at the same time."""
        return self._max_in_flight

    def _enter(self) -> None:
        with self._lock:
            self._in_flight += 1
            self._max_in_flight = max(self._max_in_flight, self._in_flight)
        if self._operation_delay:
            time.sleep(self._operation_delay)

    def _leave(self) -> None:
        with self._lock:
            self._in_flight -= 1

    def clone(self, url: str, dest: Path, *, branch: str | None) -> None:
        self._enter()
        try:
            with self._lock:
                self._clone_calls.append((url, dest, branch))
            if (url, branch) in self._clone_failures:
                raise RuntimeError(f"Failed to clone {url}")
        finally:
            self._leave()

    def pull(self, repo_dir: Path) -> str:
        self._enter()
        try:
            with self._lock:
                self._pull_calls.append(repo_dir)
                pending = self._pull_results.get(repo_dir)
                outcome: str | Exception = pending.pop(0) if pending else ALREADY_UP_TO_DATE
            if isinstance(outcome, Exception):
                raise outcome
            return outcome
        finally:
            self._leave()

    def log_oneline(self, repo_dir: Path, revision_range: str) -> str:
        with self._lock:
            self._log_calls.append((repo_dir, revision_range))
        return self._logs.get(repo_dir, "")

    def sync_submodules(self, repo_dir: Path) -> None:
        with self._lock:
            self._submodule_sync_calls.append(repo_dir)
        if repo_dir in self._submodule_sync_errors:
            raise RuntimeError(self._submodule_sync_errors[repo_dir])

    def update_submodules(self, repo_dir: Path) -> None:
        with self._lock:
            self._submodule_update_calls.append(repo_dir)
        if repo_dir in self._submodule_update_errors:
            raise RuntimeError(self._submodule_update_errors[repo_dir])

    def is_head_attached(self, repo_dir: Path) -> bool:
        return repo_dir not in self._detached
