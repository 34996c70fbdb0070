"""High-level git operations interface.

This module provides a clean abstraction over git subprocess calls, making the
synchronization engine testable without a network or a git binary.

Architecture:
- Git: Abstract base class defining the interface
- RealGit: Production implementation using subprocess
- FakeGit: In-memory implementation for tests
"""

from abc import ABC, abstractmethod
from pathlib import Path


class Git(ABC):
    """Abstract interface for git operations.

    All implementations (real and fake) must implement this interface.
    Failing operations raise RuntimeError with a human-readable description.
    Implementations must be safe to call from several worker threads at once
    as long as each thread works on its own repository directory.
    """

    @abstractmethod
    def clone(self, url: str, dest: Path, *, branch: str | None) -> None:
        """Shallow, recursive, quiet clone of url into dest.

        Args:
            url: Remote repository URL
            dest: Directory to clone into (must not exist)
            branch: Branch to check out, or None for the remote default

        Raises:
            RuntimeError: If the clone fails
        """
        ...

    @abstractmethod
    def pull(self, repo_dir: Path) -> str:
        """Pull the current branch and return git's stdout.

        Raises:
            RuntimeError: If the pull fails
        """
        ...

    @abstractmethod
    def log_oneline(self, repo_dir: Path, revision_range: str) -> str:
        """One-line log of non-merge commits in revision_range.

        Raises:
            RuntimeError: If git log fails
        """
        ...

    @abstractmethod
    def sync_submodules(self, repo_dir: Path) -> None:
        """Synchronize submodule remote URLs with .gitmodules.

        Raises:
            RuntimeError: If the sync fails
        """
        ...

    @abstractmethod
    def update_submodules(self, repo_dir: Path) -> None:
        """Initialize and update submodules recursively.

        Raises:
            RuntimeError: If the update fails
        """
        ...

    @abstractmethod
    def is_head_attached(self, repo_dir: Path) -> bool:
        """Check whether HEAD points at a branch rather than a commit.

        Returns True when the answer cannot be determined.
        """
        ...
