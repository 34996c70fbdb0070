"""Git operations subpackage.

This subpackage provides abstractions over git operations with support for
testing via fakes.
"""

from bundlesync.core.git.abc import Git
from bundlesync.core.git.fake import FakeGit
from bundlesync.core.git.real import RealGit

__all__ = [
    "FakeGit",
    "Git",
    "RealGit",
]
