"""Regeneration of editor help tags after bundles changed.

A Vim-compatible editor is started in batch mode and asked to rebuild the help
tag files of every bundle on its runtime path.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from bundlesync.core.executables import ExecutableNotFound
from bundlesync.core.subprocess import run_subprocess_with_context

EDITOR_CANDIDATES = ("vim", "nvim", "gvim")


class HelpIndex(ABC):
    """Abstract help tag regeneration."""

    @abstractmethod
    def regenerate(self, *, force: bool) -> None:
        """Rebuild help tags.

        Args:
            force: Rebuild every tag file instead of only missing ones

        Raises:
            RuntimeError: If the editor is unavailable or fails
        """
        ...


class VimHelpIndex(HelpIndex):
    """Production implementation driving a Vim-compatible editor.

    The runtime directory is prepended to 'runtimepath' so the helptags#()
    autoload function shipped there is found.
    """

    def __init__(self, editor: Path | ExecutableNotFound, runtime_dir: Path) -> None:
        self._editor = editor
        self._runtime_dir = runtime_dir

    def command(self, *, force: bool) -> list[str]:
        if isinstance(self._editor, ExecutableNotFound):
            raise RuntimeError(self._editor.message)
        overwrite = "1" if force else "0"
        return [
            str(self._editor),
            "-Nes",
            "--cmd",
            f"set rtp^={self._runtime_dir} | call helptags#({overwrite}) | qall!",
        ]

    def regenerate(self, *, force: bool) -> None:
        run_subprocess_with_context(
            self.command(force=force), operation_context="generate help tags"
        )
