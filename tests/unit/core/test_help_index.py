from pathlib import Path
from unittest.mock import patch

import pytest

from bundlesync.core.executables import ExecutableNotFound
from bundlesync.core.help_index import EDITOR_CANDIDATES, VimHelpIndex


def test_command_prepends_runtime_dir_and_quits() -> None:
    index = VimHelpIndex(Path("/usr/bin/nvim"), Path("/home/me/.vim"))

    assert index.command(force=False) == [
        "/usr/bin/nvim",
        "-Nes",
        "--cmd",
        "set rtp^=/home/me/.vim | call helptags#(0) | qall!",
    ]


def test_force_rebuilds_every_tag_file() -> None:
    index = VimHelpIndex(Path("/usr/bin/vim"), Path("/home/me/.vim"))

    assert "call helptags#(1)" in index.command(force=True)[3]


def test_regenerate_runs_the_editor() -> None:
    index = VimHelpIndex(Path("/usr/bin/vim"), Path("/home/me/.vim"))

    with patch("bundlesync.core.help_index.run_subprocess_with_context") as mock_run:
        index.regenerate(force=True)

    mock_run.assert_called_once_with(
        index.command(force=True), operation_context="generate help tags"
    )


def test_missing_editor_fails_when_used() -> None:
    index = VimHelpIndex(ExecutableNotFound(names=EDITOR_CANDIDATES), Path("/home/me/.vim"))

    with pytest.raises(RuntimeError, match="vim or nvim or gvim"):
        index.regenerate(force=False)
