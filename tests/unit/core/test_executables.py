from pathlib import Path
from unittest.mock import patch

from bundlesync.core.executables import ExecutableNotFound, locate_executable


def test_first_program_found_wins() -> None:
    found = {"nvim": "/usr/bin/nvim", "gvim": "/usr/bin/gvim"}
    with patch("bundlesync.core.executables.shutil.which", side_effect=found.get):
        assert locate_executable("vim", "nvim", "gvim") == Path("/usr/bin/nvim")


def test_nothing_found_returns_sentinel() -> None:
    with patch("bundlesync.core.executables.shutil.which", return_value=None):
        result = locate_executable("git")

    assert result == ExecutableNotFound(names=("git",))
    assert isinstance(result, ExecutableNotFound)
    assert result.message == "Executable not found on PATH: git"
