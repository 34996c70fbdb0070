"""Explicit lookup of the external programs bundlesync drives."""

import shutil
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ExecutableNotFound:
    """Sentinel value indicating none of the requested programs is on PATH."""

    names: tuple[str, ...]

    @property
    def message(self) -> str:
        return f"Executable not found on PATH: {' or '.join(self.names)}"


def locate_executable(*names: str) -> Path | ExecutableNotFound:
    """Return the path of the first program in names found on PATH."""
    for name in names:
        found = shutil.which(name)
        if found is not None:
            return Path(found)
    return ExecutableNotFound(names=names)
