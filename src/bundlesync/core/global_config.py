"""Global configuration data structures and loading.

Provides immutable global config data loaded from ~/.bundlesync/config.toml.
The file is optional; every key falls back to a Vim-oriented default.

Example config:
  bundle_root = "~/.vim/bundle"
  declarations_file = "~/.vim/init.vim"
  runtime_dir = "~/.vim"
  max_parallel = 12
"""

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

CONFIG_ENV_VAR = "BUNDLESYNC_CONFIG"
DEFAULT_MAX_PARALLEL = 12


@dataclass(frozen=True)
class GlobalConfig:
    """Immutable global configuration data.

    Loaded once at CLI entry point and stored in BundleSyncContext.
    All fields are read-only after construction.
    """

    bundle_root: Path
    declarations_file: Path
    runtime_dir: Path
    max_parallel: int


def global_config_path() -> Path:
    """Get the path to the global config file.

    BUNDLESYNC_CONFIG overrides the default location.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".bundlesync" / "config.toml"


def default_global_config() -> GlobalConfig:
    vim_dir = Path.home() / ".vim"
    return GlobalConfig(
        bundle_root=vim_dir / "bundle",
        declarations_file=vim_dir / "init.vim",
        runtime_dir=vim_dir,
        max_parallel=DEFAULT_MAX_PARALLEL,
    )


def load_global_config(path: Path | None = None) -> GlobalConfig:
    """Load global config, falling back to defaults for absent keys.

    Args:
        path: Config file path (defaults to global_config_path())

    Returns:
        GlobalConfig instance with loaded values

    Raises:
        ValueError: If the file is not valid TOML or max_parallel is not a positive integer
    """
    config_path = path if path is not None else global_config_path()
    defaults = default_global_config()
    if not config_path.exists():
        return defaults

    try:
        data = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid config file {config_path}: {e}") from e

    max_parallel = data.get("max_parallel", defaults.max_parallel)
    if isinstance(max_parallel, bool) or not isinstance(max_parallel, int) or max_parallel < 1:
        raise ValueError(f"'max_parallel' must be a positive integer in {config_path}")

    return GlobalConfig(
        bundle_root=_path_setting(data, "bundle_root", defaults.bundle_root),
        declarations_file=_path_setting(data, "declarations_file", defaults.declarations_file),
        runtime_dir=_path_setting(data, "runtime_dir", defaults.runtime_dir),
        max_parallel=max_parallel,
    )


def _path_setting(data: dict, key: str, default: Path) -> Path:
    value = data.get(key)
    if value is None:
        return default
    return Path(str(value)).expanduser()
