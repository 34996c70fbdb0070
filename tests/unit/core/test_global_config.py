"""Tests for loading ~/.bundlesync/config.toml."""

from pathlib import Path

import pytest

from bundlesync.core.global_config import (
    CONFIG_ENV_VAR,
    DEFAULT_MAX_PARALLEL,
    default_global_config,
    global_config_path,
    load_global_config,
)


def test_missing_file_gives_defaults(tmp_path: Path) -> None:
    config = load_global_config(tmp_path / "config.toml")

    assert config == default_global_config()
    assert config.max_parallel == DEFAULT_MAX_PARALLEL == 12
    assert config.bundle_root == Path.home() / ".vim" / "bundle"


def test_values_are_read_and_paths_expanded(tmp_path: Path) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text(
        'bundle_root = "~/.config/nvim/bundle"\n'
        f'declarations_file = "{tmp_path / "init.vim"}"\n'
        "max_parallel = 4\n",
        encoding="utf-8",
    )

    config = load_global_config(config_file)

    assert config.bundle_root == Path.home() / ".config" / "nvim" / "bundle"
    assert config.declarations_file == tmp_path / "init.vim"
    assert config.runtime_dir == Path.home() / ".vim"
    assert config.max_parallel == 4


@pytest.mark.parametrize("value", ["0", "-2", '"8"', "true", "2.5"])
def test_invalid_max_parallel_is_rejected(tmp_path: Path, value: str) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text(f"max_parallel = {value}\n", encoding="utf-8")

    with pytest.raises(ValueError, match="max_parallel"):
        load_global_config(config_file)


def test_malformed_toml_is_a_value_error(tmp_path: Path) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text("bundle_root = \n", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid config file"):
        load_global_config(config_file)


def test_environment_variable_overrides_location(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    config_file = tmp_path / "custom.toml"
    config_file.write_text("max_parallel = 2\n", encoding="utf-8")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config_file))

    assert global_config_path() == config_file
    assert load_global_config().max_parallel == 2


def test_default_location(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)

    assert global_config_path() == Path.home() / ".bundlesync" / "config.toml"
