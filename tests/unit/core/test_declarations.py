"""Tests for reading bundle declarations from a Vim script."""

import logging
from pathlib import Path

import pytest

from bundlesync.core.declarations import parse_declarations, read_declarations

SAMPLE = """\
" Plugins
set nocompatible
Bundle 'tpope/vim-fugitive'
Bundle('tpope/vim-surround:dev')
  BundleLazy('junegunn/fzf/plugin')
" Bundle 'commented/out'
Bundles('a/one', 'b/two',"c/three")
Bundle "Tpope/Vim-Fugitive"
call Bundle ('gitlab.com/owner/tool')
let g:BundleDir = '~/.vim/bundle'
"""


def test_parse_extracts_every_declaration_form() -> None:
    assert parse_declarations(SAMPLE) == [
        "tpope/vim-fugitive",
        "tpope/vim-surround:dev",
        "junegunn/fzf/plugin",
        "a/one",
        "b/two",
        "c/three",
        "gitlab.com/owner/tool",
    ]


def test_comment_lines_are_skipped() -> None:
    assert parse_declarations('  " Bundle \'x/y\'\n') == []


def test_duplicates_differing_in_case_keep_first_spelling() -> None:
    assert parse_declarations("Bundle 'Owner/Repo'\nBundle 'owner/repo'\n") == ["Owner/Repo"]


def test_lines_without_a_quoted_argument_are_ignored() -> None:
    assert parse_declarations("Bundle\nBundle()\nBundles()\n") == []


def test_read_declarations_from_file(tmp_path: Path) -> None:
    path = tmp_path / "init.vim"
    path.write_text(SAMPLE, encoding="utf-8")

    assert read_declarations(path)[0] == "tpope/vim-fugitive"


def test_read_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        read_declarations(tmp_path / "missing.vim")


def test_bundles_split_over_lines_is_skipped_with_warning(
    caplog: pytest.LogCaptureFixture,
) -> None:
    text = "Bundle 'owner/kept'\nBundles('a/one',\n  'b/two')\nBundle 'owner/after'\n"

    with caplog.at_level(logging.WARNING, logger="bundlesync.core.declarations"):
        identifiers = parse_declarations(text)

    assert identifiers == ["owner/kept", "owner/after"]
    assert "Line 2: arguments to Bundles() should be on a single line" in caplog.text


def test_bundles_with_space_before_paren_is_a_multi_argument_call() -> None:
    assert parse_declarations("Bundles ('a/one', 'b/two')\n") == ["a/one", "b/two"]


def test_file_that_is_not_utf8_is_still_read(tmp_path: Path) -> None:
    path = tmp_path / "init.vim"
    path.write_bytes(b"\" R\xe9glages\nBundle 'tpope/vim-fugitive'\n")

    assert read_declarations(path) == ["tpope/vim-fugitive"]
