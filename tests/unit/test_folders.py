"""Tests for discovering mail folders beneath a mail directory."""

import os
from pathlib import Path

import pytest

from mailbox_inventory.readers.folders import discover_folders


def _touch(path: Path, content: str = "") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)


def test_hidden_entries_are_pruned(tmp_path: Path) -> None:
    root = tmp_path / "mail"
    _touch(root / ".hidden" / "file.txt")
    _touch(root / "visible.txt")
    _touch(root / ".imap-state")

    assert list(discover_folders(root)) == ["visible.txt"]


def test_nested_folders_use_relative_paths(tmp_path: Path) -> None:
    root = tmp_path / "mail"
    _touch(root / "sent-mail")
    _touch(root / "lists" / "python-dev")
    _touch(root / "lists" / "archive" / "2019")

    assert sorted(discover_folders(root)) == [
        "lists/archive/2019",
        "lists/python-dev",
        "sent-mail",
    ]


def test_missing_root_yields_nothing(tmp_path: Path) -> None:
    assert list(discover_folders(tmp_path / "nope")) == []


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
def test_symlinks_are_followed_once(tmp_path: Path) -> None:
    root = tmp_path / "mail"
    _touch(root / "inbox-archive")
    shared = tmp_path / "shared"
    _touch(shared / "team")
    (root / "shared").symlink_to(shared, target_is_directory=True)
    (root / "loop").symlink_to(root, target_is_directory=True)

    assert sorted(discover_folders(root)) == ["inbox-archive", "shared/team"]
