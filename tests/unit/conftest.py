"""Shared fixtures for the mailbox inventory tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from mailbox_inventory.accounts import AccountEntry


class FakeAccountDatabase:
    """In-memory stand-in for the passwd database."""

    def __init__(self, entries: list[AccountEntry] | None = None) -> None:
        self.entries = {entry.account_id: entry for entry in entries or []}

    def add(self, account_id: str, full_name: str, home_dir: Path, uid: int = 1000) -> AccountEntry:
        entry = AccountEntry(account_id=account_id, full_name=full_name, home_dir=home_dir, uid=uid)
        self.entries[account_id] = entry
        return entry

    def lookup_account(self, account_id: str) -> AccountEntry | None:
        return self.entries.get(account_id)

    def list_accounts(self, min_uid: int) -> list[str]:
        return [entry.account_id for entry in self.entries.values() if entry.uid >= min_uid]


@pytest.fixture
def database() -> FakeAccountDatabase:
    return FakeAccountDatabase()


@pytest.fixture
def inbox_root(tmp_path: Path) -> Path:
    root = tmp_path / "var" / "mail"
    root.mkdir(parents=True)
    return root
