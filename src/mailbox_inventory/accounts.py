"""Look up system accounts and account lists."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence

DEFAULT_MIN_UID = 500

# getent(1) exits with 2 when a requested key does not exist.
_GETENT_NOT_FOUND = 2


@dataclass(frozen=True)
class AccountEntry:
    """The parts of a passwd entry the inventory needs."""

    account_id: str
    full_name: str
    home_dir: Path
    uid: int


class AccountDatabase(Protocol):
    def lookup_account(self, account_id: str) -> AccountEntry | None: ...

    def list_accounts(self, min_uid: int) -> list[str]: ...


def parse_passwd_line(line: str) -> AccountEntry | None:
    """Parse one ``name:pw:uid:gid:gecos:home:shell`` line.

    The full name is the GECOS field up to its first comma. Malformed lines
    return ``None``.
    """

    fields = line.rstrip("\n").split(":")
    if len(fields) < 7 or not fields[0]:
        return None
    try:
        uid = int(fields[2])
    except ValueError:
        return None
    return AccountEntry(
        account_id=fields[0],
        full_name=fields[4].split(",", 1)[0],
        home_dir=Path(fields[5]),
        uid=uid,
    )


class GetentAccountDatabase:
    """Account database backed by ``getent passwd``."""

    def __init__(self, command: Sequence[str] = ("getent", "passwd")) -> None:
        self._command = list(command)

    def lookup_account(self, account_id: str) -> AccountEntry | None:
        for line in self._query(account_id):
            entry = parse_passwd_line(line)
            if entry is not None and entry.account_id == account_id:
                return entry
        return None

    def list_accounts(self, min_uid: int) -> list[str]:
        accounts: list[str] = []
        for line in self._query():
            entry = parse_passwd_line(line)
            if entry is not None and entry.uid >= min_uid:
                accounts.append(entry.account_id)
        return accounts

    def _query(self, *keys: str) -> list[str]:
        result = subprocess.run(
            [*self._command, *keys],
            capture_output=True,
            text=True,
            check=False,
        )
        if keys and result.returncode == _GETENT_NOT_FOUND:
            return []
        result.check_returncode()
        return result.stdout.splitlines()


def read_account_list(path: Path) -> list[str]:
    """Return the account ids listed one per line in ``path``."""

    with path.open("r", encoding="utf-8", errors="replace") as handle:
        return [line.strip() for line in handle if line.strip()]


__all__ = [
    "AccountDatabase",
    "AccountEntry",
    "DEFAULT_MIN_UID",
    "GetentAccountDatabase",
    "parse_passwd_line",
    "read_account_list",
]
