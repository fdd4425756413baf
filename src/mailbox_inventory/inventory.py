"""Aggregate mailbox statistics for system accounts."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping

from tqdm import tqdm

from lib.sizes import human_size
from mailbox_inventory import forwarding
from mailbox_inventory.accounts import AccountDatabase
from mailbox_inventory.readers.folders import discover_folders
from mailbox_inventory.readers.mbox import EMPTY_STATS, MailStoreStats, read_mail_store
from mailbox_inventory.writers.report import INBOX_LABEL, TOTAL_LABEL, ColumnWidths

logger = logging.getLogger(__name__)

DEFAULT_INBOX_ROOT = Path("/var/mail")
DEFAULT_MAIL_DIR = Path("mail")


@dataclass(frozen=True)
class AccountRecord:
    """Mail storage totals for one account."""

    account_id: str
    full_name: str
    total_size: int
    total_messages: int
    forward_address: str = ""
    inbox: MailStoreStats = EMPTY_STATS
    folders: Mapping[str, MailStoreStats] = field(default_factory=dict)


def aggregate_account(
    account_id: str,
    database: AccountDatabase,
    *,
    inbox_root: Path = DEFAULT_INBOX_ROOT,
    folder_dir: Path = DEFAULT_MAIL_DIR,
    count_messages: bool = False,
    include_folders: bool = False,
    resolve_forwarding: bool = True,
    widths: ColumnWidths | None = None,
) -> AccountRecord:
    """Sum the inbox and every mail folder belonging to ``account_id``.

    A missing inbox or folder directory counts as empty. With
    ``include_folders`` the per-folder statistics are kept on the record.
    """

    entry = database.lookup_account(account_id)
    if entry is None:
        logger.warning("No account entry for %s; reporting inbox only", account_id)
        full_name = ""
        home_dir = None
    else:
        full_name = entry.full_name
        home_dir = entry.home_dir

    inbox_path = inbox_root / account_id
    if inbox_path.is_file():
        inbox = read_mail_store(inbox_path, count_messages=count_messages)
    else:
        inbox = EMPTY_STATS
    total_size = inbox.size
    total_messages = inbox.message_count

    folders: dict[str, MailStoreStats] = {}
    if home_dir is not None:
        mail_dir = home_dir / folder_dir
        for folder in discover_folders(mail_dir):
            stats = read_mail_store(mail_dir / folder, count_messages=count_messages)
            total_size += stats.size
            total_messages += stats.message_count
            if include_folders:
                folders[folder] = stats
                if widths is not None:
                    widths.widen_for_stats(folder, stats.size, stats.message_count)

    forward = ""
    if resolve_forwarding and home_dir is not None:
        forward, _source = forwarding.resolve_local_forward(home_dir)

    if widths is not None:
        if include_folders:
            widths.widen_for_stats(INBOX_LABEL, inbox.size, inbox.message_count)
            widths.widen_for_stats(TOTAL_LABEL, total_size, total_messages)
        else:
            widths.widen(
                name=account_id,
                full_name=full_name,
                size=human_size(total_size),
                count=str(total_messages),
                forward=forward,
            )

    return AccountRecord(
        account_id=account_id,
        full_name=full_name,
        total_size=total_size,
        total_messages=total_messages,
        forward_address=forward,
        inbox=inbox,
        folders=folders,
    )


def inventory_accounts(
    account_ids: Iterable[str],
    database: AccountDatabase,
    *,
    inbox_root: Path = DEFAULT_INBOX_ROOT,
    folder_dir: Path = DEFAULT_MAIL_DIR,
    count_messages: bool = False,
    aliases: Mapping[str, str] | None = None,
    alias_min_uid: int | None = None,
    widths: ColumnWidths | None = None,
    show_progress: bool = False,
) -> list[AccountRecord]:
    """Aggregate every account, apply alias overrides and sort by account id.

    When ``alias_min_uid`` is given, alias names that are not in
    ``account_ids`` are reported as alias-only accounts, except names of
    known accounts whose UID is below ``alias_min_uid``.
    """

    ordered_ids = list(dict.fromkeys(account_ids))
    aliases = aliases or {}

    progress = tqdm(
        total=len(ordered_ids),
        disable=not show_progress,
        unit="user",
        desc="Scanning accounts",
    )

    records: list[AccountRecord] = []
    for account_id in ordered_ids:
        progress.set_postfix_str(account_id, refresh=False)
        logger.info("BEGIN USER %s", account_id)
        records.append(
            aggregate_account(
                account_id,
                database,
                inbox_root=inbox_root,
                folder_dir=folder_dir,
                count_messages=count_messages,
                widths=widths,
            )
        )
        logger.info("END USER %s", account_id)
        progress.update(1)

    progress.close()

    if alias_min_uid is not None:
        records.extend(
            _alias_only_records(aliases, set(ordered_ids), database, alias_min_uid, widths)
        )

    records = forwarding.apply_alias_overrides(records, aliases, widths)
    records.sort(key=lambda record: record.account_id)
    return records


def _alias_only_records(
    aliases: Mapping[str, str],
    known_ids: set[str],
    database: AccountDatabase,
    min_uid: int,
    widths: ColumnWidths | None,
) -> list[AccountRecord]:
    records: list[AccountRecord] = []
    for name, target in aliases.items():
        if name in known_ids:
            continue
        entry = database.lookup_account(name)
        if entry is not None and entry.uid < min_uid:
            continue
        records.append(
            AccountRecord(
                account_id=name,
                full_name="",
                total_size=0,
                total_messages=0,
                forward_address=target,
            )
        )
        if widths is not None:
            widths.widen(name=name, forward=target)
    return records


__all__ = [
    "AccountRecord",
    "DEFAULT_INBOX_ROOT",
    "DEFAULT_MAIL_DIR",
    "aggregate_account",
    "inventory_accounts",
]
