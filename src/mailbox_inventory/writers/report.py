"""Render mailbox inventories as aligned tables or CSV."""

from __future__ import annotations

import csv
from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence, TextIO

from lib.sizes import human_size
from mailbox_inventory.readers.mbox import MailStoreStats

if TYPE_CHECKING:  # pragma: no cover
    from mailbox_inventory.inventory import AccountRecord

FOLDER_HEADER = "Folder Name"
USER_HEADER = "User"
FULL_NAME_HEADER = "Full Name"
SIZE_HEADER = "Mailbox Size"
COUNT_HEADER = "Messages"
DATE_HEADER = "Newest Message"
FORWARD_HEADER = "Forward Address"

INBOX_LABEL = "INBOX"
TOTAL_LABEL = "TOTAL"
NO_DATE = "-"


@dataclass
class ColumnWidths:
    """Widest value seen so far in each report column.

    Widths start at the header label lengths and never shrink.
    """

    name: int
    full_name: int = len(FULL_NAME_HEADER)
    size: int = len(SIZE_HEADER)
    count: int = len(COUNT_HEADER)
    forward: int = len(FORWARD_HEADER)

    @classmethod
    def for_folders(cls) -> ColumnWidths:
        return cls(name=len(FOLDER_HEADER))

    @classmethod
    def for_accounts(cls) -> ColumnWidths:
        return cls(name=len(USER_HEADER))

    def widen(
        self,
        *,
        name: str | None = None,
        full_name: str | None = None,
        size: str | None = None,
        count: str | None = None,
        forward: str | None = None,
    ) -> None:
        if name is not None:
            self.name = max(self.name, len(name))
        if full_name is not None:
            self.full_name = max(self.full_name, len(full_name))
        if size is not None:
            self.size = max(self.size, len(size))
        if count is not None:
            self.count = max(self.count, len(count))
        if forward is not None:
            self.forward = max(self.forward, len(forward))

    def widen_for_stats(self, name: str, size: int, count: int) -> None:
        self.widen(name=name, size=human_size(size), count=str(count))


def format_folder_report(record: AccountRecord, widths: ColumnWidths) -> list[str]:
    """Return the per-folder report lines for a single account."""

    name_width = widths.name + 1
    size_width = widths.size + 1
    count_width = widths.count + 1
    date_width = len(DATE_HEADER)

    def row(name: str, size: str, count: str, newest: str) -> str:
        return (
            f"{name:<{name_width}} {size:<{size_width}} "
            f"{count:<{count_width}} {newest:<{date_width}}"
        )

    def stats_row(name: str, stats: MailStoreStats) -> str:
        newest = stats.newest_date.isoformat() if stats.has_date else NO_DATE
        return row(name, human_size(stats.size), str(stats.message_count), newest)

    rule = "-" * (name_width + size_width + count_width + date_width + 3)
    lines = [row(FOLDER_HEADER, SIZE_HEADER, COUNT_HEADER, DATE_HEADER), rule]
    lines.append(stats_row(INBOX_LABEL, record.inbox))
    for folder, stats in record.folders.items():
        lines.append(stats_row(folder, stats))
    lines.append(rule)
    lines.append(
        f"{TOTAL_LABEL:<{name_width}} {human_size(record.total_size):<{size_width}} "
        f"{str(record.total_messages):<{count_width}}"
    )
    return lines


def _account_fields(record: AccountRecord, include_counts: bool) -> list[str]:
    fields = [record.account_id, record.full_name, human_size(record.total_size)]
    if include_counts:
        fields.append(str(record.total_messages))
    fields.append(record.forward_address)
    return fields


def _account_headers(include_counts: bool) -> list[str]:
    headers = [USER_HEADER, FULL_NAME_HEADER, SIZE_HEADER]
    if include_counts:
        headers.append(COUNT_HEADER)
    headers.append(FORWARD_HEADER)
    return headers


def format_account_table(
    records: Sequence[AccountRecord],
    widths: ColumnWidths,
    *,
    include_counts: bool,
) -> list[str]:
    """Return a fixed-width summary table with one row per account."""

    column_widths = [widths.name + 1, widths.full_name, widths.size + 1]
    if include_counts:
        column_widths.append(widths.count + 1)
    column_widths.append(widths.forward)

    def row(fields: Sequence[str]) -> str:
        return " ".join(f"{value:<{width}}" for value, width in zip(fields, column_widths))

    header = row(_account_headers(include_counts))
    lines = [header, "-" * len(header)]
    for record in records:
        lines.append(row(_account_fields(record, include_counts)))
    return lines


def write_account_csv(
    records: Sequence[AccountRecord],
    stream: TextIO,
    *,
    include_counts: bool,
) -> None:
    """Write the account summary to ``stream`` as CSV."""

    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(_account_headers(include_counts))
    for record in records:
        writer.writerow(_account_fields(record, include_counts))


__all__ = [
    "ColumnWidths",
    "format_account_table",
    "format_folder_report",
    "write_account_csv",
]
