"""Tests for rendering inventory reports."""

import io
from datetime import date

from mailbox_inventory.inventory import AccountRecord
from mailbox_inventory.readers.mbox import MailStoreStats
from mailbox_inventory.writers import report


def _records() -> list[AccountRecord]:
    return [
        AccountRecord("alice", "Alice A", 2560, 4),
        AccountRecord("bob", "Bob B", 0, 0, forward_address="bob@other.org"),
    ]


def test_column_widths_never_shrink() -> None:
    widths = report.ColumnWidths.for_accounts()
    widths.widen(name="a-long-account-name")
    widths.widen(name="x", forward="")

    assert widths.name == len("a-long-account-name")
    assert widths.forward == len(report.FORWARD_HEADER)


def test_csv_without_counts() -> None:
    stream = io.StringIO()

    report.write_account_csv(_records(), stream, include_counts=False)

    assert stream.getvalue().splitlines() == [
        "User,Full Name,Mailbox Size,Forward Address",
        "alice,Alice A,2.50 KB,",
        "bob,Bob B,0 bytes,bob@other.org",
    ]


def test_csv_with_counts() -> None:
    stream = io.StringIO()

    report.write_account_csv(_records(), stream, include_counts=True)

    assert stream.getvalue().splitlines()[0] == "User,Full Name,Mailbox Size,Messages,Forward Address"
    assert stream.getvalue().splitlines()[1] == "alice,Alice A,2.50 KB,4,"


def test_account_table_alignment() -> None:
    widths = report.ColumnWidths.for_accounts()
    for record in _records():
        widths.widen(name=record.account_id, full_name=record.full_name, forward=record.forward_address)

    lines = report.format_account_table(_records(), widths, include_counts=True)

    assert lines[0].split() == ["User", "Full", "Name", "Mailbox", "Size", "Messages", "Forward", "Address"]
    assert set(lines[1]) == {"-"}
    assert len(lines[1]) == len(lines[0])
    size_column = lines[0].index("Mailbox Size")
    assert lines[2][size_column:].startswith("2.50 KB")
    assert lines[3][size_column:].startswith("0 bytes")
    forward_column = lines[0].index("Forward Address")
    assert lines[3][forward_column:] == "bob@other.org  "


def test_account_table_without_counts_has_no_messages_column() -> None:
    widths = report.ColumnWidths.for_accounts()

    lines = report.format_account_table(_records(), widths, include_counts=False)

    assert "Messages" not in lines[0]
    assert lines[2].split() == ["alice", "Alice", "A", "2.50", "KB"]


def test_folder_report_layout() -> None:
    record = AccountRecord(
        "alice",
        "Alice A",
        total_size=3072,
        total_messages=2,
        inbox=MailStoreStats(size=2048, message_count=2, newest_date=date(2024, 5, 1)),
        folders={"lists/announcements-archive": MailStoreStats(size=1024, message_count=0)},
    )
    widths = report.ColumnWidths.for_folders()
    widths.widen_for_stats("INBOX", 2048, 2)
    widths.widen_for_stats("lists/announcements-archive", 1024, 0)
    widths.widen_for_stats("TOTAL", 3072, 2)

    lines = report.format_folder_report(record, widths)

    assert lines[0].split() == ["Folder", "Name", "Mailbox", "Size", "Messages", "Newest", "Message"]
    assert lines[1] == lines[-2]
    assert len(lines[1]) == len(lines[0])
    assert lines[2].split() == ["INBOX", "2.00", "KB", "2", "2024-05-01"]
    assert lines[3].split() == ["lists/announcements-archive", "1024", "bytes", "0", "-"]
    assert lines[-1].split() == ["TOTAL", "3.00", "KB", "2"]
    assert lines[3].index("1024 bytes") == lines[0].index("Mailbox Size")
