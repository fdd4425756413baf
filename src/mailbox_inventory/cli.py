"""Command-line interface for the mailbox inventory report."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable

from mailbox_inventory import forwarding
from mailbox_inventory.accounts import (
    DEFAULT_MIN_UID,
    AccountDatabase,
    GetentAccountDatabase,
    read_account_list,
)
from mailbox_inventory.inventory import (
    DEFAULT_INBOX_ROOT,
    DEFAULT_MAIL_DIR,
    aggregate_account,
    inventory_accounts,
)
from mailbox_inventory.writers.report import (
    ColumnWidths,
    format_account_table,
    format_folder_report,
    write_account_csv,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mailbox-inventory",
        description="Report mailbox sizes, message counts and forwarding addresses for system accounts.",
    )

    selection = parser.add_mutually_exclusive_group(required=True)
    selection.add_argument(
        "-a",
        "--all",
        action="store_true",
        help="Look up all accounts from the passwd database.",
    )
    selection.add_argument(
        "-u",
        "--user",
        metavar="USERNAME",
        help="Report every mail folder of a single account.",
    )
    selection.add_argument(
        "-f",
        "--file",
        type=Path,
        metavar="FILENAME",
        help="Look up the accounts listed one per line in FILENAME.",
    )

    parser.add_argument(
        "-U",
        "--min-uid",
        type=int,
        default=DEFAULT_MIN_UID,
        metavar="UID",
        help=f"Minimum UID to use when scanning the passwd database (default {DEFAULT_MIN_UID}).",
    )
    parser.add_argument(
        "-c",
        "--csv",
        action="store_true",
        help="Output in CSV format; ignored with -u.",
    )
    parser.add_argument(
        "-n",
        "--counts",
        action="store_true",
        help="Include message counts.",
    )

    layout = parser.add_mutually_exclusive_group()
    layout.add_argument(
        "-m",
        "--mbox",
        action="store_true",
        help="Read mail folders in mbox format (default).",
    )
    layout.add_argument(
        "-M",
        "--maildir",
        action="store_true",
        help="Read mail folders in Maildir format (not yet supported).",
    )

    parser.add_argument(
        "-i",
        "--inbox-path",
        type=Path,
        default=DEFAULT_INBOX_ROOT,
        metavar="PATH",
        help=f"Directory containing inbox files (default '{DEFAULT_INBOX_ROOT}').",
    )
    parser.add_argument(
        "-d",
        "--mail-dir",
        type=Path,
        default=DEFAULT_MAIL_DIR,
        metavar="PATH",
        help=f"Mail folder directory relative to each home directory (default '{DEFAULT_MAIL_DIR}').",
    )
    parser.add_argument(
        "--aliases",
        type=Path,
        default=forwarding.DEFAULT_ALIASES_PATH,
        metavar="PATH",
        help=f"System alias table (default '{forwarding.DEFAULT_ALIASES_PATH}').",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Print progress markers while processing accounts.",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable the progress bar while scanning multiple accounts.",
    )
    return parser


Handler = Callable[[argparse.Namespace, AccountDatabase], int]


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.maildir:
        parser.error("-M: the Maildir layout is not yet supported")
    if args.mail_dir.is_absolute():
        parser.error("-d must be relative to the account's home directory")
    if args.user is not None:
        args.counts = True
        args.handler = _handle_single_account
    else:
        args.handler = _handle_account_summary

    return args


def main(argv: list[str] | None = None, database: AccountDatabase | None = None) -> int:
    args = parse_args(argv)
    _configure_logging(args.verbose)
    handler: Handler = args.handler
    try:
        return handler(args, database or GetentAccountDatabase())
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


class _ConsoleHandler(logging.StreamHandler):
    """Stream handler installed by ``main``; replaced on every run."""


def _configure_logging(verbose: bool) -> None:
    # Warnings go to stderr; stdout only carries the report and -v markers.
    package_logger = logging.getLogger("mailbox_inventory")
    for handler in list(package_logger.handlers):
        if isinstance(handler, _ConsoleHandler):
            package_logger.removeHandler(handler)

    formatter = logging.Formatter("%(message)s")
    diagnostics = _ConsoleHandler(sys.stderr)
    diagnostics.setLevel(logging.WARNING)
    diagnostics.setFormatter(formatter)
    markers = _ConsoleHandler(sys.stdout)
    markers.addFilter(lambda record: record.levelno < logging.WARNING)
    markers.setFormatter(formatter)

    package_logger.addHandler(diagnostics)
    package_logger.addHandler(markers)
    package_logger.setLevel(logging.INFO if verbose else logging.WARNING)


def _handle_single_account(args: argparse.Namespace, database: AccountDatabase) -> int:
    widths = ColumnWidths.for_folders()
    record = aggregate_account(
        args.user,
        database,
        inbox_root=args.inbox_path,
        folder_dir=args.mail_dir,
        count_messages=True,
        include_folders=True,
        resolve_forwarding=False,
        widths=widths,
    )
    print("\n".join(format_folder_report(record, widths)))
    return 0


def _handle_account_summary(args: argparse.Namespace, database: AccountDatabase) -> int:
    if args.all:
        account_ids = database.list_accounts(args.min_uid)
        alias_min_uid: int | None = args.min_uid
    else:
        account_ids = read_account_list(args.file)
        alias_min_uid = None

    aliases = forwarding.load_alias_table(args.aliases)
    widths = ColumnWidths.for_accounts()
    records = inventory_accounts(
        account_ids,
        database,
        inbox_root=args.inbox_path,
        folder_dir=args.mail_dir,
        count_messages=args.counts,
        aliases=aliases,
        alias_min_uid=alias_min_uid,
        widths=widths,
        show_progress=not args.no_progress,
    )

    if args.csv:
        write_account_csv(records, sys.stdout, include_counts=args.counts)
    else:
        print("\n".join(format_account_table(records, widths, include_counts=args.counts)))
    return 0


if __name__ == "__main__":  # pragma: no cover - manual execution entry point
    raise SystemExit(main())
