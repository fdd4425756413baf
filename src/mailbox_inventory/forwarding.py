"""Resolve the address an account's mail is forwarded to.

Three sources are consulted, each able to overwrite the previous result:

1. delivery rules in ``~/.procmailrc``,
2. addresses listed in ``~/.forward``,
3. entries in the system alias table (``/etc/aliases``).

The alias table always wins. It is applied once, after every account has
been aggregated, by :func:`apply_alias_overrides`.
"""

from __future__ import annotations

import dataclasses
import enum
import re
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Mapping, Sequence

if TYPE_CHECKING:  # pragma: no cover
    from mailbox_inventory.inventory import AccountRecord
    from mailbox_inventory.writers.report import ColumnWidths

DEFAULT_ALIASES_PATH = Path("/etc/aliases")
PROCMAILRC_NAME = ".procmailrc"
FORWARD_NAME = ".forward"

_RULE_START = re.compile(r"^:0")
_FORWARD_ACTION = re.compile(r"^!\s*(\S+@\S+.*)")
_ADDRESS_LINE = re.compile(r"^\S+@\S+")
_ALIAS_ENTRY = re.compile(r"^(\S+):\s*(\S.*)$")


class ForwardSource(enum.Enum):
    """Where a resolved forwarding address came from."""

    NONE = "none"
    DELIVERY_RULE = "delivery-rule"
    FORWARD_FILE = "forward-file"
    ALIAS = "alias"


class DeliveryRuleState(enum.Enum):
    IDLE = "idle"
    ARMED = "armed"


def scan_delivery_rules(lines: Iterable[str]) -> str:
    """Return the last forwarding address found directly after a ``:0`` rule.

    A ``:0`` line arms the scanner. While armed, the next line either is a
    ``! user@host`` action, whose address is captured, or is anything else.
    Either way the scanner returns to idle.
    """

    state = DeliveryRuleState.IDLE
    forward = ""
    for raw_line in lines:
        line = raw_line.rstrip("\n")
        if _RULE_START.match(line):
            state = DeliveryRuleState.ARMED
            continue
        if state is DeliveryRuleState.ARMED:
            match = _FORWARD_ACTION.match(line)
            if match:
                forward = match.group(1)
            state = DeliveryRuleState.IDLE
    return forward


def scan_forward_file(lines: Iterable[str]) -> str:
    """Return the last address-like line of a ``.forward`` file."""

    forward = ""
    for raw_line in lines:
        line = raw_line.rstrip("\n")
        if _ADDRESS_LINE.match(line):
            forward = line
    return forward


def parse_alias_table(lines: Iterable[str]) -> dict[str, str]:
    """Parse ``name: target`` entries, ignoring ``#`` comments.

    A later entry for the same name replaces an earlier one.
    """

    aliases: dict[str, str] = {}
    for raw_line in lines:
        line = raw_line.rstrip("\n").split("#", 1)[0]
        match = _ALIAS_ENTRY.match(line)
        if match is None:
            continue
        name, target = match.groups()
        aliases[name] = target.rstrip()
    return aliases


def load_alias_table(path: Path = DEFAULT_ALIASES_PATH) -> dict[str, str]:
    """Read the alias table at ``path``; a missing file yields no aliases.

    A table that exists but cannot be read raises ``OSError``.
    """

    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8", errors="replace") as handle:
        return parse_alias_table(handle)


def resolve_local_forward(home_dir: Path) -> tuple[str, ForwardSource]:
    """Return the forward configured in ``home_dir``'s own rule files."""

    forward = ""
    source = ForwardSource.NONE

    procmailrc = home_dir / PROCMAILRC_NAME
    if procmailrc.is_file():
        with procmailrc.open("r", encoding="utf-8", errors="replace") as handle:
            candidate = scan_delivery_rules(handle)
        if candidate:
            forward, source = candidate, ForwardSource.DELIVERY_RULE

    forward_file = home_dir / FORWARD_NAME
    if forward_file.is_file():
        with forward_file.open("r", encoding="utf-8", errors="replace") as handle:
            candidate = scan_forward_file(handle)
        if candidate:
            forward, source = candidate, ForwardSource.FORWARD_FILE

    return forward, source


def resolve_forward(
    account_id: str,
    home_dir: Path | None,
    aliases: Mapping[str, str],
) -> tuple[str, ForwardSource]:
    """Return the effective forward for one account across all three sources."""

    forward, source = ("", ForwardSource.NONE)
    if home_dir is not None:
        forward, source = resolve_local_forward(home_dir)
    if account_id in aliases:
        forward, source = aliases[account_id], ForwardSource.ALIAS
    return forward, source


def apply_alias_overrides(
    records: Sequence[AccountRecord],
    aliases: Mapping[str, str],
    widths: ColumnWidths | None = None,
) -> list[AccountRecord]:
    """Return ``records`` with alias-table targets replacing local forwards."""

    updated: list[AccountRecord] = []
    for record in records:
        target = aliases.get(record.account_id)
        if target is not None:
            record = dataclasses.replace(record, forward_address=target)
            if widths is not None:
                widths.widen(forward=target)
        updated.append(record)
    return updated


__all__ = [
    "DEFAULT_ALIASES_PATH",
    "DeliveryRuleState",
    "FORWARD_NAME",
    "ForwardSource",
    "PROCMAILRC_NAME",
    "apply_alias_overrides",
    "load_alias_table",
    "parse_alias_table",
    "resolve_forward",
    "resolve_local_forward",
    "scan_delivery_rules",
    "scan_forward_file",
]
