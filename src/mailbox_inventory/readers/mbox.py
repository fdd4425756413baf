"""Read statistics from mbox-format mail stores."""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from datetime import date
from pathlib import Path

# "From sender Www Mmm dd hh:mm:ss yyyy" envelope line starting each message.
_BOUNDARY = re.compile(
    rb"^From +\S+ *\w{3} (\w{3})\s+(\d{1,2}) (\d{2}):(\d{2}):(\d{2}) (\d{4})"
)

_MONTHS = {
    name: index
    for index, name in enumerate(
        ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
    )
}

EPOCH_DATE = date.fromtimestamp(0)


class StatError(OSError):
    """Raised when the size of a mail store cannot be determined."""


@dataclass(frozen=True)
class MailStoreStats:
    """Size, message count and newest message date of one mail store."""

    size: int
    message_count: int
    newest_date: date = EPOCH_DATE

    @property
    def has_date(self) -> bool:
        return self.message_count > 0


EMPTY_STATS = MailStoreStats(size=0, message_count=0)


def read_mail_store(path: Path, *, count_messages: bool = False) -> MailStoreStats:
    """Return statistics for the mbox file at ``path``.

    The size is the file's on-disk length. Messages are only counted when
    ``count_messages`` is set; otherwise the content is never scanned and the
    count is zero with ``EPOCH_DATE`` as the date.
    """

    try:
        size = path.stat().st_size
    except OSError as exc:
        raise StatError(exc.errno, f"stat({path}): {exc.strerror}") from exc

    count = 0
    newest = 0.0
    with path.open("rb") as handle:
        if count_messages:
            for line in handle:
                match = _BOUNDARY.match(line)
                if match is None:
                    continue
                count += 1
                timestamp = _boundary_timestamp(match)
                if timestamp is not None and timestamp > newest:
                    newest = timestamp

    return MailStoreStats(
        size=size,
        message_count=count,
        newest_date=date.fromtimestamp(newest),
    )


def _boundary_timestamp(match: re.Match[bytes]) -> float | None:
    month_name, day, hour, minute, second, year = (
        group.decode("ascii", errors="replace") for group in match.groups()
    )
    month = _MONTHS.get(month_name)
    if month is None:
        return None
    try:
        return time.mktime(
            (int(year), month + 1, int(day), int(hour), int(minute), int(second), 0, 0, -1)
        )
    except (OverflowError, ValueError):
        return None


__all__ = ["EMPTY_STATS", "EPOCH_DATE", "MailStoreStats", "StatError", "read_mail_store"]
