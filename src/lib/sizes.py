"""Helpers for rendering byte counts as human-readable sizes."""

from __future__ import annotations

_UNITS = (
    (1024**4, "TB"),
    (1024**3, "GB"),
    (1024**2, "MB"),
    (1024, "KB"),
)


def human_size(size: int) -> str:
    """Return ``size`` formatted as e.g. ``"2.50 KB"`` or ``"1 byte"``.

    A unit is only used once ``size`` is strictly larger than it, so
    ``1024`` stays ``"1024 bytes"``.
    """

    for threshold, unit in _UNITS:
        if size > threshold:
            return f"{size / threshold:.2f} {unit}"
    return f"{size} byte" + ("" if size == 1 else "s")


__all__ = ["human_size"]
