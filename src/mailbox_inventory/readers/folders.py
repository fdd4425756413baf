"""Discover mail folders stored beneath an account's mail directory."""

from __future__ import annotations

import os
from pathlib import Path, PurePosixPath
from typing import Iterator


def discover_folders(root: Path) -> Iterator[str]:
    """Yield the relative path of every regular file beneath ``root``.

    Hidden files are skipped and hidden directories are pruned together with
    everything below them. Symbolic links are followed, but each real
    directory is only walked once. A missing ``root`` yields nothing.
    """

    if not root.is_dir():
        return

    seen: set[tuple[int, int]] = set()
    for current, dirs, files in os.walk(root, followlinks=True):
        current_path = Path(current)
        stat = current_path.stat()
        key = (stat.st_dev, stat.st_ino)
        if key in seen:
            dirs[:] = []
            continue
        seen.add(key)

        dirs[:] = sorted(d for d in dirs if not d.startswith("."))
        relative_dir = current_path.relative_to(root)
        for filename in sorted(files):
            if filename.startswith("."):
                continue
            if not (current_path / filename).is_file():
                continue
            yield str(PurePosixPath(*relative_dir.parts, filename))


__all__ = ["discover_folders"]
