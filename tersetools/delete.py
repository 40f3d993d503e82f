"""Move files and directories into a Trash directory instead of deleting them."""

from __future__ import annotations

import os
import stat
import time
from dataclasses import dataclass
from typing import Any, Mapping

BLOCKED_PREFIXES = (
    "/System",
    "/Library",
    "/usr",
    "/bin",
    "/sbin",
    "/etc",
    "/var",
    "/private",
    "/Applications",
)


@dataclass
class TrashResult:
    """What was moved where."""

    original_path: str
    trash_path: str
    type: str
    size: int
    items: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Return the result as JSON-ready data, omitting a zero item count."""
        data: dict[str, Any] = {
            "original_path": self.original_path,
            "trash_path": self.trash_path,
            "type": self.type,
            "size": self.size,
        }
        if self.items:
            data["items"] = self.items
        return data


def default_trash_dir() -> str:
    """Return the user's Trash directory, ``$HOME/.Trash``."""
    return os.path.join(os.environ.get("HOME", ""), ".Trash")


def directory_stats(path: str) -> tuple[int, int]:
    """Return total size and entry count of a tree, the root included; errors are skipped."""
    total_size = 0
    total_items = 0
    pending = [path]
    while pending:
        current = pending.pop()
        try:
            info = os.lstat(current)
        except OSError:
            continue
        total_items += 1
        total_size += info.st_size
        if not stat.S_ISDIR(info.st_mode):
            continue
        try:
            with os.scandir(current) as it:
                names = sorted(entry.name for entry in it)
        except OSError:
            continue
        pending.extend(os.path.join(current, name) for name in reversed(names))
    return total_size, total_items


def _split_ext(name: str) -> tuple[str, str]:
    dot = name.rfind(".")
    if dot < 0:
        return name, ""
    return name[:dot], name[dot:]


def trash_path(path: str, trash_dir: str) -> TrashResult:
    """Move ``path`` into ``trash_dir``, renaming on a name collision.

    Raises ValueError for system paths and the Trash itself, FileNotFoundError
    when the path is missing, and OSError when the move fails.
    """
    abs_path = os.path.abspath(path)

    for prefix in BLOCKED_PREFIXES:
        if abs_path.startswith(prefix):
            raise ValueError(f"refusing to trash system path: {abs_path}")
    if abs_path == trash_dir:
        raise ValueError("refusing to trash the Trash directory itself")

    try:
        info = os.lstat(abs_path)
    except FileNotFoundError as exc:
        raise FileNotFoundError(f"path does not exist: {abs_path}") from exc
    except OSError as exc:
        raise OSError(f"cannot stat path: {exc}") from exc

    items = 0
    if stat.S_ISDIR(info.st_mode):
        kind = "directory"
        size, items = directory_stats(abs_path)
    elif stat.S_ISLNK(info.st_mode):
        kind = "symlink"
        size = info.st_size
    else:
        kind = "file"
        size = info.st_size

    try:
        os.makedirs(trash_dir, mode=0o755, exist_ok=True)
    except OSError as exc:
        raise OSError(f"cannot create Trash directory: {exc}") from exc

    base_name = os.path.basename(abs_path)
    dest = os.path.join(trash_dir, base_name)
    if os.path.lexists(dest):
        stem, ext = _split_ext(base_name)
        stamp = time.strftime("%Y%m%d_%H%M%S")
        dest = os.path.join(trash_dir, f"{stem}_{stamp}{ext}")
        if os.path.lexists(dest):
            now_ns = time.time_ns()
            seconds, nanos = divmod(now_ns, 1_000_000_000)
            stamp = time.strftime("%Y%m%d_%H%M%S", time.localtime(seconds)) + f".{nanos:09d}"
            dest = os.path.join(trash_dir, f"{stem}_{stamp}{ext}")

    try:
        os.rename(abs_path, dest)
    except OSError as exc:
        raise OSError(f"failed to move to Trash: {exc}") from exc

    return TrashResult(
        original_path=abs_path, trash_path=dest, type=kind, size=size, items=items
    )


def run(params: Mapping[str, Any], work_dir: str = "") -> dict[str, Any]:
    """Trash a path from tool parameters and return JSON-ready data."""
    path = params.get("path")
    if not isinstance(path, str) or not path:
        raise ValueError("path is required")
    return trash_path(path, default_trash_dir()).to_dict()