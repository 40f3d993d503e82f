"""Convert tabs to spaces, or leading spaces to tabs, in a file."""

from __future__ import annotations

import os
import shutil
import tempfile
from dataclasses import dataclass
from typing import Any, Mapping

TABS_TO_SPACES = "tabs_to_spaces"
SPACES_TO_TABS = "spaces_to_tabs"
DEFAULT_SPACES = 4

_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


@dataclass
class NotabResult:
    """Outcome of normalising one file."""

    file: str
    replacements: int
    lines_affected: int
    direction: str

    def to_dict(self) -> dict[str, Any]:
        """Return the result as JSON-ready data."""
        return {
            "file": self.file,
            "replacements": self.replacements,
            "lines_affected": self.lines_affected,
            "direction": self.direction,
        }


def expand_tabs(text: str, spaces: int = DEFAULT_SPACES) -> tuple[str, int, int]:
    """Replace every tab with ``spaces`` spaces.

    Returns the new text, the number of tabs replaced and the number of lines touched.
    """
    replacement = " " * spaces
    replacements = lines_affected = 0
    lines = text.split("\n")
    for i, line in enumerate(lines):
        count = line.count("\t")
        if count:
            replacements += count
            lines_affected += 1
            lines[i] = line.replace("\t", replacement)
    return "\n".join(lines), replacements, lines_affected


def tabify_text(text: str, spaces: int = DEFAULT_SPACES) -> tuple[str, int, int]:
    """Replace each leading group of ``spaces`` spaces with a tab.

    Returns the new text, the number of groups replaced and the number of lines touched.
    """
    group = " " * spaces
    replacements = lines_affected = 0
    lines = text.split("\n")
    for i, line in enumerate(lines):
        leading = 0
        while line.startswith(group, leading):
            leading += spaces
        groups = leading // spaces
        if groups == 0:
            continue
        replacements += groups
        lines_affected += 1
        lines[i] = "\t" * groups + line[leading:]
    return "\n".join(lines), replacements, lines_affected


def _atomic_write(path: str, data: bytes) -> None:
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp = tempfile.mkstemp(dir=directory, prefix=".notab-")
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        try:
            shutil.copymode(path, tmp)
        except OSError:
            pass
        os.replace(tmp, path)
    except BaseException:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise


def _convert(path: str, spaces: int, tabify: bool) -> NotabResult:
    try:
        with open(path, "rb") as handle:
            text = handle.read().decode(_ENCODING, _ERRORS)
    except OSError as exc:
        raise OSError(f"reading file: {exc}") from exc

    convert = tabify_text if tabify else expand_tabs
    new_text, replacements, lines_affected = convert(text, spaces)

    if replacements:
        try:
            _atomic_write(path, new_text.encode(_ENCODING, _ERRORS))
        except OSError as exc:
            raise OSError(f"writing file: {exc}") from exc

    return NotabResult(
        file=path,
        replacements=replacements,
        lines_affected=lines_affected,
        direction=SPACES_TO_TABS if tabify else TABS_TO_SPACES,
    )


def normalize_file(path: str, spaces: int = DEFAULT_SPACES) -> NotabResult:
    """Replace all tabs in the file with spaces; the file is rewritten only if it changes."""
    return _convert(path, spaces, tabify=False)


def tabify_file(path: str, spaces: int = DEFAULT_SPACES) -> NotabResult:
    """Replace leading space groups in the file with tabs; rewritten only if it changes."""
    return _convert(path, spaces, tabify=True)


def _resolve(path: str, work_dir: str) -> str:
    if not work_dir or os.path.isabs(path):
        return path
    return os.path.join(work_dir, path)


def _to_int(value: Any) -> int:
    if isinstance(value, (bool, int, float)):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return 0
    return 0


def run(params: Mapping[str, Any], work_dir: str = "") -> dict[str, Any]:
    """Normalise a file from tool parameters and return JSON-ready data."""
    path = params.get("file")
    if not isinstance(path, str) or not path:
        raise ValueError("file is required")
    path = _resolve(path, work_dir)

    spaces = DEFAULT_SPACES
    if "spaces" in params:
        n = _to_int(params["spaces"])
        if n >= 1:
            spaces = n

    tabs = params.get("tabs")
    if isinstance(tabs, bool) and tabs:
        return tabify_file(path, spaces).to_dict()
    return normalize_file(path, spaces).to_dict()