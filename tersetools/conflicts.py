"""Parse git merge conflict markers into structured data."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Mapping, Sequence

MARKER_OURS = "<<<<<<<"
MARKER_BASE = "|||||||"
MARKER_SEP = "======="
MARKER_THEIRS = ">>>>>>>"


class _State(Enum):
    NONE = auto()
    OURS = auto()
    BASE = auto()
    THEIRS = auto()


@dataclass
class Conflict:
    """One merge conflict block."""

    file: str
    line: int
    end_line: int = 0
    ours_ref: str = ""
    theirs_ref: str = ""
    ours: str = ""
    theirs: str = ""
    base: str = ""
    context_above: str = ""
    context_below: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "file": self.file,
            "line": self.line,
            "end_line": self.end_line,
            "ours_ref": self.ours_ref,
            "theirs_ref": self.theirs_ref,
            "ours": self.ours,
            "theirs": self.theirs,
        }
        for key in ("base", "context_above", "context_below"):
            value = getattr(self, key)
            if value:
                data[key] = value
        return data


@dataclass
class FileConflicts:
    """The conflicts found in one file."""

    file: str
    conflicts: list[Conflict] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.conflicts)


@dataclass
class ConflictsResult:
    """Top-level result across all files."""

    files: list[FileConflicts] = field(default_factory=list)
    total: int = 0
    has_diff3: bool = False
    summary: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return the result as JSON-ready data."""
        return {
            "files": [
                {
                    "file": f.file,
                    "conflicts": [c.to_dict() for c in f.conflicts],
                    "count": f.count,
                }
                for f in self.files
            ],
            "total": self.total,
            "has_diff3": self.has_diff3,
            "summary": self.summary,
        }


def _is_separator(line: str) -> bool:
    return line.startswith(MARKER_SEP) and not line.startswith(MARKER_SEP + "=")


def is_conflict_marker_line(line: str) -> bool:
    """Return True if ``line`` starts with any conflict marker."""
    return (
        line.startswith(MARKER_OURS)
        or line.startswith(MARKER_BASE)
        or _is_separator(line)
        or line.startswith(MARKER_THEIRS)
    )


def _gather_context(lines: list[str], start: int, count: int, direction: int) -> str:
    collected: list[str] = []
    for step in range(count):
        idx = start + step * direction
        if idx < 0 or idx >= len(lines) or is_conflict_marker_line(lines[idx]):
            break
        collected.append(lines[idx])
    if direction < 0:
        collected.reverse()
    return "\n".join(collected)


def parse_file_conflicts(path: str, context_lines: int = 1) -> tuple[FileConflicts, bool]:
    """Parse one file; return its conflicts and whether diff3 base sections were seen.

    Raises OSError when the file cannot be read.
    """
    with open(path, "rb") as handle:
        text = handle.read().decode("utf-8", errors="replace")
    lines = [line.rstrip("\r") for line in text.split("\n")]

    result = FileConflicts(file=path)
    has_diff3 = False
    state = _State.NONE
    current: Conflict | None = None
    ours: list[str] = []
    base: list[str] = []
    theirs: list[str] = []

    for line_no, line in enumerate(lines, 1):
        if state is _State.NONE:
            if line.startswith(MARKER_OURS):
                state = _State.OURS
                current = Conflict(
                    file=path, line=line_no, ours_ref=line[len(MARKER_OURS):].strip()
                )
                ours, base, theirs = [], [], []
        elif state is _State.OURS:
            if line.startswith(MARKER_BASE):
                state = _State.BASE
                has_diff3 = True
            elif _is_separator(line):
                state = _State.THEIRS
            else:
                ours.append(line)
        elif state is _State.BASE:
            if _is_separator(line):
                state = _State.THEIRS
            else:
                base.append(line)
        elif state is _State.THEIRS and current is not None:
            if line.startswith(MARKER_THEIRS):
                current.end_line = line_no
                current.theirs_ref = line[len(MARKER_THEIRS):].strip()
                current.ours = "\n".join(ours)
                current.theirs = "\n".join(theirs)
                if base:
                    current.base = "\n".join(base)
                if context_lines > 0:
                    current.context_above = _gather_context(
                        lines, current.line - 2, context_lines, -1
                    )
                    current.context_below = _gather_context(
                        lines, current.end_line, context_lines, 1
                    )
                result.conflicts.append(current)
                current = None
                state = _State.NONE
            else:
                theirs.append(line)

    return result, has_diff3


def parse_conflicts(files: Sequence[str], context_lines: int = 1) -> ConflictsResult:
    """Parse every file and summarise the conflicts found.

    Raises OSError naming the file that could not be read.
    """
    result = ConflictsResult()
    for path in files:
        try:
            file_result, diff3 = parse_file_conflicts(path, context_lines)
        except OSError as exc:
            raise OSError(f"failed to parse {path}: {exc}") from exc
        result.has_diff3 = result.has_diff3 or diff3
        result.files.append(file_result)
        result.total += file_result.count

    file_word = "file" if len(files) == 1 else "files"
    conflict_word = "conflict" if result.total == 1 else "conflicts"
    result.summary = f"Found {result.total} {conflict_word} in {len(files)} {file_word}"
    return result


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
    """Parse conflicts from tool parameters and return JSON-ready data."""
    raw = params.get("file")
    if isinstance(raw, str):
        files = [raw] if raw else []
    elif isinstance(raw, (list, tuple)):
        files = [f for f in raw if isinstance(f, str) and f]
    else:
        files = []
    if not files:
        raise ValueError("file is required")
    files = [_resolve(f, work_dir) for f in files]

    context_lines = 1
    if "context_lines" in params:
        n = _to_int(params["context_lines"])
        if n >= 0:
            context_lines = n

    return parse_conflicts(files, context_lines).to_dict()