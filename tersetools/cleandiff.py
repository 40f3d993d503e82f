"""Compact, structured summaries of unified git diffs."""

from __future__ import annotations

import os
import re
import subprocess
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

_GIT_TIMEOUT = 30.0
_DIFF_PREFIX = "diff --git "
_INT_RE = re.compile(r"[+-]?\d+")


@dataclass
class Hunk:
    """A single diff hunk with its added, removed and context lines."""

    old_start: int = 0
    old_count: int = 0
    new_start: int = 0
    new_count: int = 0
    header: str = ""
    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    context: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "old_start": self.old_start,
            "old_count": self.old_count,
            "new_start": self.new_start,
            "new_count": self.new_count,
        }
        if self.header:
            data["header"] = self.header
        for key in ("added", "removed", "context"):
            values = getattr(self, key)
            if values:
                data[key] = list(values)
        return data


@dataclass
class FileDiff:
    """The changes made to one file."""

    path: str = ""
    old_path: str = ""
    status: str = "modified"
    insertions: int = 0
    deletions: int = 0
    hunks: list[Hunk] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"path": self.path}
        if self.old_path:
            data["old_path"] = self.old_path
        data["status"] = self.status
        data["insertions"] = self.insertions
        data["deletions"] = self.deletions
        if self.hunks:
            data["hunks"] = [h.to_dict() for h in self.hunks]
        return data


@dataclass
class DiffSummary:
    """Totals across all changed files."""

    files_changed: int = 0
    insertions: int = 0
    deletions: int = 0


@dataclass
class DiffResult:
    """Top-level diff output."""

    summary: DiffSummary = field(default_factory=DiffSummary)
    files: list[FileDiff] = field(default_factory=list)

    @classmethod
    def from_files(cls, files: list[FileDiff]) -> "DiffResult":
        return cls(
            summary=DiffSummary(
                files_changed=len(files),
                insertions=sum(f.insertions for f in files),
                deletions=sum(f.deletions for f in files),
            ),
            files=files,
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the result as JSON-ready data."""
        return {
            "summary": {
                "files_changed": self.summary.files_changed,
                "insertions": self.summary.insertions,
                "deletions": self.summary.deletions,
            },
            "files": [f.to_dict() for f in self.files],
        }


def _atoi(text: str) -> int:
    return int(text) if _INT_RE.fullmatch(text) else 0


def parse_range(text: str) -> tuple[int, int]:
    """Parse a hunk range such as ``-12,3`` into (start, count); count defaults to 1."""
    start, sep, count = text.lstrip("-+").partition(",")
    return _atoi(start), (_atoi(count) if sep else 1)


def parse_hunk_header(line: str) -> tuple[int, int, int, int, str]:
    """Parse an ``@@ -a,b +c,d @@ header`` line.

    Returns (old_start, old_count, new_start, new_count, header); all zero
    and empty when the closing marker is missing.
    """
    rest = line[3:] if line.startswith("@@ ") else line
    closing = rest.find(" @@")
    if closing == -1:
        return 0, 0, 0, 0, ""
    header = rest[closing + 3:].strip()
    parts = rest[:closing].split()
    old_start, old_count = parse_range(parts[0]) if parts else (0, 0)
    new_start, new_count = parse_range(parts[1]) if len(parts) >= 2 else (0, 0)
    return old_start, old_count, new_start, new_count, header


def parse_diff_git_path(line: str) -> str:
    """Extract the destination path from a ``diff --git a/x b/x`` line."""
    _, sep, after = line.partition(" b/")
    if sep:
        return after
    trimmed = line[len("diff --git a/"):] if line.startswith("diff --git a/") else line
    return trimmed.split(" ", 1)[0]


def _parse_hunk(lines: list[str], start: int) -> tuple[Hunk, int]:
    old_start, old_count, new_start, new_count, header = parse_hunk_header(lines[start])
    hunk = Hunk(old_start, old_count, new_start, new_count, header)
    i = start + 1
    while i < len(lines):
        line = lines[i]
        if line.startswith(_DIFF_PREFIX) or line.startswith("@@"):
            break
        if line.startswith("+"):
            hunk.added.append(line[1:])
        elif line.startswith("-"):
            hunk.removed.append(line[1:])
        elif line.startswith(" "):
            hunk.context.append(line[1:])
        i += 1
    return hunk, i


def _apply_metadata(file: FileDiff, meta: str) -> None:
    if meta.startswith("new file mode"):
        file.status = "added"
    elif meta.startswith("deleted file mode"):
        file.status = "deleted"
    elif meta.startswith("rename from "):
        file.status = "renamed"
        file.old_path = meta[len("rename from "):]
    elif meta.startswith("rename to "):
        file.path = meta[len("rename to "):]
    elif meta.startswith("copy from "):
        file.status = "copied"
        file.old_path = meta[len("copy from "):]
    elif meta.startswith("copy to "):
        file.path = meta[len("copy to "):]


def parse_unified_diff(raw: str, stat_only: bool = False) -> list[FileDiff]:
    """Parse unified diff text into per-file structures."""
    files: list[FileDiff] = []
    lines = raw.split("\n")
    i = 0
    while i < len(lines):
        if not lines[i].startswith(_DIFF_PREFIX):
            i += 1
            continue

        file = FileDiff(path=parse_diff_git_path(lines[i]))
        i += 1

        while i < len(lines) and not lines[i].startswith((_DIFF_PREFIX, "@@", "--- ")):
            _apply_metadata(file, lines[i])
            i += 1

        if i < len(lines) and lines[i].startswith("--- "):
            i += 1
        if i < len(lines) and lines[i].startswith("+++ "):
            i += 1

        while i < len(lines) and not lines[i].startswith(_DIFF_PREFIX):
            if not lines[i].startswith("@@"):
                i += 1
                continue
            hunk, i = _parse_hunk(lines, i)
            file.insertions += len(hunk.added)
            file.deletions += len(hunk.removed)
            if not stat_only:
                file.hunks.append(hunk)

        files.append(file)
    return files


def clean_diff(
    repo_path: str = "",
    ref: str = "",
    staged: bool = False,
    stat_only: bool = False,
    context_lines: int = 0,
    file_filter: Sequence[str] = (),
) -> DiffResult:
    """Run ``git diff`` in ``repo_path`` and return its parsed result.

    Raises RuntimeError when git cannot be run or reports a failure.
    """
    args = ["git", "diff", f"-U{context_lines}"]
    if staged:
        args.append("--cached")
    if ref:
        args.append(ref)
    if file_filter:
        args.append("--")
        args.extend(file_filter)

    try:
        proc = subprocess.run(
            args,
            cwd=repo_path or None,
            capture_output=True,
            timeout=_GIT_TIMEOUT,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        raise RuntimeError(f"git diff failed: {exc}") from exc

    if proc.returncode != 0:
        stderr = proc.stderr.decode("utf-8", errors="replace")
        raise RuntimeError(f"git diff failed: {stderr}")

    raw = proc.stdout.decode("utf-8", errors="replace")
    if not raw:
        return DiffResult()
    return DiffResult.from_files(parse_unified_diff(raw, stat_only))


def _resolve(path: str, work_dir: str) -> str:
    if not work_dir or os.path.isabs(path):
        return path
    return os.path.join(work_dir, path)


def _to_int(value: Any) -> int:
    if isinstance(value, (bool, int, float)):
        return int(value)
    if isinstance(value, str):
        return _atoi(value.strip())
    return 0


def run(params: Mapping[str, Any], work_dir: str = "") -> dict[str, Any]:
    """Run a diff from tool parameters and return JSON-ready data."""
    repo_path = work_dir
    path = params.get("path")
    if isinstance(path, str) and path:
        repo_path = _resolve(path, work_dir)

    ref = params.get("ref")
    staged = params.get("staged")
    stat_only = params.get("stat_only")
    file_filter = params.get("file_filter")

    result = clean_diff(
        repo_path=repo_path,
        ref=ref if isinstance(ref, str) else "",
        staged=staged if isinstance(staged, bool) else False,
        stat_only=stat_only if isinstance(stat_only, bool) else False,
        context_lines=_to_int(params["context_lines"]) if "context_lines" in params else 0,
        file_filter=(
            [f for f in file_filter if isinstance(f, str)]
            if isinstance(file_filter, (list, tuple))
            else []
        ),
    )
    return result.to_dict()