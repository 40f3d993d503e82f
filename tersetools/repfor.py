"""Search and replace strings in files across directories."""

from __future__ import annotations

import os
import shutil
import stat
import tempfile
from dataclasses import dataclass, field
from typing import Any, Mapping

from tersetools.replace import (
    count_replacements,
    replace_content,
    replace_line,
    unescape,
)
from tersetools.checkfor import contains_whole_word

_FILES_LABEL = "(files)"
_DETECT_BYTES = 8192
_MAX_LINE_BYTES = 10 * 1024 * 1024
_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


@dataclass
class RepforConfig:
    """Parameters of a search-and-replace run."""

    search: str
    replace: str
    dirs: list[str] = field(default_factory=list)
    files: list[str] = field(default_factory=list)
    ext: str = ""
    exclude: list[str] = field(default_factory=list)
    case_insensitive: bool = False
    whole_word: bool = False
    dry_run: bool = False
    recursive: bool = False


@dataclass
class FileModification:
    """Changes made (or that would be made) to one file."""

    path: str
    lines_changed: int
    replacements: int


@dataclass
class DirectoryResult:
    """Modifications within one directory or the explicit file list."""

    dir: str
    files_modified: int = 0
    lines_changed: int = 0
    total_replacements: int = 0
    files: list[FileModification] = field(default_factory=list)

    def add(self, label: str, lines_changed: int, replacements: int) -> None:
        self.files.append(FileModification(label, lines_changed, replacements))
        self.files_modified += 1
        self.lines_changed += lines_changed
        self.total_replacements += replacements


@dataclass
class RepforResult:
    """Top-level result of a run."""

    summary: str = ""
    directories: list[DirectoryResult] = field(default_factory=list)
    dry_run: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Return the result as JSON-ready data."""
        data: dict[str, Any] = {
            "summary": self.summary,
            "directories": [
                {
                    "dir": d.dir,
                    "files_modified": d.files_modified,
                    "lines_changed": d.lines_changed,
                    "total_replacements": d.total_replacements,
                    "files": [
                        {
                            "path": f.path,
                            "lines_changed": f.lines_changed,
                            "replacements": f.replacements,
                        }
                        for f in d.files
                    ],
                }
                for d in self.directories
            ],
        }
        if self.dry_run:
            data["dry_run"] = True
        return data


def _atomic_write(path: str, data: bytes) -> None:
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp = tempfile.mkstemp(dir=directory, prefix=".repfor-")
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


def _write(path: str, text: str) -> None:
    try:
        _atomic_write(path, text.encode(_ENCODING, _ERRORS))
    except OSError as exc:
        raise OSError(f"failed to write file: {exc}") from exc


def _detect_line_ending(data: bytes) -> str:
    head = data[:_DETECT_BYTES]
    newline = head.find(b"\n")
    if newline > 0 and head[newline - 1:newline] == b"\r":
        return "\r\n"
    return "\n"


def _scan_lines(data: bytes) -> list[str]:
    if not data:
        return []
    chunks = data.split(b"\n")
    if chunks[-1] == b"":
        chunks.pop()
    lines = []
    for chunk in chunks:
        if len(chunk) >= _MAX_LINE_BYTES:
            raise ValueError("line too long")
        if chunk.endswith(b"\r"):
            chunk = chunk[:-1]
        lines.append(chunk.decode(_ENCODING, _ERRORS))
    return lines


def _is_excluded(line: str, lowered: str, config: RepforConfig) -> bool:
    for excl in config.exclude:
        if config.case_insensitive:
            if excl.lower() in lowered:
                return True
        elif excl in line:
            return True
    return False


def _replace_single_line(path: str, config: RepforConfig) -> tuple[int, int]:
    with open(path, "rb") as handle:
        data = handle.read()
    ending = _detect_line_ending(data)
    lines = _scan_lines(data)

    term = config.search.lower() if config.case_insensitive else config.search
    modified = list(lines)
    lines_changed = total = 0

    for i, line in enumerate(lines):
        checked = line.lower() if config.case_insensitive else line
        found = contains_whole_word(checked, term) if config.whole_word else term in checked
        if not found or _is_excluded(line, checked, config):
            continue
        new_line = replace_line(
            line, config.search, config.replace, config.case_insensitive, config.whole_word
        )
        if new_line != line:
            modified[i] = new_line
            lines_changed += 1
            total += count_replacements(
                line, config.search, config.case_insensitive, config.whole_word
            )

    if lines_changed and not config.dry_run:
        text = ending.join(modified)
        if modified:
            text += ending
        _write(path, text)

    return lines_changed, total


def _replace_multiline(path: str, config: RepforConfig) -> tuple[int, int]:
    with open(path, "rb") as handle:
        content = handle.read().decode(_ENCODING, _ERRORS)

    search, replace = config.search, config.replace
    if "\r\n" in content:
        search = search.replace("\r\n", "\n").replace("\n", "\r\n")
        replace = replace.replace("\r\n", "\n").replace("\n", "\r\n")

    modified, replacements, lines_changed = replace_content(
        content, search, replace, config.case_insensitive, config.whole_word, config.exclude
    )
    if replacements == 0:
        return 0, 0
    if not config.dry_run:
        _write(path, modified)
    return lines_changed, replacements


def replace_in_file(path: str, config: RepforConfig) -> tuple[int, int]:
    """Apply the replacement to one file; return (lines changed, replacements).

    Raises OSError or ValueError when the file cannot be read or written.
    """
    if config.search == config.replace:
        return 0, 0
    if "\n" in config.search or "\n" in config.replace:
        return _replace_multiline(path, config)
    return _replace_single_line(path, config)


def _collect_dirs(root: str, seen: set[str], out: list[str]) -> None:
    try:
        info = os.lstat(root)
    except OSError:
        return
    if not stat.S_ISDIR(info.st_mode):
        return
    clean = os.path.normpath(root)
    if clean not in seen:
        seen.add(clean)
        out.append(clean)
    try:
        with os.scandir(root) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError:
        return
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            _collect_dirs(os.path.join(root, entry.name), seen, out)


def _collect_dirs_recursive(dirs: list[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for directory in dirs:
        _collect_dirs(directory, seen, out)
    return out


def _try_replace(path: str, config: RepforConfig) -> tuple[int, int] | None:
    try:
        return replace_in_file(path, config)
    except (OSError, ValueError):
        return None


def _process_dir(directory: str, config: RepforConfig) -> DirectoryResult:
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as exc:
        raise OSError(f"failed to read directory: {exc}") from exc

    result = DirectoryResult(dir=directory)
    for entry in entries:
        try:
            if not entry.is_file(follow_symlinks=False):
                continue
        except OSError:
            continue
        if config.ext and not entry.name.endswith(config.ext):
            continue
        outcome = _try_replace(os.path.join(directory, entry.name), config)
        if outcome and outcome[0] > 0:
            result.add(entry.name, *outcome)
    return result


def _process_files(paths: list[str], config: RepforConfig) -> DirectoryResult:
    result = DirectoryResult(dir=_FILES_LABEL)
    for path in paths:
        try:
            if not stat.S_ISREG(os.stat(path).st_mode):
                continue
        except OSError:
            continue
        if config.ext and not path.endswith(config.ext):
            continue
        outcome = _try_replace(path, config)
        if outcome and outcome[0] > 0:
            result.add(path, *outcome)
    return result


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def repfor(config: RepforConfig) -> RepforResult:
    """Run the replacement over the configured files, or else the directories."""
    result = RepforResult(dry_run=config.dry_run)
    if config.files:
        result.directories.append(_process_files(config.files, config))
    else:
        dirs = _collect_dirs_recursive(config.dirs) if config.recursive else config.dirs
        for directory in dirs:
            result.directories.append(_process_dir(directory, config))

    files = sum(d.files_modified for d in result.directories)
    lines = sum(d.lines_changed for d in result.directories)
    replacements = sum(d.total_replacements for d in result.directories)
    action = "Would modify" if config.dry_run else "Modified"
    result.summary = (
        f"{action} {_plural(files, 'file')}: "
        f"{_plural(replacements, 'replacement')} in {_plural(lines, 'line')}"
    )
    return result


def _resolve(path: str, work_dir: str) -> str:
    if not work_dir or os.path.isabs(path):
        return path
    return os.path.join(work_dir, path)


def run(params: Mapping[str, Any], work_dir: str = "") -> dict[str, Any]:
    """Run a replacement from tool parameters and return JSON-ready data."""
    search = params.get("search")
    if not isinstance(search, str):
        raise ValueError("search is required")
    replace = params.get("replace")
    if not isinstance(replace, str):
        raise ValueError("replace is required")

    config = RepforConfig(search=unescape(search), replace=unescape(replace))

    dirs = params.get("dir")
    if isinstance(dirs, str):
        config.dirs = [dirs]
    elif isinstance(dirs, (list, tuple)):
        config.dirs = [d for d in dirs if isinstance(d, str)]

    files = params.get("file")
    if isinstance(files, str):
        config.files = [files] if files else []
    elif isinstance(files, (list, tuple)):
        config.files = [f for f in files if isinstance(f, str)]

    if not config.dirs and not config.files:
        config.dirs = [work_dir or "."]
    config.dirs = [_resolve(d, work_dir) for d in config.dirs]
    config.files = [_resolve(f, work_dir) for f in config.files]

    ext = params.get("ext")
    if isinstance(ext, str):
        config.ext = ext
    for key in ("case_insensitive", "whole_word", "dry_run", "recursive"):
        value = params.get(key)
        if isinstance(value, bool):
            setattr(config, key, value)
    exclude = params.get("exclude")
    if isinstance(exclude, (list, tuple)):
        config.exclude = [e for e in exclude if isinstance(e, str)]

    return repfor(config).to_dict()