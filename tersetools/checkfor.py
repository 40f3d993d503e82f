"""Single-depth string search across directories and individual files."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Mapping

_FILES_LABEL = "(files)"
_MAX_LINE_BYTES = 64 * 1024


@dataclass
class CheckforConfig:
    """Parameters of a search."""

    search: str
    dirs: list[str] = field(default_factory=list)
    files: list[str] = field(default_factory=list)
    ext: str = ""
    exclude: list[str] = field(default_factory=list)
    case_insensitive: bool = False
    whole_word: bool = False
    context_lines: int = 0
    hide_filter_stats: bool = False


@dataclass
class Match:
    """A single match within a file."""

    line: int
    content: str
    end_line: int = 0
    context_before: list[str] = field(default_factory=list)
    context_after: list[str] = field(default_factory=list)


@dataclass
class FileMatches:
    """All matches found in one file."""

    path: str
    matches: list[Match] = field(default_factory=list)


@dataclass
class DirectoryResult:
    """Matches found within one directory (or the explicit file list)."""

    dir: str
    matches_found: int = 0
    original_matches: int = 0
    filtered_matches: int = 0
    files: list[FileMatches] = field(default_factory=list)


@dataclass
class CheckforResult:
    """Top-level search result."""

    directories: list[DirectoryResult] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Return the result as JSON-ready data, omitting empty optional fields."""
        return {"directories": [_directory_dict(d) for d in self.directories]}


def _match_dict(match: Match) -> dict[str, Any]:
    data: dict[str, Any] = {"line": match.line}
    if match.end_line:
        data["end_line"] = match.end_line
    data["content"] = match.content
    if match.context_before:
        data["context_before"] = list(match.context_before)
    if match.context_after:
        data["context_after"] = list(match.context_after)
    return data


def _directory_dict(result: DirectoryResult) -> dict[str, Any]:
    data: dict[str, Any] = {"dir": result.dir, "matches_found": result.matches_found}
    if result.original_matches:
        data["original_matches"] = result.original_matches
    if result.filtered_matches:
        data["filtered_matches"] = result.filtered_matches
    data["files"] = [
        {"path": f.path, "matches": [_match_dict(m) for m in f.matches]}
        for f in result.files
    ]
    return data


def is_word_char(ch: str) -> bool:
    """Return True for ASCII letters, digits and underscore."""
    return len(ch) == 1 and (ch.isascii() and (ch.isalnum() or ch == "_"))


def index_of_whole_word(text: str, word: str) -> int:
    """Return the index of the first whole-word occurrence of ``word``, or -1."""
    offset = 0
    while True:
        idx = text.find(word, offset)
        if idx == -1:
            return -1
        before_ok = idx == 0 or not is_word_char(text[idx - 1])
        after = idx + len(word)
        after_ok = after >= len(text) or not is_word_char(text[after])
        if before_ok and after_ok:
            return idx
        offset = idx + 1


def contains_whole_word(text: str, word: str) -> bool:
    """Return True if ``word`` occurs in ``text`` bounded by non-word characters."""
    return index_of_whole_word(text, word) != -1


def _context_before(lines: list[str], current: int, count: int) -> list[str]:
    return lines[max(current - count, 0):current]


def _context_after(lines: list[str], current: int, count: int) -> list[str]:
    return lines[current + 1:min(current + count + 1, len(lines))]


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def _scan_lines(data: bytes) -> list[str]:
    """Split like a line scanner: on newlines, dropping a trailing CR and final empty line."""
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
        lines.append(_decode(chunk))
    return lines


def _is_excluded(line: str, lowered: str, config: CheckforConfig) -> bool:
    for excl in config.exclude:
        if config.case_insensitive:
            if excl.lower() in lowered:
                return True
        elif excl in line:
            return True
    return False


def _search_single_line(path: str, config: CheckforConfig) -> tuple[list[Match], int, int]:
    with open(path, "rb") as handle:
        lines = _scan_lines(handle.read())

    term = config.search.lower() if config.case_insensitive else config.search
    matches: list[Match] = []
    original = filtered = 0

    for i, line in enumerate(lines):
        checked = line.lower() if config.case_insensitive else line
        found = contains_whole_word(checked, term) if config.whole_word else term in checked
        if not found:
            continue
        original += 1
        if _is_excluded(line, checked, config):
            filtered += 1
            continue
        match = Match(line=i + 1, content=line)
        if config.context_lines > 0:
            match.context_before = _context_before(lines, i, config.context_lines)
            match.context_after = _context_after(lines, i, config.context_lines)
        matches.append(match)

    return matches, original, filtered


def _search_multiline(path: str, config: CheckforConfig) -> tuple[list[Match], int, int]:
    with open(path, "rb") as handle:
        content = _decode(handle.read())

    ending = "\r\n" if "\r\n" in content else "\n"
    needle = config.search.replace("\n", "\r\n") if ending == "\r\n" else config.search
    haystack = content
    if config.case_insensitive:
        needle = needle.lower()
        haystack = content.lower()

    lines = content.split(ending)
    matches: list[Match] = []
    original = filtered = 0
    offset = 0

    while True:
        rest = haystack[offset:]
        idx = index_of_whole_word(rest, needle) if config.whole_word else rest.find(needle)
        if idx == -1:
            break
        start = offset + idx
        end = start + len(needle)
        original += 1

        start_line = content.count("\n", 0, start) + 1
        end_line = content.count("\n", 0, end - 1) + 1 if end > start else start_line

        excluded = False
        if config.exclude:
            line_start = content.rfind(ending, 0, start)
            line_start = 0 if line_start == -1 else line_start + len(ending)
            line_end = content.find(ending, end)
            if line_end == -1:
                line_end = len(content)
            spanning = content[line_start:line_end]
            for excl in config.exclude:
                if config.case_insensitive:
                    hit = excl.lower() in spanning.lower()
                else:
                    hit = excl in spanning
                if hit:
                    excluded = True
                    break

        if excluded:
            filtered += 1
        else:
            match = Match(line=start_line, content=content[start:end])
            if start_line != end_line:
                match.end_line = end_line
            if config.context_lines > 0:
                match.context_before = _context_before(lines, start_line - 1, config.context_lines)
                match.context_after = _context_after(lines, end_line - 1, config.context_lines)
            matches.append(match)

        offset = end

    return matches, original, filtered


def search_file(path: str, config: CheckforConfig) -> tuple[list[Match], int, int]:
    """Search one file; return (matches, original match count, filtered count).

    Raises OSError or ValueError when the file cannot be read.
    """
    if "\n" in config.search:
        return _search_multiline(path, config)
    return _search_single_line(path, config)


def _add_file(result: DirectoryResult, label: str, path: str, config: CheckforConfig) -> None:
    try:
        matches, original, filtered = search_file(path, config)
    except (OSError, ValueError):
        return
    if not config.hide_filter_stats and config.exclude:
        result.original_matches += original
        result.filtered_matches += filtered
    if matches:
        result.files.append(FileMatches(path=label, matches=matches))
        result.matches_found += len(matches)


def _search_dir(directory: str, config: CheckforConfig) -> DirectoryResult:
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as exc:
        raise OSError(f"failed to read directory: {exc}") from exc

    result = DirectoryResult(dir=directory)
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            continue
        if config.ext and not entry.name.endswith(config.ext):
            continue
        _add_file(result, entry.name, os.path.join(directory, entry.name), config)
    return result


def _search_files(config: CheckforConfig) -> DirectoryResult:
    result = DirectoryResult(dir=_FILES_LABEL)
    for path in config.files:
        if config.ext and not path.endswith(config.ext):
            continue
        _add_file(result, path, path, config)
    return result


def search(config: CheckforConfig) -> CheckforResult:
    """Search every configured directory (non-recursively) and file list."""
    result = CheckforResult()
    for directory in config.dirs:
        result.directories.append(_search_dir(directory, config))
    if config.files:
        result.directories.append(_search_files(config))
    return result


def _resolve(path: str, work_dir: str) -> str:
    if not work_dir or os.path.isabs(path):
        return path
    return os.path.join(work_dir, path)


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return 0
    return 0


def _string_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [item for item in value if isinstance(item, str)]
    return []


def run(params: Mapping[str, Any], work_dir: str = "") -> dict[str, Any]:
    """Run a search from tool parameters and return JSON-ready data."""
    term = params.get("search")
    if not isinstance(term, str) or not term:
        raise ValueError("search is required")

    config = CheckforConfig(
        search=term,
        dirs=_string_list(params.get("dir")),
        files=_string_list(params.get("file")),
    )
    if not config.dirs and not config.files:
        config.dirs = [work_dir or "."]
    config.dirs = [_resolve(d, work_dir) for d in config.dirs]
    config.files = [_resolve(f, work_dir) for f in config.files]

    ext = params.get("ext")
    if isinstance(ext, str):
        config.ext = ext
    for key in ("case_insensitive", "whole_word", "hide_filter_stats"):
        value = params.get(key)
        if isinstance(value, bool):
            setattr(config, key, value)
    if "context" in params:
        config.context_lines = _to_int(params["context"])
    exclude = params.get("exclude")
    if isinstance(exclude, (list, tuple)):
        config.exclude = [item for item in exclude if isinstance(item, str)]

    return search(config).to_dict()