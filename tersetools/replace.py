"""String replacement primitives used by the search-and-replace tool."""

from __future__ import annotations

from typing import Iterable

from tersetools.checkfor import is_word_char


def unescape(text: str) -> str:
    """Turn literal ``\\n``, ``\\r`` and ``\\t`` sequences into the characters they name."""
    return text.replace("\\n", "\n").replace("\\r", "\r").replace("\\t", "\t")


def _bounded(text: str, start: int, end: int) -> bool:
    before_ok = start == 0 or not is_word_char(text[start - 1])
    after_ok = end >= len(text) or not is_word_char(text[end])
    return before_ok and after_ok


def _case_insensitive_replace(line: str, search: str, replace: str) -> str:
    needle = search.lower()
    parts: list[str] = []
    remaining = line
    while True:
        idx = remaining.lower().find(needle)
        if idx == -1:
            parts.append(remaining)
            break
        parts.append(remaining[:idx])
        parts.append(replace)
        remaining = remaining[idx + len(search):]
    return "".join(parts)


def _whole_word_replace(line: str, search: str, replace: str, case_insensitive: bool) -> str:
    needle = search.lower() if case_insensitive else search
    parts: list[str] = []
    remaining = line
    while True:
        haystack = remaining.lower() if case_insensitive else remaining
        idx = haystack.find(needle)
        if idx == -1:
            parts.append(remaining)
            break
        end = idx + len(search)
        if _bounded(remaining, idx, end):
            parts.append(remaining[:idx])
            parts.append(replace)
            remaining = remaining[end:]
        else:
            parts.append(remaining[:idx + 1])
            remaining = remaining[idx + 1:]
    return "".join(parts)


def replace_line(
    line: str,
    search: str,
    replace: str,
    case_insensitive: bool = False,
    whole_word: bool = False,
) -> str:
    """Replace every occurrence of ``search`` in a single line."""
    if not search:
        return line
    if whole_word:
        return _whole_word_replace(line, search, replace, case_insensitive)
    if case_insensitive:
        return _case_insensitive_replace(line, search, replace)
    return line.replace(search, replace)


def count_replacements(
    line: str,
    search: str,
    case_insensitive: bool = False,
    whole_word: bool = False,
) -> int:
    """Count the occurrences of ``search`` in ``line`` under the given matching mode."""
    if not search:
        return 0
    text = line.lower() if case_insensitive else line
    term = search.lower() if case_insensitive else search
    if not whole_word:
        return text.count(term)

    count = 0
    offset = 0
    while True:
        idx = text.find(term, offset)
        if idx == -1:
            return count
        if _bounded(text, idx, idx + len(term)):
            count += 1
        offset = idx + 1


def _span_excluded(span: str, exclude: Iterable[str], case_insensitive: bool) -> bool:
    for excl in exclude:
        if case_insensitive:
            if excl.lower() in span.lower():
                return True
        elif excl in span:
            return True
    return False


def replace_content(
    content: str,
    search: str,
    replace: str,
    case_insensitive: bool = False,
    whole_word: bool = False,
    exclude: Iterable[str] = (),
) -> tuple[str, int, int]:
    """Replace across a whole text, matches may span lines.

    Returns the new text, the number of replacements and the number of
    distinct lines touched by a replaced match. A match is skipped when any
    ``exclude`` string appears on the lines it spans.
    """
    if not search:
        return content, 0, 0

    exclude = list(exclude)
    term = search.lower() if case_insensitive else search
    haystack = content.lower() if case_insensitive else content

    parts: list[str] = []
    replacements = 0
    affected: set[int] = set()
    pos = 0

    while True:
        start = haystack.find(term, pos)
        if start == -1:
            parts.append(content[pos:])
            break
        end = start + len(search)

        if whole_word and not _bounded(content, start, end):
            parts.append(content[pos:start + 1])
            pos = start + 1
            continue

        if exclude:
            line_start = content.rfind("\n", 0, start) + 1
            line_end = content.find("\n", end)
            if line_end == -1:
                line_end = len(content)
            if _span_excluded(content[line_start:line_end], exclude, case_insensitive):
                parts.append(content[pos:end])
                pos = end
                continue

        first_line = content.count("\n", 0, start)
        spanned = content.count("\n", start, end)
        affected.update(range(first_line, first_line + spanned + 1))

        parts.append(content[pos:start])
        parts.append(replace)
        pos = end
        replacements += 1

    return "".join(parts), replacements, len(affected)