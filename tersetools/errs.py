"""Normalise compiler and linter output into a compact structured summary."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Sequence

from tersetools.errparse import (
    ParsedError,
    has_colon_digit,
    has_dotnet_project,
    is_dotnet_code,
    parse_colon,
    parse_dotnet,
    parse_eslint,
    parse_rust,
    parse_tsc,
)

_ATOI = re.compile(r"[+-]?[0-9]+")

_PARSERS: dict[str, tuple[str, Callable[[Iterable[str]], list[ParsedError]]]] = {
    "rust": ("rust", parse_rust),
    "tsc": ("tsc", parse_tsc),
    "dotnet": ("dotnet", parse_dotnet),
    "eslint": ("eslint", parse_eslint),
}


@dataclass
class ErrsResult:
    """Parsed diagnostics together with counts and a one-line summary."""

    errors: list[ParsedError] = field(default_factory=list)
    format: str = "colon"
    count: int = 0
    files: int = 0
    summary: str = "no errors found"

    def to_dict(self) -> dict[str, Any]:
        """Return the result as JSON-ready data."""
        return {
            "errors": [e.to_dict() for e in self.errors],
            "format": self.format,
            "count": self.count,
            "files": self.files,
            "summary": self.summary,
        }


def strip_ansi(text: str) -> str:
    """Remove ANSI ``ESC [ ... m`` colour sequences."""
    parts: list[str] = []
    i = 0
    n = len(text)
    while i < n:
        if text[i] == "\x1b" and i + 1 < n and text[i + 1] == "[":
            end = text.find("m", i + 2)
            i = n if end == -1 else end + 1
            continue
        parts.append(text[i])
        i += 1
    return "".join(parts)


def _is_int(text: str) -> bool:
    return _ATOI.fullmatch(text) is not None


def _paren_tail(line: str) -> str | None:
    """Return what follows a ``file(line,col)`` location, or None without one."""
    paren = line.find("(")
    if paren < 1:
        return None
    close = line.find(")", paren)
    if close == -1:
        return None
    parts = line[paren + 1:close].split(",", 1)
    if len(parts) != 2:
        return None
    if not (_is_int(parts[0].strip()) and _is_int(parts[1].strip())):
        return None
    return line[close + 1:]


def _detect_eslint(lines: Sequence[str]) -> bool:
    has_header = False
    for line in lines:
        if not line:
            continue
        trimmed = line.strip()
        if not trimmed:
            continue
        if not has_header and line == trimmed:
            if ("/" in line or "\\" in line) and not has_colon_digit(line):
                has_header = True
                continue
        if has_header and line != trimmed:
            fields = trimmed.split()
            if len(fields) >= 4:
                loc = fields[0].split(":", 1)
                if (
                    len(loc) == 2
                    and _is_int(loc[0])
                    and _is_int(loc[1])
                    and fields[1] in ("error", "warning")
                ):
                    return True
    return False


def detect_format(lines: Sequence[str]) -> str:
    """Guess the tool that produced ``lines``: rust, dotnet, tsc, eslint or colon."""
    for line in lines:
        trimmed = line.strip()
        if trimmed.startswith(("error[", "warning[", "--> ")):
            return "rust"

    if any(has_dotnet_project(line.strip()) for line in lines):
        return "dotnet"

    for line in lines:
        if not line:
            continue
        tail = _paren_tail(line)
        if tail is None:
            continue
        if tail.startswith((": error TS", ": warning TS")):
            return "tsc"
        if is_dotnet_code(tail):
            return "dotnet"

    if _detect_eslint(lines):
        return "eslint"
    return "colon"


def _counted(count: int, singular: str, plural: str) -> str:
    return f"{count} {singular if count == 1 else plural}"


def build_result(errors: Sequence[ParsedError], fmt: str) -> ErrsResult:
    """Count errors, warnings and files and build the summary line."""
    errors = list(errors)
    files = len({e.file for e in errors})
    warn_count = sum(1 for e in errors if e.severity in ("warning", "note"))
    err_count = len(errors) - warn_count

    if not errors:
        summary = "no errors found"
    else:
        parts = []
        if err_count:
            parts.append(_counted(err_count, "error", "errors"))
        if warn_count:
            parts.append(_counted(warn_count, "warning", "warnings"))
        summary = f"{', '.join(parts)} in {_counted(files, 'file', 'files')}"

    return ErrsResult(
        errors=errors, format=fmt, count=len(errors), files=files, summary=summary
    )


def parse_errors(text: str, fmt: str = "") -> ErrsResult:
    """Parse raw tool output; ``fmt`` is a hint, detected when empty."""
    lines = strip_ansi(text).split("\n")
    chosen = fmt or detect_format(lines)
    name, parser = _PARSERS.get(chosen, ("colon", parse_colon))
    return build_result(parser(lines), name)


def run(params: Mapping[str, Any], work_dir: str = "") -> dict[str, Any]:
    """Parse error output from tool parameters and return JSON-ready data."""
    raw = params.get("input")
    if not isinstance(raw, str) or not raw:
        raise ValueError("input is required")
    hint = params.get("format")
    return parse_errors(raw, hint if isinstance(hint, str) else "").to_dict()