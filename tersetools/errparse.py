"""Parsers that turn compiler and linter output into structured error records."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable

_COLON_DIGIT = re.compile(r":[0-9]")
_LEADING_DIGITS = re.compile(r"[0-9]*")
_ATOI = re.compile(r"[+-]?[0-9]+")
_SEVERITIES = ("fatal error", "error", "warning", "note")
_DOTNET_PROJECT_SUFFIXES = (".csproj", ".fsproj", ".vbproj")
_DOTNET_CODE_PREFIXES = (
    ": error CS", ": warning CS", ": error IDE", ": warning IDE",
    ": error CA", ": warning CA", ": error SA", ": warning SA",
    ": error MSB", ": warning MSB", ": error BC", ": warning BC",
    ": error NETSDK", ": warning NETSDK", ": error NU", ": warning NU",
)


@dataclass
class ParsedError:
    """A single diagnostic extracted from tool output."""

    file: str
    line: int
    message: str
    col: int = 0
    code: str = ""
    severity: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return JSON-ready data, omitting empty column, code and severity."""
        data: dict[str, Any] = {"file": self.file, "line": self.line}
        if self.col:
            data["col"] = self.col
        if self.code:
            data["code"] = self.code
        if self.severity:
            data["severity"] = self.severity
        data["message"] = self.message
        return data


class _Collector:
    """Accumulates errors, dropping repeats of the same key."""

    def __init__(self) -> None:
        self.errors: list[ParsedError] = []
        self._seen: set[str] = set()

    def add(self, error: ParsedError, key: str | None = None) -> None:
        if key is None:
            key = f"{error.file}:{error.line}:{error.message}"
        if key in self._seen:
            return
        self._seen.add(key)
        self.errors.append(error)


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def _is_letter(ch: str) -> bool:
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z")


def _atoi(text: str) -> int | None:
    return int(text) if _ATOI.fullmatch(text) else None


def _parse_number(text: str) -> tuple[int, int]:
    digits = _LEADING_DIGITS.match(text).group()  # type: ignore[union-attr]
    return (int(digits) if digits else 0), len(digits)


def _drive_start(text: str) -> int:
    if len(text) > 2 and _is_letter(text[0]) and text[1] == ":" and text[2] in "\\/":
        return 2
    return 0


def _first_colon_digit(text: str) -> int:
    found = _COLON_DIGIT.search(text, _drive_start(text))
    return found.start() if found else -1


def looks_like_code(text: str) -> bool:
    """Return True if ``text`` looks like a diagnostic code such as ``E0425`` or ``F401``."""
    if len(text) < 2 or len(text) > 15:
        return False
    has_digit = has_letter = False
    for ch in text:
        if _is_digit(ch):
            has_digit = True
        elif _is_letter(ch):
            has_letter = True
        elif ch not in "-_":
            return False
    return has_digit and has_letter


def has_colon_digit(text: str) -> bool:
    """Return True if a colon directly followed by a digit appears in ``text``."""
    return _COLON_DIGIT.search(text) is not None


def strip_dotnet_project(text: str) -> str:
    """Remove a trailing `` [project]`` suffix from a build line."""
    if not text.endswith("]"):
        return text
    start = text.rfind(" [")
    return text if start < 0 else text[:start]


def has_dotnet_project(text: str) -> bool:
    """Return True if the line ends with a bracketed .NET project file."""
    if not text.endswith("]"):
        return False
    start = text.rfind("[")
    if start < 0:
        return False
    return text[start + 1:-1].endswith(_DOTNET_PROJECT_SUFFIXES)


def is_dotnet_code(text: str) -> bool:
    """Return True if ``text`` begins with a .NET-style ``: error CS...`` prefix."""
    return text.startswith(_DOTNET_CODE_PREFIXES)


def parse_location(text: str) -> tuple[str, int, int]:
    """Split ``file:line[:col]`` into its parts; ("", 0, 0) when no location is found."""
    colon = _first_colon_digit(text)
    if colon < 1:
        return "", 0, 0
    file = text[:colon]
    rest = text[colon + 1:]
    line_num, consumed = _parse_number(rest)
    rest = rest[consumed:]
    col = 0
    if len(rest) > 1 and rest[0] == ":" and _is_digit(rest[1]):
        col, _ = _parse_number(rest[1:])
    return file, line_num, col


def parse_colon_line(line: str) -> ParsedError | None:
    """Parse a ``file:line[:col]: message`` line; None when it is not one."""
    colon = _first_colon_digit(line)
    if colon < 1:
        return None

    file = line[:colon]
    rest = line[colon + 1:]
    line_num, consumed = _parse_number(rest)
    if line_num == 0 or consumed == 0:
        return None
    rest = rest[consumed:]

    col = 0
    if len(rest) > 1 and rest[0] == ":" and _is_digit(rest[1]):
        rest = rest[1:]
        col, consumed = _parse_number(rest)
        rest = rest[consumed:]

    if rest.startswith(": "):
        rest = rest[2:]
    elif rest.startswith(":"):
        rest = rest[1:]
    else:
        return None

    message = rest.strip()
    if not message:
        return None

    severity = ""
    for sev in _SEVERITIES:
        prefix = sev + ": "
        if message.startswith(prefix):
            severity = sev
            message = message[len(prefix):]
            break

    code = ""
    last_paren = message.rfind(" (")
    if last_paren > 0 and message.endswith(")"):
        linter = message[last_paren + 2:-1]
        if linter and " " not in linter:
            code = linter
            message = message[:last_paren].strip()

    colon_pos = message.find(": ")
    if 0 < colon_pos < 20 and looks_like_code(message[:colon_pos]):
        code = message[:colon_pos]
        message = message[colon_pos + 2:]

    if not code:
        space = message.find(" ")
        if 0 < space < 15 and looks_like_code(message[:space]):
            code = message[:space]
            message = message[space + 1:]

    if not code:
        bracket = message.rfind(" [")
        if bracket > 0 and message.endswith("]"):
            inner = message[bracket + 2:-1]
            if inner and " " not in inner:
                code = inner
                message = message[:bracket].strip()

    return ParsedError(
        file=file, line=line_num, col=col, code=code, severity=severity, message=message
    )


def parse_colon(lines: Iterable[str]) -> list[ParsedError]:
    """Parse colon-style output (Go, GCC/Clang, flake8, mypy, Kotlin and similar)."""
    out = _Collector()
    for line in lines:
        if not line:
            continue
        trimmed = line.strip()
        if trimmed.startswith("#"):
            continue
        pre_severity = ""
        if trimmed.startswith("e: "):
            pre_severity, trimmed = "error", trimmed[3:]
        elif trimmed.startswith("w: "):
            pre_severity, trimmed = "warning", trimmed[3:]

        parsed = parse_colon_line(trimmed)
        if parsed is None:
            continue
        if not parsed.severity and pre_severity:
            parsed.severity = pre_severity
        out.add(parsed)
    return out.errors


def parse_rust(lines: Iterable[str]) -> list[ParsedError]:
    """Parse rustc/cargo output, pairing each diagnostic with its ``-->`` location."""
    out = _Collector()
    severity = code = message = ""
    for line in lines:
        trimmed = line.strip()

        if trimmed.startswith(("error[", "warning[")):
            open_idx = trimmed.find("[")
            close_idx = trimmed.find("]")
            colon_idx = trimmed.find("]: ")
            if open_idx >= 0 and close_idx > open_idx and colon_idx > 0:
                severity = "error" if trimmed.startswith("error") else "warning"
                code = trimmed[open_idx + 1:close_idx]
                message = trimmed[colon_idx + 3:]
            continue

        if trimmed.startswith("error: "):
            severity, code, message = "error", "", trimmed[7:]
            continue
        if trimmed.startswith("warning: "):
            severity, code, message = "warning", "", trimmed[9:]
            continue

        if trimmed.startswith("--> ") and message:
            file, line_num, col = parse_location(trimmed[4:])
            if file and line_num > 0:
                out.add(
                    ParsedError(
                        file=file, line=line_num, col=col,
                        code=code, severity=severity, message=message,
                    )
                )
            severity = code = message = ""
    return out.errors


def _split_paren_location(line: str) -> tuple[str, int, int, str] | None:
    """Split ``file(line,col)rest``; None when the line has no such location."""
    paren = line.find("(")
    if paren < 1:
        return None
    close = line.find(")", paren)
    if close == -1:
        return None
    parts = line[paren + 1:close].split(",", 1)
    if len(parts) != 2:
        return None
    line_num = _atoi(parts[0].strip())
    col = _atoi(parts[1].strip())
    if line_num is None or col is None:
        return None
    return line[:paren], line_num, col, line[close + 1:]


def parse_tsc(lines: Iterable[str]) -> list[ParsedError]:
    """Parse TypeScript compiler output of the form ``file(line,col): error TSxxxx: msg``."""
    out = _Collector()
    for line in lines:
        if not line:
            continue
        located = _split_paren_location(line)
        if located is None:
            continue
        file, line_num, col, rest = located
        if not rest.startswith(": "):
            continue
        rest = rest[2:]

        severity = ""
        if rest.startswith("error "):
            severity, rest = "error", rest[6:]
        elif rest.startswith("warning "):
            severity, rest = "warning", rest[8:]

        code = ""
        message = rest
        colon_pos = rest.find(": ")
        if 0 < colon_pos < 15 and rest[:colon_pos].startswith("TS"):
            code = rest[:colon_pos]
            message = rest[colon_pos + 2:]

        message = message.strip()
        if not message:
            continue
        out.add(
            ParsedError(
                file=file, line=line_num, col=col, code=code, severity=severity, message=message
            )
        )
    return out.errors


def _parse_dotnet_message(text: str) -> tuple[str, str, str]:
    if text.startswith("error "):
        severity, rest = "error", text[6:]
    elif text.startswith("warning "):
        severity, rest = "warning", text[8:]
    else:
        return "", "", ""
    colon = rest.find(": ")
    if colon < 1:
        return severity, "", rest.strip()
    return severity, rest[:colon], rest[colon + 2:].strip()


def _parse_dotnet_located(line: str) -> ParsedError | None:
    located = _split_paren_location(line)
    if located is None:
        return None
    file, line_num, col, rest = located
    if not rest.startswith(": "):
        return None
    severity, code, message = _parse_dotnet_message(rest[2:])
    if not message:
        return None
    return ParsedError(
        file=file, line=line_num, col=col, code=code, severity=severity, message=message
    )


def _parse_dotnet_unlocated(line: str) -> ParsedError | None:
    rest = line
    source = ""
    sep = line.find(" : ")
    if sep > 0:
        source = line[:sep].strip()
        rest = line[sep + 3:]
    severity, code, message = _parse_dotnet_message(rest)
    if not message:
        return None
    return ParsedError(
        file=source or "(build)", line=0, code=code, severity=severity, message=message
    )


def parse_dotnet(lines: Iterable[str]) -> list[ParsedError]:
    """Parse dotnet/MSBuild output, with or without a source location."""
    out = _Collector()
    for line in lines:
        trimmed = line.strip()
        if not trimmed:
            continue
        trimmed = strip_dotnet_project(trimmed)

        parsed = _parse_dotnet_located(trimmed)
        if parsed is not None:
            out.add(parsed)
            continue
        parsed = _parse_dotnet_unlocated(trimmed)
        if parsed is not None:
            out.add(parsed, f"{parsed.file}:0:{parsed.message}")
    return out.errors


def _is_eslint_location(field: str) -> tuple[int, int] | None:
    parts = field.split(":", 1)
    if len(parts) != 2:
        return None
    line_num = _atoi(parts[0])
    col = _atoi(parts[1])
    if line_num is None or col is None:
        return None
    return line_num, col


def parse_eslint(lines: Iterable[str]) -> list[ParsedError]:
    """Parse ESLint's stylish output: a file header followed by indented findings."""
    out = _Collector()
    current_file = ""
    for line in lines:
        if not line:
            continue
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("\u2716"):
            continue

        if line == trimmed and (
            " " not in trimmed or "/" in trimmed or "\\" in trimmed
        ):
            fields = trimmed.split()
            if fields and _is_eslint_location(fields[0]) is None:
                current_file = trimmed
                continue

        if current_file and line != trimmed:
            fields = trimmed.split()
            if len(fields) < 4:
                continue
            location = _is_eslint_location(fields[0])
            if location is None:
                continue
            severity = fields[1]
            if severity not in ("error", "warning"):
                continue
            out.add(
                ParsedError(
                    file=current_file,
                    line=location[0],
                    col=location[1],
                    code=fields[-1],
                    severity=severity,
                    message=" ".join(fields[2:-1]),
                )
            )
    return out.errors