"""Per-language extraction of import statements from source lines."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Callable, Sequence

_EXT_TO_LANG = {
    ".go": "go", ".py": "python", ".pyi": "python",
    ".js": "javascript", ".jsx": "javascript", ".ts": "typescript", ".tsx": "typescript",
    ".mjs": "javascript", ".cjs": "javascript",
    ".zig": "zig", ".rs": "rust", ".c": "c", ".h": "c",
    ".cpp": "cpp", ".hpp": "cpp", ".cc": "cpp", ".hh": "cpp",
    ".swift": "swift", ".java": "java", ".kt": "kotlin", ".kts": "kotlin",
    ".rb": "ruby", ".sh": "shell", ".bash": "shell", ".zsh": "shell",
}

_SWIFT_STDLIB = frozenset({
    "Swift", "Foundation", "UIKit", "AppKit", "SwiftUI", "Combine", "CoreData",
    "CoreGraphics", "Darwin", "Dispatch", "ObjectiveC", "os", "CoreFoundation",
    "CoreLocation", "MapKit", "AVFoundation", "Metal", "SceneKit", "SpriteKit",
    "GameplayKit", "ARKit", "RealityKit", "Observation",
})

_SWIFT_KINDS = ("class", "struct", "enum", "protocol", "func", "var", "let", "typealias")


@dataclass
class Import:
    """One import statement: the package named, its kind and its 1-based line."""

    package: str
    kind: str
    line: int

    def to_dict(self) -> dict[str, Any]:
        """Return JSON-ready data."""
        return {"package": self.package, "type": self.kind, "line": self.line}


def _extension(path: str) -> str:
    base = os.path.basename(path)
    dot = base.rfind(".")
    return base[dot:] if dot >= 0 else ""


def detect_language(path: str) -> str:
    """Return the language name for a file path, or "" when unsupported."""
    return _EXT_TO_LANG.get(_extension(path), "")


def extract_quoted(text: str) -> str:
    """Return the first double-quoted string in ``text``, else the first single-quoted."""
    for quote in ('"', "'"):
        start = text.find(quote)
        if start >= 0:
            end = text.find(quote, start + 1)
            if end >= 0:
                return text[start + 1:end]
    return ""


def classify_go(package: str, go_module: str = "") -> str:
    """Classify a Go import path as local, external or stdlib."""
    if go_module and package.startswith(go_module):
        return "local"
    first = package.split("/", 1)[0]
    return "external" if "." in first else "stdlib"


def classify_js(package: str) -> str:
    """Classify a JS/TS module specifier as local or external."""
    if package.startswith(("./", "../", "/")):
        return "local"
    return "external"


def _go_package(text: str) -> str:
    start = text.find('"')
    if start == -1:
        return ""
    end = text.find('"', start + 1)
    if end == -1:
        return ""
    return text[start + 1:end]


def parse_go(lines: Sequence[str], go_module: str = "") -> list[Import]:
    """Parse Go single-line and block imports."""
    imports: list[Import] = []
    in_block = False

    def add(text: str, line_no: int) -> None:
        pkg = _go_package(text)
        if pkg:
            imports.append(Import(pkg, classify_go(pkg, go_module), line_no))

    for line_no, line in enumerate(lines, 1):
        trimmed = line.strip()
        if trimmed.startswith("//"):
            continue
        if in_block:
            if trimmed.startswith(")"):
                in_block = False
            else:
                add(trimmed, line_no)
            continue
        if trimmed.startswith("import ("):
            rest = trimmed[8:]
            if ")" in rest:
                add(rest, line_no)
            else:
                in_block = True
            continue
        if trimmed.startswith("import "):
            add(trimmed[7:], line_no)
    return imports


def parse_python(lines: Sequence[str]) -> list[Import]:
    """Parse ``import`` and ``from ... import`` statements."""
    imports: list[Import] = []
    for line_no, line in enumerate(lines, 1):
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("#"):
            continue
        if trimmed.startswith("from "):
            rest = trimmed[5:]
            space = rest.find(" ")
            if space == -1:
                continue
            pkg = rest[:space]
            kind = "relative" if pkg.startswith(".") else "external"
            imports.append(Import(pkg, kind, line_no))
            continue
        if trimmed.startswith("import "):
            for part in trimmed[7:].split(","):
                name = part.strip()
                alias = name.find(" as ")
                if alias >= 0:
                    name = name[:alias]
                name = name.strip()
                if name:
                    imports.append(Import(name, "external", line_no))
    return imports


def _js_from(line: str) -> str:
    idx = line.find(" from ")
    if idx == -1:
        return ""
    return extract_quoted(line[idx + 6:])


def parse_js(lines: Sequence[str]) -> list[Import]:
    """Parse ES imports, re-exports and ``require`` calls."""
    imports: list[Import] = []
    in_multiline = False

    def add(pkg: str, line_no: int) -> None:
        if pkg:
            imports.append(Import(pkg, classify_js(pkg), line_no))

    for line_no, line in enumerate(lines, 1):
        trimmed = line.strip()
        if trimmed.startswith(("//", "/*")):
            continue
        if in_multiline:
            if " from " in trimmed:
                add(_js_from(trimmed), line_no)
                in_multiline = False
            continue
        if trimmed.startswith("import "):
            if " from " in trimmed:
                add(_js_from(trimmed), line_no)
            elif any(q in trimmed[7:] for q in "\"'"):
                add(extract_quoted(trimmed[7:]), line_no)
            else:
                in_multiline = True
            continue
        if trimmed.startswith("export ") and " from " in trimmed:
            add(_js_from(trimmed), line_no)
            continue
        idx = trimmed.find("require(")
        if idx >= 0:
            add(extract_quoted(trimmed[idx + 8:]), line_no)
    return imports


def parse_zig(lines: Sequence[str]) -> list[Import]:
    """Parse ``@import("...")`` expressions."""
    imports: list[Import] = []
    for line_no, line in enumerate(lines, 1):
        trimmed = line.strip()
        if trimmed.startswith("//"):
            continue
        idx = trimmed.find("@import(")
        if idx == -1:
            continue
        pkg = extract_quoted(trimmed[idx + 8:])
        if not pkg:
            continue
        if pkg in ("std", "builtin"):
            kind = "stdlib"
        elif pkg.endswith(".zig"):
            kind = "local"
        else:
            kind = "external"
        imports.append(Import(pkg, kind, line_no))
    return imports


def _rust_use_kind(path: str) -> str:
    for root in ("std", "core", "alloc"):
        if path == root or path.startswith(root + "::"):
            return "stdlib"
    if path.startswith(("crate::", "self::", "super::")):
        return "local"
    return "external"


def parse_rust(lines: Sequence[str]) -> list[Import]:
    """Parse ``use``, ``mod name;`` and ``extern crate`` items."""
    imports: list[Import] = []
    for line_no, line in enumerate(lines, 1):
        trimmed = line.strip()
        if trimmed.startswith("//"):
            continue
        working = trimmed[4:] if trimmed.startswith("pub ") else trimmed

        if working.startswith("use "):
            rest = working[4:]
            if rest.endswith(";"):
                rest = rest[:-1]
            rest = rest.strip()
            brace = rest.find("{")
            if brace >= 0:
                rest = rest[:brace]
                if rest.endswith("::"):
                    rest = rest[:-2]
            if rest:
                imports.append(Import(rest, _rust_use_kind(rest), line_no))
            continue

        if working.startswith("mod ") and working.endswith(";"):
            name = working[4:].strip()
            if name.endswith(";"):
                name = name[:-1]
            if name:
                imports.append(Import(name, "local", line_no))
            continue

        if working.startswith("extern crate "):
            rest = working[13:]
            if rest.endswith(";"):
                rest = rest[:-1]
            rest = rest.strip()
            alias = rest.find(" as ")
            if alias >= 0:
                rest = rest[:alias]
            if rest:
                imports.append(Import(rest, "external", line_no))
    return imports


def parse_c(lines: Sequence[str]) -> list[Import]:
    """Parse ``#include`` directives; quoted are local, angled are system."""
    imports: list[Import] = []
    for line_no, line in enumerate(lines, 1):
        trimmed = line.strip()
        if not trimmed.startswith("#"):
            continue
        directive = trimmed[1:].strip()
        if not directive.startswith("include"):
            continue
        rest = directive[7:].strip()
        if rest.startswith('"'):
            end = rest.find('"', 1)
            if end >= 0:
                imports.append(Import(rest[1:end], "local", line_no))
        elif rest.startswith("<"):
            end = rest.find(">")
            if end > 1:
                imports.append(Import(rest[1:end], "system", line_no))
    return imports


def parse_swift(lines: Sequence[str]) -> list[Import]:
    """Parse Swift ``import`` declarations, including kind-qualified ones."""
    imports: list[Import] = []
    for line_no, line in enumerate(lines, 1):
        trimmed = line.strip()
        if trimmed.startswith(("//", "/*")):
            continue
        if trimmed.startswith("@testable "):
            trimmed = trimmed[10:].strip()
        if not trimmed.startswith("import "):
            continue
        words = trimmed[7:].split()
        if not words:
            continue
        module = words[0]
        if module in _SWIFT_KINDS and len(words) > 1:
            module = words[1]
        module = module.split(".", 1)[0]
        kind = "stdlib" if module in _SWIFT_STDLIB else "external"
        imports.append(Import(module, kind, line_no))
    return imports


def parse_java(lines: Sequence[str]) -> list[Import]:
    """Parse Java and Kotlin ``import`` statements."""
    imports: list[Import] = []
    for line_no, line in enumerate(lines, 1):
        trimmed = line.strip()
        if trimmed.startswith(("//", "/*")):
            continue
        if not trimmed.startswith("import "):
            continue
        rest = trimmed[7:]
        if rest.startswith("static "):
            rest = rest[7:]
        if rest.endswith(";"):
            rest = rest[:-1]
        rest = rest.strip()
        alias = rest.find(" as ")
        if alias >= 0:
            rest = rest[:alias]
        if rest:
            stdlib = rest.startswith(("java.", "javax.", "kotlin.", "kotlinx."))
            imports.append(Import(rest, "stdlib" if stdlib else "external", line_no))
    return imports


def parse_ruby(lines: Sequence[str]) -> list[Import]:
    """Parse ``require`` and ``require_relative`` calls."""
    imports: list[Import] = []
    for line_no, line in enumerate(lines, 1):
        trimmed = line.strip()
        if trimmed.startswith("#"):
            continue
        if trimmed.startswith("require_relative "):
            pkg = extract_quoted(trimmed[17:])
            if pkg:
                imports.append(Import(pkg, "local", line_no))
            continue
        if trimmed.startswith("require "):
            pkg = extract_quoted(trimmed[8:])
            if pkg:
                imports.append(Import(pkg, "external", line_no))
    return imports


def parse_shell(lines: Sequence[str]) -> list[Import]:
    """Parse ``source file`` and ``. file`` lines."""
    imports: list[Import] = []
    for line_no, line in enumerate(lines, 1):
        trimmed = line.strip()
        if trimmed.startswith("#"):
            continue
        target = ""
        if trimmed.startswith("source "):
            target = trimmed[7:].strip()
        elif trimmed.startswith(". ") and len(trimmed) > 2:
            target = trimmed[2:].strip()
        if not target:
            continue
        target = target.strip("\"'")
        hash_idx = target.find("#")
        if hash_idx >= 0:
            target = target[:hash_idx].strip()
        if target:
            imports.append(Import(target, "local", line_no))
    return imports


_LANG_PARSERS: dict[str, Callable[[Sequence[str]], list[Import]]] = {
    "python": parse_python,
    "javascript": parse_js,
    "typescript": parse_js,
    "zig": parse_zig,
    "rust": parse_rust,
    "c": parse_c,
    "cpp": parse_c,
    "swift": parse_swift,
    "java": parse_java,
    "kotlin": parse_java,
    "ruby": parse_ruby,
    "shell": parse_shell,
}


def parse_imports(lines: Sequence[str], language: str, go_module: str = "") -> list[Import]:
    """Parse ``lines`` with the parser for ``language``; [] for unknown languages."""
    if language == "go":
        return parse_go(lines, go_module)
    parser = _LANG_PARSERS.get(language)
    return parser(lines) if parser else []