"""Map imports and dependencies for the source files in a directory."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Mapping

from tersetools.langimports import Import, detect_language, parse_imports

SKIP_DIRS = frozenset({
    "node_modules", "vendor", ".git", ".svn", ".hg", "__pycache__", ".tox",
    "dist", "build", ".build", "target", "zig-out", "zig-cache", ".zig-cache",
    ".claude", ".venv", "venv", "env", ".mypy_cache", ".pytest_cache",
    "DerivedData", ".gradle",
})

_STDLIB_KINDS = ("stdlib", "system")
_LOCAL_KINDS = ("local", "relative")


@dataclass
class FileImports:
    """The imports found in one file, with its path relative to the scanned directory."""

    path: str
    language: str
    imports: list[Import] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "language": self.language,
            "imports": [imp.to_dict() for imp in self.imports],
        }


@dataclass
class ImportsResult:
    """Result of scanning a directory for imports."""

    dir: str
    files_scanned: int = 0
    files: list[FileImports] = field(default_factory=list)
    packages: dict[str, list[str]] = field(default_factory=dict)
    summary: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return the result as JSON-ready data, omitting empty files and packages."""
        data: dict[str, Any] = {"dir": self.dir, "files_scanned": self.files_scanned}
        if self.files:
            data["files"] = [f.to_dict() for f in self.files]
        if self.packages:
            data["packages"] = {k: list(self.packages[k]) for k in sorted(self.packages)}
        data["summary"] = self.summary
        return data


def _extension(name: str) -> str:
    base = os.path.basename(name)
    dot = base.rfind(".")
    return base[dot:] if dot >= 0 else ""


def find_go_module(directory: str) -> str:
    """Return the module path from the nearest go.mod at or above ``directory``, or ""."""
    current = os.path.abspath(directory)
    while True:
        try:
            with open(os.path.join(current, "go.mod"), "rb") as handle:
                first = handle.read().decode("utf-8", "replace").split("\n", 1)[0]
        except OSError:
            first = ""
        if first.startswith("module "):
            return first[7:].strip()
        parent = os.path.dirname(current)
        if parent == current:
            return ""
        current = parent


def _scan_dir(
    scan_dir: str,
    root: str,
    ext: str,
    recursive: bool,
    go_module: str,
    result: ImportsResult,
) -> None:
    with os.scandir(scan_dir) as it:
        entries = sorted(it, key=lambda e: e.name)

    for entry in entries:
        full_path = os.path.join(scan_dir, entry.name)
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
            is_file = entry.is_file(follow_symlinks=False)
        except OSError:
            continue

        if is_dir:
            if entry.name in SKIP_DIRS or not recursive:
                continue
            try:
                _scan_dir(full_path, root, ext, recursive, go_module, result)
            except OSError:
                pass
            continue

        if not is_file:
            continue
        if ext and _extension(entry.name) != ext:
            continue
        language = detect_language(entry.name)
        if not language:
            continue
        try:
            with open(full_path, "rb") as handle:
                text = handle.read().decode("utf-8", "replace")
        except OSError:
            continue

        imports = parse_imports(text.split("\n"), language, go_module)
        result.files_scanned += 1
        if not imports:
            continue

        try:
            rel_path = os.path.relpath(full_path, root)
        except ValueError:
            rel_path = full_path

        result.files.append(FileImports(rel_path, language, imports))
        for imp in imports:
            users = result.packages.setdefault(imp.package, [])
            if rel_path not in users:
                users.append(rel_path)


def _summarise(result: ImportsResult) -> str:
    lang_counts: dict[str, int] = {}
    total = stdlib = external = local = 0
    for file in result.files:
        lang_counts[file.language] = lang_counts.get(file.language, 0) + 1
        for imp in file.imports:
            total += 1
            if imp.kind in _STDLIB_KINDS:
                stdlib += 1
            elif imp.kind == "external":
                external += 1
            elif imp.kind in _LOCAL_KINDS:
                local += 1

    lang_parts = sorted(f"{count} {lang}" for lang, count in lang_counts.items())
    lang_info = f" ({', '.join(lang_parts)})" if lang_parts else ""
    return (
        f"Scanned {result.files_scanned} files{lang_info}: {total} imports "
        f"({stdlib} stdlib, {external} external, {local} local) "
        f"across {len(result.packages)} packages"
    )


def scan_imports(directory: str, ext: str = "", recursive: bool = False) -> ImportsResult:
    """Scan ``directory`` (and subdirectories when ``recursive``) for imports.

    Raises FileNotFoundError when the directory is missing, NotADirectoryError
    when it is a file, and OSError when it cannot be read.
    """
    abs_dir = os.path.abspath(directory)
    try:
        info = os.stat(abs_dir)
    except OSError as exc:
        raise FileNotFoundError(f"directory does not exist: {exc}") from exc
    if not os.path.isdir(abs_dir) or not info:
        raise NotADirectoryError(f"not a directory: {abs_dir}")

    go_module = find_go_module(abs_dir)
    result = ImportsResult(dir=abs_dir)
    try:
        _scan_dir(abs_dir, abs_dir, ext, recursive, go_module, result)
    except OSError as exc:
        raise OSError(f"failed to read directory {abs_dir}: {exc}") from exc

    result.summary = _summarise(result)
    return result


def _resolve(path: str, work_dir: str) -> str:
    if not work_dir or os.path.isabs(path):
        return path
    return os.path.join(work_dir, path)


def run(params: Mapping[str, Any], work_dir: str = "") -> dict[str, Any]:
    """Scan imports from tool parameters and return JSON-ready data."""
    directory = params.get("dir")
    if not isinstance(directory, str) or not directory:
        raise ValueError("dir is required")
    ext = params.get("ext")
    recursive = params.get("recursive")
    return scan_imports(
        _resolve(directory, work_dir),
        ext if isinstance(ext, str) else "",
        recursive if isinstance(recursive, bool) else False,
    ).to_dict()