# tersetools

Small developer tools that each do one job and report the result as
compact, structured data that serialises straight to JSON. They are meant
to be driven by scripts and automated agents that want short, predictable
answers instead of pages of raw command output.

The package has no runtime dependencies. `cleandiff` needs `git` on the
`PATH`.

## The tools

| Module                   | What it does |
|--------------------------|--------------|
| `tersetools.checkfor`    | Searches for a string in the files of one or more directories (without descending into subdirectories) or in a list of files. |
| `tersetools.repfor`      | Searches and replaces across files or directories, optionally recursively, with a dry-run mode. |
| `tersetools.replace`     | The line and whole-content replacement functions that `repfor` uses. |
| `tersetools.cleandiff`   | Runs `git diff` and turns the unified diff into per-file hunks of added, removed and context lines, with totals. |
| `tersetools.conflicts`   | Finds git merge-conflict blocks, in both the standard and the diff3 style. |
| `tersetools.errs`        | Turns compiler and linter output into a deduplicated list of errors and detects the format on its own. |
| `tersetools.errparse`    | The per-format parsers that `errs` uses. |
| `tersetools.imports`     | Maps the imports of every source file in a directory and records which files use each package. |
| `tersetools.langimports` | The per-language import parsers that `imports` uses. |
| `tersetools.notab`       | Replaces tabs with spaces in a file, or turns leading spaces into tabs. |
| `tersetools.delete`      | Moves a file, directory or symlink into a trash directory instead of deleting it. |

## Tool entry points

The modules `checkfor`, `repfor`, `cleandiff`, `conflicts`, `errs`,
`imports`, `notab` and `delete` each have a `run(params, work_dir="")`
function. `params` is a plain mapping of options, as it would arrive from
a JSON request. Relative paths in it are resolved against `work_dir`. The
exception is `delete`, whose `path` is resolved against the current
directory. `run` returns a dictionary ready for `json.dumps`. When a
required option is missing it raises `ValueError`. Other failures raise
`OSError` (or one of its subclasses). `cleandiff` raises `RuntimeError`
when git fails.

```python
from tersetools import checkfor, errs, conflicts

checkfor.run({"search": "TODO", "dir": ["src"], "ext": ".py"}, ".")
errs.run({"input": "main.go:12:5: undefined: foo"}, ".")
conflicts.run({"file": ["app/config.py"], "context_lines": 2}, ".")
```

### Options

- **checkfor**: `search` (required), `dir` and `file` (a string or a list;
  with neither, the working directory is searched), `ext`,
  `case_insensitive`, `whole_word`, `context` (lines before and after each
  match), `exclude` (a list of strings: a line that contains any of them is
  dropped), `hide_filter_stats`. A search string that contains a newline
  matches across lines and reports `end_line`. Unreadable files are
  skipped.
- **repfor**: `search` and `replace` (both required), `dir`, `file` (files
  take precedence over directories), `ext`, `case_insensitive`,
  `whole_word`, `dry_run`, `recursive`, `exclude`. The sequences `\n`,
  `\r` and `\t` in `search` and `replace` are unescaped, and a newline in
  either switches to whole-content replacement. CRLF line endings are kept.
  Files are rewritten atomically.
- **cleandiff**: `path` (the repository), `ref` (a ref or a range),
  `staged`, `stat_only`, `context_lines` (default 0), `file_filter` (a
  list of paths).
- **conflicts**: `file` (required, a string or a list), `context_lines`
  (default 1).
- **errs**: `input` (required, the raw text) and `format` (`rust`, `tsc`,
  `dotnet` or `eslint`; any other value uses the colon-style parser for
  Go, GCC/Clang, flake8, mypy, Kotlin and similar tools). Without `format`
  the format is detected. ANSI colour codes are stripped before parsing.
- **imports**: `dir` (required), `ext`, `recursive`. Go, Python, JS/TS,
  Zig, Rust, C/C++, Swift, Java/Kotlin, Ruby and shell files are read.
  Directories such as `node_modules`, `.git`, `vendor` and `.venv` are
  always skipped. For Go, imports under the module named in the nearest
  `go.mod` count as local.
- **notab**: `file` (required), `spaces` (default 4), `tabs` (true turns
  leading spaces into tabs). The file is rewritten only if it changes.
- **delete**: `path` (required). The path goes to `$HOME/.Trash`
  (`default_trash_dir()`). Paths under `/System`, `/Library`, `/usr`,
  `/bin`, `/sbin`, `/etc`, `/var`, `/private` and `/Applications` are
  refused, as is the trash directory itself. On a name clash a timestamp
  is added to the name.

## Library use

The functions underneath `run` can be called directly:

```python
from tersetools.errs import parse_errors
from tersetools.cleandiff import parse_unified_diff
from tersetools.replace import replace_line
from tersetools.notab import expand_tabs

result = parse_errors("src/lib.c:3:1: error: expected ';'")
print(result.to_dict()["summary"])        # "1 error in 1 file"

raw = "diff --git a/x.txt b/x.txt\n--- a/x.txt\n+++ b/x.txt\n@@ -1 +1 @@\n-old\n+new\n"
files = parse_unified_diff(raw)           # [FileDiff(path="x.txt", insertions=1, ...)]

replace_line("foo food foo", "foo", "bar", False, True)   # "bar food bar"

expand_tabs("\tindented", 4)              # ("    indented", 1, 1)
```

Other entry points include `checkfor.search(CheckforConfig(...))`,
`repfor.repfor(RepforConfig(...))`, `cleandiff.clean_diff(...)`,
`conflicts.parse_conflicts(files)`, `imports.scan_imports(directory)`,
`langimports.parse_imports(lines, language)`, `notab.normalize_file(path)`,
`notab.tabify_file(path)` and `delete.trash_path(path, trash_dir)`.

The result classes (`CheckforResult`, `RepforResult`, `DiffResult`,
`ConflictsResult`, `ErrsResult`, `ImportsResult`, `NotabResult` and
`TrashResult`) each have a `to_dict()` method. It returns a dictionary
ready for `json.dumps`, with empty optional fields left out.

## What the package does not do

It installs no command-line program and runs no server. The tools are used
from Python, through `run` or the functions above. Nothing is read from
standard input or written to standard output. `delete` only moves paths
into a directory. It does not restore them, list what is there, or empty
the trash.

## Tests

```
pip install -e ".[test]"
pytest
```