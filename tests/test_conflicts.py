import os

import pytest

from tersetools.conflicts import (
    is_conflict_marker_line,
    parse_conflicts,
    parse_file_conflicts,
    run,
)

STANDARD = [
    "before",
    "<<<<<<< HEAD",
    "ours line",
    "=======",
    "theirs line",
    ">>>>>>> feature",
    "after",
]


def _write(path, lines, ending="\n") -> str:
    path.write_bytes(ending.join(lines).encode())
    return str(path)


def test_standard_conflict(tmp_path):
    path = _write(tmp_path / "a.txt", STANDARD)
    result, diff3 = parse_file_conflicts(path, 1)
    assert diff3 is False
    assert result.count == 1
    conflict = result.conflicts[0]
    assert conflict.line == STANDARD.index("<<<<<<< HEAD") + 1
    assert conflict.end_line == STANDARD.index(">>>>>>> feature") + 1
    assert conflict.ours_ref == "HEAD"
    assert conflict.theirs_ref == "feature"
    assert conflict.ours == "ours line"
    assert conflict.theirs == "theirs line"
    assert conflict.context_above == "before"
    assert conflict.context_below == "after"
    assert conflict.base == ""


def test_diff3_base_section(tmp_path):
    lines = [
        "<<<<<<< ours",
        "mine",
        "||||||| base",
        "original",
        "=======",
        "yours",
        ">>>>>>> theirs",
    ]
    path = _write(tmp_path / "a.txt", lines)
    result = parse_conflicts([path])
    assert result.has_diff3 is True
    conflict = result.files[0].conflicts[0]
    assert conflict.base == "original"
    assert conflict.to_dict()["base"] == "original"


def test_zero_context_omits_context_keys(tmp_path):
    path = _write(tmp_path / "a.txt", STANDARD)
    data = parse_conflicts([path], 0).to_dict()
    conflict = data["files"][0]["conflicts"][0]
    assert "context_above" not in conflict
    assert "context_below" not in conflict
    assert "base" not in conflict


def test_summary_wording(tmp_path):
    path = _write(tmp_path / "a.txt", STANDARD)
    assert parse_conflicts([path]).summary == "Found 1 conflict in 1 file"
    empty = _write(tmp_path / "b.txt", ["nothing here"])
    result = parse_conflicts([path, empty])
    assert result.summary == "Found 1 conflict in 2 files"
    assert result.total == sum(f.count for f in result.files)


def test_context_stops_at_markers(tmp_path):
    lines = STANDARD[1:6] + STANDARD[1:6]
    path = _write(tmp_path / "a.txt", lines)
    result, _ = parse_file_conflicts(path, 3)
    assert result.count == 2
    assert result.conflicts[0].context_below == ""
    assert result.conflicts[1].context_above == ""


def test_crlf_lines_are_trimmed(tmp_path):
    path = _write(tmp_path / "a.txt", STANDARD, ending="\r\n")
    result, _ = parse_file_conflicts(path, 1)
    conflict = result.conflicts[0]
    assert conflict.ours == "ours line"
    assert conflict.theirs_ref == "feature"


def test_multiline_sides_join_with_newline(tmp_path):
    lines = ["<<<<<<< HEAD", "a", "b", "=======", "c", ">>>>>>> x"]
    path = _write(tmp_path / "a.txt", lines)
    result, _ = parse_file_conflicts(path, 1)
    assert result.conflicts[0].ours == "a\nb"
    assert result.conflicts[0].theirs == "c"


def test_unterminated_conflict_is_not_reported(tmp_path):
    path = _write(tmp_path / "a.txt", STANDARD[:5])
    result, _ = parse_file_conflicts(path, 1)
    assert result.conflicts == []


def test_is_conflict_marker_line():
    assert is_conflict_marker_line("=======") is True
    assert is_conflict_marker_line("========") is False
    assert is_conflict_marker_line("<<<<<<< HEAD") is True
    assert is_conflict_marker_line("plain text") is False


def test_run_resolves_relative_paths(tmp_path):
    _write(tmp_path / "a.txt", STANDARD)
    data = run({"file": ["a.txt"]}, work_dir=str(tmp_path))
    assert data["files"][0]["file"] == os.path.join(str(tmp_path), "a.txt")
    assert data["total"] == 1


def test_run_requires_file():
    with pytest.raises(ValueError, match="file is required"):
        run({})
    with pytest.raises(ValueError, match="file is required"):
        run({"file": ""})


def test_missing_file_raises(tmp_path):
    with pytest.raises(OSError, match="failed to parse"):
        parse_conflicts([str(tmp_path / "missing.txt")])