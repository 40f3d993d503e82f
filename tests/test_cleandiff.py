import pytest

from tersetools.cleandiff import (
    DiffResult,
    FileDiff,
    Hunk,
    clean_diff,
    parse_diff_git_path,
    parse_hunk_header,
    parse_range,
    parse_unified_diff,
    run,
)

SAMPLE = "\n".join(
    [
        "diff --git a/main.go b/main.go",
        "index 1111111..2222222 100644",
        "--- a/main.go",
        "+++ b/main.go",
        "@@ -1,3 +1,4 @@ package main",
        " package main",
        "-old line",
        "+new line",
        "+another line",
        "\\ No newline at end of file",
        "diff --git a/added.txt b/added.txt",
        "new file mode 100644",
        "--- /dev/null",
        "+++ b/added.txt",
        "@@ -0,0 +1 @@",
        "+hello",
        "diff --git a/old.txt b/new.txt",
        "similarity index 100%",
        "rename from old.txt",
        "rename to new.txt",
        "",
    ]
)


def test_parse_range_with_count():
    assert parse_range("-1,3") == (1, 3)


def test_parse_range_default_count():
    assert parse_range("+5") == (5, 1)


def test_parse_range_bad_number_is_zero():
    assert parse_range("-x,y") == (0, 0)


def test_parse_hunk_header():
    assert parse_hunk_header("@@ -1,2 +1,3 @@ func main()") == (1, 2, 1, 3, "func main()")


def test_parse_hunk_header_without_closing():
    assert parse_hunk_header("@@ -1,2 +1,3") == (0, 0, 0, 0, "")


def test_parse_diff_git_path():
    assert parse_diff_git_path("diff --git a/foo.go b/foo.go") == "foo.go"


def test_parse_diff_git_path_without_b_prefix():
    assert parse_diff_git_path("diff --git a/foo.go other") == "foo.go"


def test_parse_unified_diff_files_and_statuses():
    files = parse_unified_diff(SAMPLE)
    assert [f.path for f in files] == ["main.go", "added.txt", "new.txt"]
    assert [f.status for f in files] == ["modified", "added", "renamed"]
    assert files[2].old_path == "old.txt"


def test_parse_unified_diff_counts_and_lines():
    main = parse_unified_diff(SAMPLE)[0]
    assert main.insertions == 2
    assert main.deletions == 1
    hunk = main.hunks[0]
    assert hunk.added == ["new line", "another line"]
    assert hunk.removed == ["old line"]
    assert hunk.context == ["package main"]
    assert hunk.header == "package main"


def test_stat_only_keeps_counts_drops_hunks():
    full = parse_unified_diff(SAMPLE)
    stats = parse_unified_diff(SAMPLE, stat_only=True)
    assert all(not f.hunks for f in stats)
    assert [(f.insertions, f.deletions) for f in stats] == [
        (f.insertions, f.deletions) for f in full
    ]


def test_parse_empty_input():
    assert parse_unified_diff("") == []


def test_result_summary_and_dict():
    files = parse_unified_diff(SAMPLE)
    data = DiffResult.from_files(files).to_dict()
    assert data["summary"]["files_changed"] == len(files)
    assert data["summary"]["insertions"] == sum(f.insertions for f in files)
    assert data["summary"]["deletions"] == sum(f.deletions for f in files)
    renamed = data["files"][2]
    assert "hunks" not in renamed
    assert renamed["old_path"] == "old.txt"


def test_file_dict_omits_empty_fields():
    data = FileDiff(path="a", hunks=[Hunk(old_start=1, old_count=1)]).to_dict()
    assert "old_path" not in data
    assert data["hunks"] == [{"old_start": 1, "old_count": 1, "new_start": 0, "new_count": 0}]


def test_empty_result_dict():
    assert DiffResult().to_dict() == {
        "summary": {"files_changed": 0, "insertions": 0, "deletions": 0},
        "files": [],
    }


def test_clean_diff_missing_directory_raises(tmp_path):
    with pytest.raises(RuntimeError, match="git diff failed"):
        clean_diff(repo_path=str(tmp_path / "missing"))


def test_run_missing_directory_raises(tmp_path):
    with pytest.raises(RuntimeError, match="git diff failed"):
        run({"path": "missing"}, str(tmp_path))