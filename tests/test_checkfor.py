import os

import pytest

from tersetools.checkfor import (
    CheckforConfig,
    CheckforResult,
    DirectoryResult,
    FileMatches,
    Match,
    contains_whole_word,
    index_of_whole_word,
    is_word_char,
    run,
    search,
    search_file,
)


LINES = ["hello world", "nothing here", "say Hello again", "hello"]


@pytest.fixture
def sample_dir(tmp_path):
    (tmp_path / "a.txt").write_text("\n".join(LINES) + "\n")
    (tmp_path / "b.go").write_text("package hello\n")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "c.txt").write_text("hello inside\n")
    return tmp_path


def _files_by_path(directory):
    return {f["path"]: f for f in directory["files"]}


def test_basic_search_lists_matching_lines(sample_dir):
    out = run({"search": "hello", "dir": [str(sample_dir)]})
    directory = out["directories"][0]
    files = _files_by_path(directory)
    assert set(files) == {"a.txt", "b.go"}
    contents = [m["content"] for m in files["a.txt"]["matches"]]
    assert contents == [line for line in LINES if "hello" in line]
    lines = [m["line"] for m in files["a.txt"]["matches"]]
    assert lines == [LINES.index(c) + 1 for c in contents]
    assert directory["matches_found"] == sum(len(f["matches"]) for f in directory["files"])


def test_subdirectories_not_scanned(sample_dir):
    out = run({"search": "inside", "dir": [str(sample_dir)]})
    assert out["directories"][0]["files"] == []
    assert out["directories"][0]["matches_found"] == 0


def test_extension_filter(sample_dir):
    out = run({"search": "hello", "dir": [str(sample_dir)], "ext": ".go"})
    assert [f["path"] for f in out["directories"][0]["files"]] == ["b.go"]


def test_case_insensitive(sample_dir):
    out = run({"search": "HELLO", "dir": [str(sample_dir)], "ext": ".txt", "case_insensitive": True})
    contents = [m["content"] for m in out["directories"][0]["files"][0]["matches"]]
    assert contents == [line for line in LINES if "hello" in line.lower()]


def test_whole_word_filters_partial_matches(tmp_path):
    (tmp_path / "w.txt").write_text("category\ncat food\nbobcat\n")
    out = run({"search": "cat", "dir": [str(tmp_path)], "whole_word": True})
    matches = out["directories"][0]["files"][0]["matches"]
    assert [m["content"] for m in matches] == ["cat food"]


def test_context_lines(sample_dir):
    out = run({"search": "nothing", "dir": [str(sample_dir)], "ext": ".txt", "context": 1})
    match = out["directories"][0]["files"][0]["matches"][0]
    assert match["context_before"] == [LINES[0]]
    assert match["context_after"] == [LINES[2]]


def test_context_omitted_when_zero(sample_dir):
    out = run({"search": "nothing", "dir": [str(sample_dir)], "ext": ".txt"})
    match = out["directories"][0]["files"][0]["matches"][0]
    assert "context_before" not in match and "context_after" not in match


def test_exclude_records_stats(sample_dir):
    out = run({"search": "hello", "dir": [str(sample_dir)], "ext": ".txt", "exclude": ["world"]})
    directory = out["directories"][0]
    total = sum(1 for line in LINES if "hello" in line)
    assert directory["original_matches"] == total
    assert directory["filtered_matches"] == 1
    contents = [m["content"] for m in directory["files"][0]["matches"]]
    assert "hello world" not in contents
    assert directory["original_matches"] - directory["filtered_matches"] == directory["matches_found"]


def test_hide_filter_stats(sample_dir):
    out = run(
        {
            "search": "hello",
            "dir": [str(sample_dir)],
            "ext": ".txt",
            "exclude": ["world"],
            "hide_filter_stats": True,
        }
    )
    directory = out["directories"][0]
    assert "original_matches" not in directory
    assert "filtered_matches" not in directory


def test_file_param_string_uses_files_label(sample_dir):
    path = str(sample_dir / "b.go")
    out = run({"search": "package", "file": path})
    assert len(out["directories"]) == 1
    directory = out["directories"][0]
    assert directory["dir"] == "(files)"
    assert directory["files"][0]["path"] == path


def test_missing_files_are_skipped(tmp_path):
    out = run({"search": "x", "file": [str(tmp_path / "missing.txt")]})
    assert out["directories"][0]["files"] == []


def test_dirs_and_files_both_reported(sample_dir):
    out = run({"search": "hello", "dir": [str(sample_dir)], "file": [str(sample_dir / "a.txt")]})
    assert [d["dir"] for d in out["directories"]] == [str(sample_dir), "(files)"]


def test_default_dir_is_work_dir(sample_dir):
    out = run({"search": "package"}, str(sample_dir))
    assert out["directories"][0]["dir"] == str(sample_dir)
    assert [f["path"] for f in out["directories"][0]["files"]] == ["b.go"]


def test_relative_paths_resolved_against_work_dir(sample_dir):
    out = run({"search": "inside", "dir": ["sub"]}, str(sample_dir))
    assert out["directories"][0]["dir"] == os.path.join(str(sample_dir), "sub")
    assert out["directories"][0]["files"][0]["path"] == "c.txt"


def test_missing_search_raises():
    with pytest.raises(ValueError, match="search is required"):
        run({"search": ""})
    with pytest.raises(ValueError):
        run({})


def test_unreadable_directory_raises(tmp_path):
    with pytest.raises(OSError, match="failed to read directory"):
        run({"search": "x", "dir": [str(tmp_path / "nope")]})


def test_multiline_match_has_end_line(tmp_path):
    (tmp_path / "m.txt").write_text("alpha\nbeta\ngamma\ndelta\n")
    out = run({"search": "beta\ngamma", "dir": [str(tmp_path)], "context": 1})
    match = out["directories"][0]["files"][0]["matches"][0]
    assert match["content"] == "beta\ngamma"
    assert match["line"] == 2
    assert match["end_line"] == match["line"] + 1
    assert match["context_before"] == ["alpha"]
    assert match["context_after"] == ["delta"]


def test_multiline_crlf_file(tmp_path):
    (tmp_path / "m.txt").write_bytes(b"alpha\r\nbeta\r\ngamma\r\n")
    config = CheckforConfig(search="alpha\nbeta")
    matches, original, filtered = search_file(str(tmp_path / "m.txt"), config)
    assert original == len(matches) == 1
    assert filtered == 0
    assert matches[0].content == "alpha\r\nbeta"


def test_multiline_exclude_uses_spanning_lines(tmp_path):
    (tmp_path / "m.txt").write_text("keep a\nb\nskip a\nb\n")
    config = CheckforConfig(search="a\nb", exclude=["skip"])
    matches, original, filtered = search_file(str(tmp_path / "m.txt"), config)
    assert original == 2
    assert filtered == 1
    assert [m.line for m in matches] == [1]


def test_single_line_crlf_strips_carriage_return(tmp_path):
    (tmp_path / "c.txt").write_bytes(b"one\r\ntwo\r\n")
    matches, _, _ = search_file(str(tmp_path / "c.txt"), CheckforConfig(search="two"))
    assert [m.content for m in matches] == ["two"]


def test_search_with_config_object(sample_dir):
    result = search(CheckforConfig(search="hello", dirs=[str(sample_dir)], ext=".txt"))
    assert isinstance(result, CheckforResult)
    assert result.directories[0].matches_found == len(result.directories[0].files[0].matches)


def test_to_dict_omits_empty_optional_fields():
    result = CheckforResult(
        directories=[
            DirectoryResult(
                dir="d",
                matches_found=1,
                files=[FileMatches(path="f", matches=[Match(line=4, content="x")])],
            )
        ]
    )
    assert result.to_dict() == {
        "directories": [
            {
                "dir": "d",
                "matches_found": 1,
                "files": [{"path": "f", "matches": [{"line": 4, "content": "x"}]}],
            }
        ]
    }


@pytest.mark.parametrize(
    "text,word,expected",
    [
        ("the cat sat", "cat", True),
        ("category", "cat", False),
        ("bobcat", "cat", False),
        ("cat_food", "cat", False),
        ("cat-food", "cat", True),
        ("concat cat", "cat", True),
    ],
)
def test_contains_whole_word(text, word, expected):
    assert contains_whole_word(text, word) is expected


def test_index_of_whole_word_skips_partial():
    text = "concat cat"
    assert index_of_whole_word(text, "cat") == text.rindex("cat")
    assert index_of_whole_word("category", "cat") == -1


@pytest.mark.parametrize("ch,expected", [("a", True), ("Z", True), ("5", True), ("_", True), ("-", False), (" ", False), ("é", False)])
def test_is_word_char(ch, expected):
    assert is_word_char(ch) is expected