import os

import pytest

from tersetools.imports import find_go_module, run, scan_imports


def _write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)


def test_find_go_module_walks_up(tmp_path):
    _write(tmp_path / "go.mod", "module example.com/foo\n\ngo 1.22\n")
    sub = tmp_path / "a" / "b"
    sub.mkdir(parents=True)
    assert find_go_module(str(sub)) == "example.com/foo"


def test_go_imports_classified_with_module(tmp_path):
    _write(tmp_path / "go.mod", "module example.com/foo\n")
    _write(
        tmp_path / "main.go",
        'package main\n\nimport (\n\t"fmt"\n\t"example.com/foo/bar"\n\t"github.com/x/y"\n)\n',
    )
    result = scan_imports(str(tmp_path))
    assert result.files_scanned == 1
    assert len(result.files) == 1
    file = result.files[0]
    assert file.path == "main.go"
    assert file.language == "go"
    kinds = {imp.package: imp.kind for imp in file.imports}
    assert kinds == {
        "fmt": "stdlib",
        "example.com/foo/bar": "local",
        "github.com/x/y": "external",
    }
    assert result.packages["fmt"] == ["main.go"]


def test_summary_mentions_counts(tmp_path):
    _write(tmp_path / "a.py", "import os\nfrom . import x\n")
    result = scan_imports(str(tmp_path))
    assert result.summary.startswith("Scanned 1 files (1 python): 2 imports")
    assert result.summary.endswith(f"across {len(result.packages)} packages")


def test_packages_deduplicated_per_file(tmp_path):
    _write(tmp_path / "a.py", "import os\nimport os\n")
    _write(tmp_path / "b.py", "import os\n")
    result = scan_imports(str(tmp_path))
    assert result.packages["os"] == ["a.py", "b.py"]


def test_non_recursive_ignores_subdirectories(tmp_path):
    _write(tmp_path / "sub" / "x.py", "import json\n")
    result = scan_imports(str(tmp_path))
    assert result.files_scanned == 0
    assert result.files == []


def test_recursive_descends_but_skips_known_dirs(tmp_path):
    _write(tmp_path / "sub" / "x.py", "import json\n")
    _write(tmp_path / "node_modules" / "y.js", "const z = require('z');\n")
    result = scan_imports(str(tmp_path), recursive=True)
    assert [f.path for f in result.files] == [os.path.join("sub", "x.py")]
    assert "z" not in result.packages


def test_ext_filter_and_unknown_language(tmp_path):
    _write(tmp_path / "a.py", "import os\n")
    _write(tmp_path / "b.rb", "require 'json'\n")
    _write(tmp_path / "notes.txt", "import os\n")
    result = scan_imports(str(tmp_path), ext=".rb")
    assert [f.path for f in result.files] == ["b.rb"]
    assert result.files_scanned == 1


def test_to_dict_omits_empty_collections(tmp_path):
    _write(tmp_path / "empty.py", "x = 1\n")
    data = scan_imports(str(tmp_path)).to_dict()
    assert data["files_scanned"] == 1
    assert "files" not in data
    assert "packages" not in data


def test_missing_directory_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        scan_imports(str(tmp_path / "nope"))


def test_file_is_not_a_directory(tmp_path):
    target = tmp_path / "f.py"
    target.write_text("import os\n")
    with pytest.raises(NotADirectoryError):
        scan_imports(str(target))


def test_run_requires_dir():
    with pytest.raises(ValueError, match="dir is required"):
        run({})


def test_run_resolves_relative_dir(tmp_path):
    _write(tmp_path / "pkg" / "m.c", '#include <stdio.h>\n#include "local.h"\n')
    data = run({"dir": "pkg"}, str(tmp_path))
    kinds = [imp["type"] for imp in data["files"][0]["imports"]]
    assert kinds == ["system", "local"]
    assert data["dir"] == os.path.abspath(str(tmp_path / "pkg"))