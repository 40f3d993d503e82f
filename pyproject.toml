[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tersetools"
version = "0.1.0"
description = "Compact, structured-output developer tools: search, replace, diff, conflicts, build errors, imports, whitespace and trash."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "search",
    "replace",
    "git",
    "diff",
    "merge-conflicts",
    "compiler-errors",
    "lint",
    "imports",
    "whitespace",
    "trash",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development",
    "Topic :: Software Development :: Quality Assurance",
    "Topic :: Text Processing :: Filters",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["tersetools"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
