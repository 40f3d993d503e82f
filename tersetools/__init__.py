"""Compact, structured-output developer tools: text search and replace, git diff
summaries, merge-conflict parsing, build-error parsing, import mapping,
whitespace normalisation and moving paths to a trash directory."""

__version__ = "0.1.0"