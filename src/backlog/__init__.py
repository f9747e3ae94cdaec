"""backlog-core: a file-backed task tracking engine for Backlog.md projects."""

__version__ = "0.1.0"
