"""prlog - changelogs from merged pull requests in a git commit range."""

__version__ = "0.3.0"
