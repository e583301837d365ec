"""Git queries for project directories."""

from .query import GitQuery, find_git_binary

__all__ = [
    "GitQuery",
    "find_git_binary",
]
