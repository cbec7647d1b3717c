"""
Identifier types shared across the package.
"""

from typing import NewType

# Full or abbreviated commit identifier, compared by exact value.
CommitSha = NewType("CommitSha", str)

# Repository-relative file path using forward slashes.
RepoFilePath = NewType("RepoFilePath", str)


def short_sha(sha: str, length: int = 7) -> str:
    """Abbreviate a commit SHA for display."""
    return sha[:length]
