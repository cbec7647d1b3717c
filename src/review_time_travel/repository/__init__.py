"""
Repository access for Review Time Travel.

This package contains:
- The read-only repository capability interface
- A GitPython implementation and an in-memory test double
- Remote URL parsing and local repository discovery
"""

from review_time_travel.repository.base import GitRepository
from review_time_travel.repository.discovery import LocalRepository, discover
from review_time_travel.repository.errors import (
    AmbiguousRemote,
    CommitNotFound,
    DiscoveryError,
    DiscoveryIoFailure,
    InvalidRange,
    NoGitHubRemote,
    NotARepository,
    RepositoryCapabilityError,
    RepositoryUnavailable,
)
from review_time_travel.repository.git_repository import GitPythonRepository
from review_time_travel.repository.memory import InMemoryRepository
from review_time_travel.repository.remote import GitHubOrigin, parse_github_remote

__all__ = [
    "GitRepository",
    "GitPythonRepository",
    "InMemoryRepository",
    "LocalRepository",
    "discover",
    "GitHubOrigin",
    "parse_github_remote",
    # Errors
    "RepositoryCapabilityError",
    "RepositoryUnavailable",
    "CommitNotFound",
    "InvalidRange",
    "DiscoveryError",
    "NotARepository",
    "NoGitHubRemote",
    "AmbiguousRemote",
    "DiscoveryIoFailure",
]
