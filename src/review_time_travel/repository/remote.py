"""
Git remote URL parsing with GitHub origin detection.

Supported URL formats:
- SCP style: ``git@github.com:owner/repo.git``
- SSH: ``ssh://git@github.com/owner/repo.git`` (optionally with a port)
- HTTPS/HTTP: ``https://github.com/owner/repo`` (``.git`` optional)
- Git protocol: ``git://github.com/owner/repo.git``
"""

from typing import Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, Field

GITHUB_HOST = "github.com"

_URL_SCHEMES = ("https", "http", "ssh", "git", "git+ssh", "ssh+git")


class GitHubOrigin(BaseModel):
    """Owner/repository identity parsed from a remote URL."""

    host: str = Field(description="Host name, github.com or a GitHub Enterprise host")
    port: Optional[int] = Field(default=None, description="Explicit port, if any")
    owner: str = Field(description="User or organisation")
    repository: str = Field(description="Repository name without .git")

    class Config:
        frozen = True

    @property
    def is_github_com(self) -> bool:
        return self.host.lower() == GITHUB_HOST

    @property
    def identity(self) -> str:
        """``owner/repository`` as shown to users."""
        return f"{self.owner}/{self.repository}"

    @property
    def identity_key(self) -> tuple[str, str, str]:
        """Case-insensitive key used to compare origins."""
        return (self.host.lower(), self.owner.lower(), self.repository.lower())


def parse_github_remote(url: str) -> Optional[GitHubOrigin]:
    """
    Parse a Git remote URL into a GitHub origin.

    Args:
        url: The remote URL as configured in ``.git/config``.

    Returns:
        The parsed origin, or None if the URL does not match a recognised
        pattern.
    """
    trimmed = url.strip()
    if not trimmed:
        return None

    return _parse_scp_style(trimmed) or _parse_url_style(trimmed)


def _parse_scp_style(url: str) -> Optional[GitHubOrigin]:
    """Parse ``user@host:owner/repo.git``; SCP style carries no port."""
    if "://" in url:
        return None

    at_pos = url.find("@")
    colon_pos = url.find(":", at_pos + 1)
    if at_pos <= 0 or colon_pos == -1:
        return None

    host = url[at_pos + 1:colon_pos]
    path = url[colon_pos + 1:]
    if not host:
        return None
    return _from_path(host, None, path)


def _parse_url_style(url: str) -> Optional[GitHubOrigin]:
    """Parse ``scheme://[user@]host[:port]/owner/repo.git``."""
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError:
        return None

    if parts.scheme.lower() not in _URL_SCHEMES or not parts.hostname:
        return None
    return _from_path(parts.hostname, port, parts.path)


def _from_path(host: str, port: Optional[int], raw_path: str) -> Optional[GitHubOrigin]:
    """Extract owner and repository from ``owner/repo(.git)``."""
    segments = raw_path.strip("/").split("/")
    if len(segments) != 2:
        return None

    owner, repository = segments
    if repository.endswith(".git"):
        repository = repository[: -len(".git")]
    if not owner or not repository:
        return None

    if host.lower() == GITHUB_HOST:
        # Ports are meaningless for github.com itself.
        port = None
    return GitHubOrigin(host=host, port=port, owner=owner, repository=repository)
