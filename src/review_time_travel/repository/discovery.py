"""
Local repository discovery.

Finds the Git working tree that contains a starting path and works out
which GitHub repository it was cloned from.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from git import Repo
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from review_time_travel.models.commit import CommitInfo
from review_time_travel.models.types import CommitSha
from review_time_travel.repository.errors import (
    AmbiguousRemote,
    DiscoveryIoFailure,
    NoGitHubRemote,
    NotARepository,
)
from review_time_travel.repository.git_repository import GitPythonRepository
from review_time_travel.repository.remote import GitHubOrigin, parse_github_remote

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocalRepository:
    """A discovered working copy and the GitHub repository it tracks."""

    workdir: Path
    origin: GitHubOrigin
    remote_name: str
    repository: GitPythonRepository

    @property
    def owner(self) -> str:
        return self.origin.owner

    @property
    def name(self) -> str:
        return self.origin.repository

    def head_sha(self) -> CommitSha:
        """Resolve the working copy's HEAD commit."""
        return self.repository.head_sha()

    def commit_info(self, ref: str = "HEAD") -> Optional[CommitInfo]:
        """Display metadata of a commit of the working copy (default: HEAD)."""
        return self.repository.commit_info(self.repository.resolve(ref))


def discover(
    starting_path: Union[Path, str],
    remote_name: Optional[str] = None,
) -> LocalRepository:
    """
    Discover the repository enclosing ``starting_path``.

    Walks upward to the nearest working tree root, then inspects the
    configured remotes in order and takes the identity of the first one whose
    URL parses as a GitHub origin. Remotes that point at different
    repositories make the result ambiguous rather than guessed.

    Args:
        starting_path: Directory (or file) to start searching from.
        remote_name: Only consider this remote when given.

    Returns:
        The discovered LocalRepository.

    Raises:
        NotARepository: If no working tree encloses the path.
        NoGitHubRemote: If no (matching) remote has a GitHub URL.
        AmbiguousRemote: If matching remotes disagree on the identity.
        DiscoveryIoFailure: If the repository could not be read.
    """
    repo = _open_repository(Path(starting_path))
    if repo.working_tree_dir is None:
        # Bare repositories have nothing to review against.
        raise NotARepository(starting_path)

    origin, chosen_remote = _find_origin(repo, remote_name)
    workdir = Path(repo.working_tree_dir)
    logger.info(
        "Discovered %s at %s (remote %s)", origin.identity, workdir, chosen_remote
    )
    return LocalRepository(
        workdir=workdir,
        origin=origin,
        remote_name=chosen_remote,
        repository=GitPythonRepository(repo),
    )


def _open_repository(starting_path: Path) -> Repo:
    try:
        return Repo(starting_path, search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError) as e:
        raise NotARepository(starting_path) from e
    except OSError as e:
        raise DiscoveryIoFailure(f"failed to open repository at {starting_path}: {e}") from e


def _find_origin(repo: Repo, remote_name: Optional[str]) -> tuple[GitHubOrigin, str]:
    try:
        remotes = [(remote.name, list(remote.urls)) for remote in repo.remotes]
    except (GitCommandError, OSError) as e:
        raise DiscoveryIoFailure(f"failed to read remotes: {e}") from e

    if remote_name is not None:
        remotes = [(name, urls) for name, urls in remotes if name == remote_name]
        if not remotes:
            raise NoGitHubRemote(f"remote '{remote_name}' not found")
    if not remotes:
        raise NoGitHubRemote("repository has no remotes configured")

    matches: list[tuple[GitHubOrigin, str]] = []
    for name, urls in remotes:
        for url in urls:
            origin = parse_github_remote(url)
            if origin is None:
                logger.debug("Remote %s URL %s is not a GitHub origin", name, url)
                continue
            matches.append((origin, name))

    if not matches:
        raise NoGitHubRemote("no remote points at a GitHub repository")

    identities = {origin.identity_key: origin for origin, _ in matches}
    if len(identities) > 1:
        raise AmbiguousRemote(sorted(f"{o.host}/{o.identity}" for o in identities.values()))

    return matches[0]
