"""
GitPython-backed repository implementation.

Reads blobs straight out of commit trees; the working tree and index are
never touched.
"""

import logging
import threading
from pathlib import Path
from typing import Optional, Union

from git import Repo
from git.exc import BadName, BadObject, GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from review_time_travel.models.commit import CommitInfo
from review_time_travel.models.types import CommitSha, RepoFilePath
from review_time_travel.repository.base import (
    GitRepository,
    line_at,
    nearest_matching_line,
    split_lines,
)
from review_time_travel.repository.errors import (
    CommitNotFound,
    InvalidRange,
    RepositoryUnavailable,
)

logger = logging.getLogger(__name__)


class GitPythonRepository(GitRepository):
    """
    Read-only repository backed by GitPython.

    GitPython objects are not safe for concurrent use, so every operation
    holds a lock. Decoded file contents are cached per (commit, path) since
    historical content never changes.
    """

    def __init__(self, repo: Repo) -> None:
        """
        Wrap an already opened repository.

        Args:
            repo: The GitPython repository.
        """
        self._repo = repo
        self._lock = threading.RLock()
        self._file_cache: dict[tuple[str, str], Optional[list[str]]] = {}

    @classmethod
    def open(cls, path: Union[Path, str]) -> "GitPythonRepository":
        """
        Open the repository at ``path``.

        Raises:
            RepositoryUnavailable: If the path is not a Git repository.
        """
        try:
            return cls(Repo(path, search_parent_directories=True))
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise RepositoryUnavailable(f"cannot open repository at {path}: {e}") from e

    @property
    def working_dir(self) -> Optional[Path]:
        if self._repo.working_tree_dir is None:
            return None
        return Path(self._repo.working_tree_dir)

    def head_sha(self) -> CommitSha:
        """Resolve HEAD to a commit SHA."""
        return self.resolve("HEAD")

    def resolve(self, ref_or_sha: str) -> CommitSha:
        with self._lock:
            try:
                return CommitSha(self._repo.commit(ref_or_sha).hexsha)
            except (BadName, BadObject, ValueError) as e:
                raise CommitNotFound(ref_or_sha) from e
            except (GitCommandError, OSError) as e:
                raise RepositoryUnavailable(f"failed to resolve {ref_or_sha}: {e}") from e

    def _lines(self, commit: CommitSha, file: RepoFilePath) -> Optional[list[str]]:
        with self._lock:
            sha = self.resolve(commit)
            key = (sha, file)
            if key not in self._file_cache:
                self._file_cache[key] = self._load_lines(sha, file)
            return self._file_cache[key]

    def _load_lines(self, sha: CommitSha, file: RepoFilePath) -> Optional[list[str]]:
        try:
            tree = self._repo.commit(sha).tree
            try:
                entry = tree / file
            except KeyError:
                return None
            if entry.type != "blob":
                return None
            data = entry.data_stream.read()
        except (GitCommandError, OSError, ValueError) as e:
            raise RepositoryUnavailable(f"failed to read {file} at {sha}: {e}") from e

        logger.debug("Loaded %s at %s (%d bytes)", file, sha[:7], len(data))
        return split_lines(data.decode("utf-8", errors="replace"))

    def read_line(self, commit: CommitSha, file: RepoFilePath, line_number: int) -> Optional[str]:
        lines = self._lines(commit, file)
        if lines is None:
            return None
        return line_at(lines, line_number)

    def file_exists(self, commit: CommitSha, file: RepoFilePath) -> bool:
        return self._lines(commit, file) is not None

    def search_line(
        self,
        commit: CommitSha,
        file: RepoFilePath,
        needle_text: str,
        search_window: int,
        *,
        origin_line: int,
    ) -> Optional[int]:
        lines = self._lines(commit, file)
        if lines is None:
            return None
        return nearest_matching_line(lines, needle_text, origin_line, search_window)

    def commit_info(self, commit: CommitSha) -> Optional[CommitInfo]:
        sha = self.resolve(commit)
        with self._lock:
            try:
                entry = self._repo.commit(sha)
                message = entry.message
                if isinstance(message, bytes):
                    message = message.decode("utf-8", errors="replace")
                return CommitInfo(
                    sha=sha,
                    summary=message.strip().split("\n", 1)[0],
                    author=entry.author.name or "",
                    timestamp=entry.authored_datetime,
                )
            except (GitCommandError, OSError, ValueError) as e:
                raise RepositoryUnavailable(f"failed to read commit {sha}: {e}") from e

    def list_commits(self, base: str, head: str) -> list[CommitSha]:
        base_sha = self.resolve(base)
        head_sha = self.resolve(head)

        with self._lock:
            try:
                if not self._repo.is_ancestor(base_sha, head_sha):
                    raise InvalidRange(base, head)
                between = self._repo.iter_commits(
                    f"{base_sha}..{head_sha}",
                    ancestry_path=True,
                    topo_order=True,
                    reverse=True,
                )
                return [base_sha] + [CommitSha(c.hexsha) for c in between]
            except GitCommandError as e:
                raise RepositoryUnavailable(f"failed to list {base}..{head}: {e}") from e
