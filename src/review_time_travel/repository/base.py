"""
Read-only repository capability interface.

Every backend (the GitPython repository and the in-memory test double)
implements the same small set of read-only operations. Historical commits
are immutable, so repeated calls for a fixed commit return identical results.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from review_time_travel.models.commit import CommitInfo
from review_time_travel.models.types import CommitSha, RepoFilePath


class GitRepository(ABC):
    """
    Abstract read-only view of a Git repository.

    Implementations must never mutate the repository.
    """

    @abstractmethod
    def resolve(self, ref_or_sha: str) -> CommitSha:
        """
        Resolve a reference or (abbreviated) SHA to a full commit SHA.

        Raises:
            CommitNotFound: If the reference cannot be resolved.
        """
        pass

    @abstractmethod
    def read_line(self, commit: CommitSha, file: RepoFilePath, line_number: int) -> Optional[str]:
        """
        Read one line of a file at a commit.

        Args:
            commit: Commit to read from.
            file: Repository-relative path.
            line_number: 1-based line number.

        Returns:
            The line without its terminator, or None if the file does not exist
            at the commit or the line is out of range.

        Raises:
            CommitNotFound: If the commit cannot be resolved.
            RepositoryUnavailable: On I/O-level failures.
        """
        pass

    @abstractmethod
    def file_exists(self, commit: CommitSha, file: RepoFilePath) -> bool:
        """Check whether a file exists at a commit."""
        pass

    @abstractmethod
    def search_line(
        self,
        commit: CommitSha,
        file: RepoFilePath,
        needle_text: str,
        search_window: int,
        *,
        origin_line: int,
    ) -> Optional[int]:
        """
        Find the line closest to ``origin_line`` whose content equals ``needle_text``.

        Only lines within ``search_window`` lines of ``origin_line`` are
        considered. Ties are broken by the smaller line number.

        Returns:
            The matching 1-based line number, or None.
        """
        pass

    @abstractmethod
    def list_commits(self, base: str, head: str) -> list[CommitSha]:
        """
        List the commits from ``base`` to ``head``, oldest first, both inclusive.

        Raises:
            CommitNotFound: If either end cannot be resolved.
            InvalidRange: If ``head`` is not a descendant of ``base``.
        """
        pass

    def commit_info(self, commit: CommitSha) -> Optional[CommitInfo]:
        """
        Display metadata of a commit.

        Not part of the verification capabilities: backends without commit
        metadata keep this default and the view simply omits the header.

        Raises:
            CommitNotFound: If the commit cannot be resolved.
        """
        return None


def nearest_matching_line(
    lines: Sequence[str],
    needle_text: str,
    origin_line: int,
    search_window: int,
) -> Optional[int]:
    """
    Find the nearest line equal to ``needle_text`` around ``origin_line``.

    Candidates are visited by increasing distance, upper side first, so the
    first match is the closest one and the smaller line number wins ties.

    Args:
        lines: File content, one entry per line.
        needle_text: Exact text to look for.
        origin_line: 1-based line the search is centred on.
        search_window: Maximum distance from ``origin_line``.

    Returns:
        The 1-based line number of the match, or None.
    """
    for distance in range(search_window + 1):
        for candidate in (origin_line - distance, origin_line + distance):
            if 1 <= candidate <= len(lines) and lines[candidate - 1] == needle_text:
                return candidate
            if distance == 0:
                break
    return None


def line_at(lines: Sequence[str], line_number: int) -> Optional[str]:
    """Return the 1-based line from ``lines``, or None when out of range."""
    if 1 <= line_number <= len(lines):
        return lines[line_number - 1]
    return None


def split_lines(content: str) -> list[str]:
    """
    Split file content into lines the way git counts them.

    Only ``\\n`` terminates a line; a trailing ``\\r`` is dropped so CRLF
    files compare equal to their diff hunk text.
    """
    if not content:
        return []
    lines = content.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]
