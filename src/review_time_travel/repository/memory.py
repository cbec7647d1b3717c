"""
In-memory repository used as a test double.

Commits are declared explicitly with their parents and file contents, so
tests can describe a history without touching the filesystem.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from review_time_travel.models.commit import CommitInfo
from review_time_travel.models.types import CommitSha, RepoFilePath
from review_time_travel.repository.base import (
    GitRepository,
    line_at,
    nearest_matching_line,
    split_lines,
)
from review_time_travel.repository.errors import CommitNotFound, InvalidRange


@dataclass(frozen=True)
class InMemoryCommit:
    """A commit in an in-memory history."""

    sha: str
    files: dict[str, str] = field(default_factory=dict)
    parents: tuple[str, ...] = ()
    message: str = ""
    author: str = ""
    timestamp: Optional[datetime] = None


class InMemoryRepository(GitRepository):
    """
    Repository backed by plain dictionaries.

    Supports full SHAs, unique SHA prefixes and named references.
    """

    def __init__(self) -> None:
        self._commits: dict[str, InMemoryCommit] = {}
        self._order: list[str] = []
        self._refs: dict[str, str] = {}

    def add_commit(
        self,
        sha: str,
        files: dict[str, str],
        parents: Optional[list[str]] = None,
        message: str = "",
        author: str = "",
        timestamp: Optional[datetime] = None,
    ) -> CommitSha:
        """
        Add a commit to the history.

        When ``parents`` is None the most recently added commit becomes the
        parent, which makes linear histories easy to declare.
        """
        if parents is None:
            parents = [self._order[-1]] if self._order else []
        for parent in parents:
            if parent not in self._commits:
                raise CommitNotFound(parent)
        self._commits[sha] = InMemoryCommit(
            sha=sha,
            files=dict(files),
            parents=tuple(parents),
            message=message,
            author=author,
            timestamp=timestamp,
        )
        self._order.append(sha)
        return CommitSha(sha)

    def set_ref(self, name: str, sha: str) -> None:
        """Point a named reference (branch, tag, HEAD) at a commit."""
        self._refs[name] = self.resolve(sha)

    def resolve(self, ref_or_sha: str) -> CommitSha:
        if ref_or_sha in self._refs:
            return CommitSha(self._refs[ref_or_sha])
        if ref_or_sha in self._commits:
            return CommitSha(ref_or_sha)
        if ref_or_sha:
            matches = [sha for sha in self._order if sha.startswith(ref_or_sha)]
            if len(matches) == 1:
                return CommitSha(matches[0])
        raise CommitNotFound(ref_or_sha)

    def _commit(self, commit: CommitSha) -> InMemoryCommit:
        return self._commits[self.resolve(commit)]

    def _lines(self, commit: CommitSha, file: RepoFilePath) -> Optional[list[str]]:
        content = self._commit(commit).files.get(file)
        if content is None:
            return None
        return split_lines(content)

    def read_line(self, commit: CommitSha, file: RepoFilePath, line_number: int) -> Optional[str]:
        lines = self._lines(commit, file)
        if lines is None:
            return None
        return line_at(lines, line_number)

    def file_exists(self, commit: CommitSha, file: RepoFilePath) -> bool:
        return file in self._commit(commit).files

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
        entry = self._commit(commit)
        return CommitInfo(
            sha=CommitSha(entry.sha),
            summary=entry.message.split("\n", 1)[0],
            author=entry.author,
            timestamp=entry.timestamp,
        )

    def list_commits(self, base: str, head: str) -> list[CommitSha]:
        base_sha = self.resolve(base)
        head_sha = self.resolve(head)

        # Commits on some path from base to head, visited in insertion order,
        # which is chronological for declared histories.
        ancestors = self._ancestors(head_sha)
        if base_sha not in ancestors:
            raise InvalidRange(base, head)
        descendants = self._descendants(base_sha)
        return [
            CommitSha(sha)
            for sha in self._order
            if sha in ancestors and sha in descendants
        ]

    def _ancestors(self, sha: str) -> set[str]:
        seen: set[str] = set()
        stack = [sha]
        while stack:
            current = stack.pop()
            if current in seen:
                continue
            seen.add(current)
            stack.extend(self._commits[current].parents)
        return seen

    def _descendants(self, sha: str) -> set[str]:
        seen = {sha}
        for candidate in self._order:
            if any(parent in seen for parent in self._commits[candidate].parents):
                seen.add(candidate)
        return seen
