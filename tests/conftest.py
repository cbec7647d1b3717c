"""
Pytest configuration and shared fixtures.
"""

from pathlib import Path
from typing import Any, Callable, Optional

import pytest
from git import Actor, Repo

from review_time_travel.models.comment import ReviewComment
from review_time_travel.repository.memory import InMemoryRepository


AUTHOR = Actor("Test Author", "author@example.com")


def numbered_lines(count: int, prefix: str = "line") -> str:
    """File content with ``count`` distinct lines."""
    return "".join(f"{prefix} {n}\n" for n in range(1, count + 1))


@pytest.fixture
def make_comment() -> Callable[..., ReviewComment]:
    """Factory for review comments with sensible defaults."""

    def _make(
        comment_id: int = 1,
        file_path: Optional[str] = "src/main.rs",
        line_number: Optional[int] = 10,
        commit_sha: Optional[str] = "c1",
        diff_hunk: Optional[str] = None,
        **extra: Any,
    ) -> ReviewComment:
        return ReviewComment(
            id=comment_id,
            file_path=file_path,
            line_number=line_number,
            commit_sha=commit_sha,
            diff_hunk=diff_hunk,
            **extra,
        )

    return _make


@pytest.fixture
def linear_repository() -> InMemoryRepository:
    """Three commits touching ``src/main.rs``.

    c1: 20 numbered lines
    c2: two lines inserted at the top, so line 10 moves to 12
    c3: the file is removed
    """
    repo = InMemoryRepository()
    content = numbered_lines(20)
    repo.add_commit("c1", {"src/main.rs": content, "README.md": "hello\n"})
    repo.add_commit("c2", {"src/main.rs": "new a\nnew b\n" + content, "README.md": "hello\n"})
    repo.add_commit("c3", {"README.md": "hello\n"})
    repo.set_ref("HEAD", "c3")
    return repo


@pytest.fixture
def simple_hunk() -> str:
    """A comment hunk whose last new-side line is line 12."""
    return "\n".join([
        "@@ -8,4 +8,5 @@ fn main() {",
        " line 8",
        " line 9",
        "-old 10",
        "+line 10",
        "+line 11",
        " line 12",
    ])


class GitRepoBuilder:
    """Builds throwaway Git repositories with GitPython."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.repo = Repo.init(path)
        with self.repo.config_writer() as writer:
            writer.set_value("user", "name", AUTHOR.name)
            writer.set_value("user", "email", AUTHOR.email)

    def commit(self, files: dict[str, Optional[str]], message: str = "change") -> str:
        """Write (or delete, for None) files and commit them. Returns the SHA."""
        for name, content in files.items():
            target = self.path / name
            if content is None:
                self.repo.index.remove([name], working_tree=True)
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
            self.repo.index.add([name])
        commit = self.repo.index.commit(message, author=AUTHOR, committer=AUTHOR)
        return commit.hexsha

    def add_remote(self, name: str, url: str) -> None:
        self.repo.create_remote(name, url)


@pytest.fixture
def git_repo(tmp_path: Path) -> GitRepoBuilder:
    """An empty Git repository in a temporary directory."""
    return GitRepoBuilder(tmp_path / "repo")
