"""
Integration tests for the command-line interface.
"""

import json
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from review_time_travel import __version__
from review_time_travel.cli import cli


def numbered_lines(count: int) -> str:
    return "".join(f"line {n}\n" for n in range(1, count + 1))


@pytest.fixture
def runner(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> CliRunner:
    # Keep configuration discovery away from the developer's checkout.
    monkeypatch.chdir(tmp_path)
    return CliRunner()


@pytest.fixture
def history(git_repo: Any) -> tuple[str, str]:
    """Two commits; the second inserts two lines above line 10."""
    first = git_repo.commit({"src/app.py": numbered_lines(20)}, "initial")
    second = git_repo.commit({"src/app.py": "import os\nimport sys\n" + numbered_lines(20)}, "imports")
    git_repo.add_remote("origin", "https://github.com/octocat/hello-world.git")
    return first, second


@pytest.fixture
def comments_file(tmp_path: Path, history: tuple[str, str]) -> Path:
    first, second = history
    path = tmp_path / "comments.json"
    path.write_text(
        json.dumps(
            {
                "pull_request": {
                    "owner": "octocat",
                    "repository": "hello-world",
                    "number": 42,
                    "base": {"sha": first},
                    "head": {"sha": second},
                },
                "comments": [
                    {
                        "id": 1,
                        "path": "src/app.py",
                        "line": 10,
                        "commit_id": first,
                        "user": {"login": "reviewer"},
                        "body": "Rename this",
                        "diff_hunk": "@@ -9,2 +9,2 @@\n line 9\n line 10",
                    },
                ],
            }
        ),
        encoding="utf-8",
    )
    return path


class TestCliBasics:
    """Tests for the command group itself."""

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"], obj={})

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--help"], obj={})

        assert result.exit_code == 0
        for command in ("discover", "commits", "verify", "travel", "review", "hunks"):
            assert command in result.output

    def test_invalid_config(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test that a broken configuration file aborts."""
        config = tmp_path / "broken.yaml"
        config.write_text("time_travel:\n  commit_history_limit: 1\n", encoding="utf-8")

        result = runner.invoke(cli, ["--config", str(config), "commits", "a", "b"], obj={})

        assert result.exit_code != 0
        assert "Error:" in result.stdout


class TestDiscoverCommand:
    """Tests for `discover`."""

    def test_discover(self, runner: CliRunner, git_repo: Any, history: tuple[str, str]) -> None:
        result = runner.invoke(cli, ["discover", str(git_repo.path)], obj={})

        assert result.exit_code == 0
        assert "octocat/hello-world" in result.stdout
        assert history[1] in result.stdout

    def test_not_a_repository(self, runner: CliRunner, tmp_path: Path) -> None:
        plain = tmp_path / "plain"
        plain.mkdir()

        result = runner.invoke(cli, ["discover", str(plain)], obj={})

        assert result.exit_code != 0
        assert "Error:" in result.stdout


class TestCommitsCommand:
    """Tests for `commits`."""

    def test_lists_range(self, runner: CliRunner, git_repo: Any, history: tuple[str, str]) -> None:
        first, second = history

        result = runner.invoke(cli, ["commits", first, second, "--repo", str(git_repo.path)], obj={})

        assert result.exit_code == 0
        assert result.stdout.index(first) < result.stdout.index(second)
        assert "Total: 2 commits" in result.stdout

    def test_unknown_commit(self, runner: CliRunner, git_repo: Any, history: tuple[str, str]) -> None:
        result = runner.invoke(cli, ["commits", "nope", history[1], "--repo", str(git_repo.path)], obj={})

        assert result.exit_code != 0
        assert "commit not found: nope" in result.stdout


class TestVerifyCommand:
    """Tests for `verify`."""

    def test_json(self, runner: CliRunner, git_repo: Any, comments_file: Path) -> None:
        result = runner.invoke(
            cli,
            ["verify", "--comments", str(comments_file), "--repo", str(git_repo.path), "--format", "json"],
            obj={},
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        verification = data["comments"][0]["verification"]
        assert verification["status"] == "moved"
        assert verification["new_line"] == 12
        assert data["comments"][0]["comment"]["author"] == "reviewer"

    def test_writes_output_file(
        self,
        runner: CliRunner,
        git_repo: Any,
        comments_file: Path,
        tmp_path: Path,
    ) -> None:
        output = tmp_path / "report.json"

        result = runner.invoke(
            cli,
            ["verify", "--comments", str(comments_file), "--repo", str(git_repo.path), "-f", "json", "-o", str(output)],
            obj={},
        )

        assert result.exit_code == 0
        assert "Results written to:" in result.stdout
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["comments"][0]["comment"]["file"] == "src/app.py"

    def test_not_a_repository(self, runner: CliRunner, comments_file: Path, tmp_path: Path) -> None:
        plain = tmp_path / "plain"
        plain.mkdir()

        result = runner.invoke(cli, ["verify", "--comments", str(comments_file), "--repo", str(plain)], obj={})

        assert result.exit_code != 0
        assert "Error:" in result.stdout


class TestTravelCommand:
    """Tests for `travel`."""

    def test_range_from_comments_file(
        self,
        runner: CliRunner,
        git_repo: Any,
        comments_file: Path,
        history: tuple[str, str],
    ) -> None:
        first, second = history

        result = runner.invoke(
            cli,
            ["travel", "--comments", str(comments_file), "--repo", str(git_repo.path), "-f", "json"],
            obj={},
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["commits"] == [first, second]
        statuses = data["comments"][0]["statuses"]
        assert statuses[first]["status"] == "unchanged"
        assert statuses[second]["status"] == "moved"

    def test_missing_range(self, runner: CliRunner, git_repo: Any, tmp_path: Path) -> None:
        comments = tmp_path / "bare.json"
        comments.write_text("[]", encoding="utf-8")

        result = runner.invoke(cli, ["travel", "--comments", str(comments), "--repo", str(git_repo.path)], obj={})

        assert result.exit_code != 0
        assert "--base and --head are required" in result.stdout


class TestReviewCommand:
    """Tests for `review`."""

    def test_replays_time_travel_view(
        self,
        runner: CliRunner,
        git_repo: Any,
        comments_file: Path,
        history: tuple[str, str],
    ) -> None:
        first, second = history

        result = runner.invoke(cli, ["review", "--comments", str(comments_file), "--repo", str(git_repo.path)], obj={})

        assert result.exit_code == 0
        output = result.stdout
        assert output.index(f"Commit [2/2] {second[:7]}") < output.index(f"Commit [1/2] {first[:7]}")
        assert f'Commit: {second[:7]}  "imports"  Test Author, ' in output
        assert f'Commit: {first[:7]}  "initial"  Test Author, ' in output
        assert "File: src/app.py  " in output
        assert "> 12 | line 10" in output
        assert "> 10 | line 10" in output

    def test_without_repository_explains(self, runner: CliRunner, comments_file: Path, tmp_path: Path) -> None:
        plain = tmp_path / "plain"
        plain.mkdir()

        result = runner.invoke(cli, ["review", "--comments", str(comments_file), "--repo", str(plain)], obj={})

        assert result.exit_code == 0
        assert result.stdout.startswith("Time travel requires a local repository checkout.")
        assert "octocat/hello-world (PR #42)" in result.stdout
        assert "#1 src/app.py:10" in result.stdout


class TestHunksCommand:
    """Tests for `hunks`."""

    def test_json_with_width(self, runner: CliRunner, comments_file: Path) -> None:
        result = runner.invoke(cli, ["hunks", "--comments", str(comments_file), "-w", "6", "-f", "json"], obj={})

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["total"] == 1
        assert data["hunks"][0]["line_range"] == [9, 10]
        assert all(len(line) <= 6 for line in data["hunks"][0]["lines"])

    def test_file_filter(self, runner: CliRunner, comments_file: Path) -> None:
        result = runner.invoke(cli, ["hunks", "--comments", str(comments_file), "--file", "other.py"], obj={})

        assert result.exit_code == 0
        assert "No diff context available" in result.stdout
