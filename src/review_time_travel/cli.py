"""
Command-line interface for Review Time Travel.

This module provides the CLI using Click framework for argument parsing
and wires discovery, verification and diff context rendering together.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from review_time_travel import __version__
from review_time_travel.config import Config, find_config_file, load_config
from review_time_travel.repository.errors import DiscoveryError, RepositoryCapabilityError

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _emit(formatted_output: str, output: Optional[Path]) -> None:
    if output:
        output.write_text(formatted_output, encoding="utf-8")
        console.print(f"[green]Results written to:[/green] {output}")
    else:
        # Print directly to stdout to preserve ANSI codes from formatter
        sys.stdout.write(formatted_output)
        sys.stdout.flush()


def _fail(error: Exception) -> None:
    console.print(f"[red]Error:[/red] {escape(str(error))}", highlight=False)
    raise click.Abort()


@click.group()
@click.version_option(version=__version__, prog_name="review-time-travel")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable debug logging.",
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[Path], verbose: bool) -> None:
    """Review Time Travel - Check review comments against a pull request's history."""
    ctx.ensure_object(dict)
    config_path = config or find_config_file(Path.cwd())
    try:
        loaded = load_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        _fail(e)
    _configure_logging("DEBUG" if verbose else loaded.logging.level)
    if config_path:
        logger.debug("Loaded configuration from %s", config_path)
    ctx.obj["config"] = loaded


@cli.command()
@click.argument(
    "path",
    type=click.Path(exists=True, path_type=Path),
    default=".",
)
@click.option(
    "--remote",
    "-r",
    type=str,
    default=None,
    help="Only consider this remote (default: every remote).",
)
@click.pass_context
def discover(ctx: click.Context, path: Path, remote: Optional[str]) -> None:
    """Show which GitHub repository the local checkout tracks."""
    from review_time_travel.repository.discovery import discover as discover_repository

    config: Config = ctx.obj["config"]
    try:
        local = discover_repository(path, remote or config.discovery.remote_name)
        head = local.head_sha()
    except (DiscoveryError, RepositoryCapabilityError) as e:
        _fail(e)

    console.print(f"[bold]{local.origin.identity}[/bold]", highlight=False)
    console.print(f"  Host: {local.origin.host}", highlight=False)
    console.print(f"  Remote: {local.remote_name}", highlight=False)
    console.print(f"  Working tree: {local.workdir}", highlight=False)
    console.print(f"  HEAD: {head}", highlight=False)


@cli.command()
@click.argument("base")
@click.argument("head")
@click.option(
    "--repo",
    type=click.Path(exists=True, path_type=Path),
    default=".",
    help="Path to the local checkout (default: current directory).",
)
def commits(base: str, head: str, repo: Path) -> None:
    """List the commits from BASE to HEAD, oldest first."""
    from review_time_travel.repository.git_repository import GitPythonRepository

    try:
        repository = GitPythonRepository.open(repo)
        shas = repository.list_commits(base, head)
    except RepositoryCapabilityError as e:
        _fail(e)

    for index, sha in enumerate(shas, start=1):
        console.print(f"{index:>4}  {sha}", highlight=False)
    console.print(f"\nTotal: {len(shas)} commits", highlight=False)


@cli.command()
@click.option(
    "--comments",
    "comments_path",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="JSON or YAML file with review comments.",
)
@click.option(
    "--target",
    "-t",
    type=str,
    default="HEAD",
    help="Commit to verify the comments against (default: HEAD).",
)
@click.option(
    "--repo",
    type=click.Path(exists=True, path_type=Path),
    default=".",
    help="Path to the local checkout (default: current directory).",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["text", "json", "yaml"]),
    default="text",
    help="Output format (default: text).",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    help="Output file path. If not specified, prints to stdout.",
)
@click.pass_context
def verify(
    ctx: click.Context,
    comments_path: Path,
    target: str,
    repo: Path,
    output_format: str,
    output: Optional[Path],
) -> None:
    """Check whether each comment's line is still where it was."""
    from review_time_travel.intake import load_comments
    from review_time_travel.models.report import VerificationReport
    from review_time_travel.output.formatters import get_formatter
    from review_time_travel.repository.git_repository import GitPythonRepository
    from review_time_travel.verification.line_mapping import LineMappingVerifier

    config: Config = ctx.obj["config"]
    try:
        comments = load_comments(comments_path)
        repository = GitPythonRepository.open(repo)
        target_commit = repository.resolve(target)
    except (FileNotFoundError, ValueError, RepositoryCapabilityError) as e:
        _fail(e)

    verifier = LineMappingVerifier(repository, config.verification.search_window)
    results = verifier.verify_comments(comments, target_commit)
    report = VerificationReport(target_commit=target_commit, comments=comments, results=results)

    formatter = get_formatter(output_format)
    _emit(formatter.format_verification(report), output)


@cli.command()
@click.option(
    "--comments",
    "comments_path",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="JSON or YAML file with review comments.",
)
@click.option(
    "--base",
    type=str,
    default=None,
    help="Oldest commit of the range (default: from the comments file).",
)
@click.option(
    "--head",
    type=str,
    default=None,
    help="Newest commit of the range (default: from the comments file).",
)
@click.option(
    "--repo",
    type=click.Path(exists=True, path_type=Path),
    default=".",
    help="Path to the local checkout (default: current directory).",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["text", "json", "yaml"]),
    default="text",
    help="Output format (default: text).",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    help="Output file path. If not specified, prints to stdout.",
)
@click.pass_context
def travel(
    ctx: click.Context,
    comments_path: Path,
    base: Optional[str],
    head: Optional[str],
    repo: Path,
    output_format: str,
    output: Optional[Path],
) -> None:
    """Step back from the newest commit and record every comment's status."""
    from review_time_travel.intake import load_review_document
    from review_time_travel.models.report import TravelReport, VerificationReport
    from review_time_travel.output.formatters import get_formatter
    from review_time_travel.repository.git_repository import GitPythonRepository
    from review_time_travel.time_travel.messages import VerificationCompleted
    from review_time_travel.time_travel.navigator import NavigationError, TimeTravelNavigator
    from review_time_travel.time_travel.runner import VerificationRunner
    from review_time_travel.verification.line_mapping import LineMappingVerifier

    config: Config = ctx.obj["config"]
    try:
        document = load_review_document(comments_path)
        base = base or document.base
        head = head or document.head
        if base is None or head is None:
            raise ValueError("--base and --head are required when the comments file has no pull_request range")
        repository = GitPythonRepository.open(repo)
        navigator = TimeTravelNavigator(
            repository,
            LineMappingVerifier(repository, config.verification.search_window),
            config.time_travel.commit_history_limit,
        )
        state = navigator.enter(base, head)
    except (FileNotFoundError, ValueError, RepositoryCapabilityError, NavigationError) as e:
        _fail(e)

    comments = list(document.comments)
    runner = VerificationRunner(navigator.execute)
    passes = []
    request = navigator.request_pass(comments)
    while request is not None:
        outcome = runner.run_inline(request)
        if not navigator.apply(outcome) or not isinstance(outcome, VerificationCompleted):
            _fail(RuntimeError(f"verification at {request.target_commit} failed"))
        passes.append(
            VerificationReport(
                target_commit=outcome.target_commit,
                comments=comments,
                results=dict(outcome.results),
            )
        )
        request = navigator.step_previous(comments)

    report = TravelReport(commits=list(state.commits), comments=comments, passes=passes)
    formatter = get_formatter(output_format)
    _emit(formatter.format_travel(report), output)


@cli.command()
@click.option(
    "--comments",
    "comments_path",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="JSON or YAML file with review comments.",
)
@click.option(
    "--base",
    type=str,
    default=None,
    help="Oldest commit of the range (default: from the comments file).",
)
@click.option(
    "--head",
    type=str,
    default=None,
    help="Newest commit of the range (default: from the comments file).",
)
@click.option(
    "--comment",
    "comment_id",
    type=int,
    default=None,
    help="Comment whose file is shown (default: the first anchored one).",
)
@click.option(
    "--repo",
    type=click.Path(exists=True, path_type=Path),
    default=".",
    help="Path to the local checkout (default: current directory).",
)
@click.pass_context
def review(
    ctx: click.Context,
    comments_path: Path,
    base: Optional[str],
    head: Optional[str],
    comment_id: Optional[int],
    repo: Path,
) -> None:
    """Replay the time-travel view from the newest commit back to the base."""
    from review_time_travel.intake import load_review_document
    from review_time_travel.repository.discovery import discover as discover_repository
    from review_time_travel.session import (
        EnterTimeTravel,
        ReviewSession,
        SelectComment,
        StepBackward,
    )
    from review_time_travel.time_travel.navigator import TimeTravelNavigator
    from review_time_travel.time_travel.runner import VerificationRunner
    from review_time_travel.verification.line_mapping import LineMappingVerifier

    config: Config = ctx.obj["config"]
    try:
        document = load_review_document(comments_path)
        navigator = None
        discovery_error = None
        try:
            local = discover_repository(repo, config.discovery.remote_name)
        except DiscoveryError as e:
            logger.info("Time travel unavailable: %s", e)
            discovery_error = e
        else:
            navigator = TimeTravelNavigator(
                local.repository,
                LineMappingVerifier(local.repository, config.verification.search_window),
                config.time_travel.commit_history_limit,
            )
    except (FileNotFoundError, ValueError) as e:
        _fail(e)

    runner = VerificationRunner(navigator.execute) if navigator is not None else None
    session = ReviewSession(
        document.comments,
        navigator=navigator,
        runner=runner,
        config=config,
        commit_range=document.commit_range,
        context=document.context,
        discovery_error=discovery_error,
    )
    try:
        if comment_id is not None:
            session.update(SelectComment(comment_id))
        session.update(EnterTimeTravel(base, head))
        _show_frame(session)
        while session.time_travel_active and session.navigator.state.can_step_previous:
            session.update(StepBackward())
            _show_frame(session)
    finally:
        if runner is not None:
            runner.shutdown()


def _show_frame(session) -> None:
    if session.runner is not None:
        session.runner.join()
        session.drain()
    _emit(session.view() + "\n", None)


@cli.command()
@click.option(
    "--comments",
    "comments_path",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="JSON or YAML file with review comments.",
)
@click.option(
    "--width",
    "-w",
    type=click.IntRange(min=0),
    default=None,
    help="Display width in cells (default: from configuration).",
)
@click.option(
    "--file",
    "file_path",
    type=str,
    default=None,
    help="Only show hunks for this file.",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["text", "json", "yaml"]),
    default="text",
    help="Output format (default: text).",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    help="Output file path. If not specified, prints to stdout.",
)
@click.pass_context
def hunks(
    ctx: click.Context,
    comments_path: Path,
    width: Optional[int],
    file_path: Optional[str],
    output_format: str,
    output: Optional[Path],
) -> None:
    """Show the diff context captured with each comment."""
    from review_time_travel.diff_context.engine import collect_hunks, render_hunks
    from review_time_travel.intake import load_comments
    from review_time_travel.models.filter import ReviewFilter
    from review_time_travel.output.formatters import get_formatter

    config: Config = ctx.obj["config"]
    try:
        comments = load_comments(comments_path)
    except (FileNotFoundError, ValueError) as e:
        _fail(e)

    review_filter = ReviewFilter.by_file(file_path) if file_path else ReviewFilter.all()
    max_width = config.display.width if width is None else width
    rendered = render_hunks(collect_hunks(comments, review_filter), max_width, config.display.wrap_mode)

    formatter = get_formatter(output_format)
    _emit(formatter.format_hunks(rendered), output)


def main() -> None:
    """Main entry point for the CLI."""
    cli(obj={})
