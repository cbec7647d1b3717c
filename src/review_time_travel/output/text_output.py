"""
Human-readable text output formatter.
"""

from io import StringIO
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from review_time_travel.diff_context.engine import NO_CONTEXT_PLACEHOLDER, render_header
from review_time_travel.models.hunk import RenderedDiffHunk
from review_time_travel.models.report import TravelReport, VerificationReport
from review_time_travel.models.snapshot import LineMappingStatus, LineMappingVerification
from review_time_travel.models.types import short_sha
from review_time_travel.output.formatters import BaseFormatter, register_formatter


@register_formatter("text")
class TextFormatter(BaseFormatter):
    """
    Format output as human-readable text using Rich.
    """

    def __init__(self, colorize: bool = True) -> None:
        """
        Initialize the text formatter.

        Args:
            colorize: Whether to use colors in output.
        """
        self.colorize = colorize

    def _status_style(self, status: LineMappingStatus) -> str:
        """Get the style for a verification status."""
        if not self.colorize:
            return ""

        styles = {
            LineMappingStatus.UNCHANGED: "green",
            LineMappingStatus.MOVED: "cyan",
            LineMappingStatus.MODIFIED: "yellow",
            LineMappingStatus.DELETED: "red",
            LineMappingStatus.FILE_REMOVED: "bold red",
            LineMappingStatus.UNKNOWN: "dim",
        }
        return styles.get(status, "")

    def _cell(self, verification: Optional[LineMappingVerification]) -> str:
        if verification is None:
            return "…"
        symbol = verification.status.symbol
        if verification.status == LineMappingStatus.MOVED:
            symbol = f"{symbol}{verification.new_line_number}"
        style = self._status_style(verification.status)
        return f"[{style}]{symbol}[/{style}]" if style else symbol

    def _console(self, output: StringIO) -> Console:
        return Console(file=output, force_terminal=self.colorize, width=120)

    def format_verification(self, report: VerificationReport) -> str:
        """Format a verification report as text."""
        output = StringIO()
        console = self._console(output)

        console.print()
        console.print(
            Panel.fit(
                "[bold]Review Time Travel[/bold]\n"
                f"Verification at {short_sha(report.target_commit)}",
                border_style="blue",
            )
        )
        console.print()

        if not report.comments:
            console.print("[dim]No review comments.[/dim]")
            return output.getvalue()

        table = Table(show_header=True, header_style="bold")
        table.add_column("Comment", justify="right")
        table.add_column("Location", style="cyan")
        table.add_column("Status")
        table.add_column("Details")

        for comment in report.comments:
            verification = report.result_for(comment)
            location = comment.file_path or "-"
            if comment.anchor_line is not None:
                location = f"{location}:{comment.anchor_line}"
            if verification is None:
                status, details = "…", ""
            else:
                status = self._cell(verification)
                details = verification.display()
            table.add_row(f"#{comment.id}", escape(location), status, escape(details))

        console.print(table)

        counts = report.status_counts()
        if counts:
            summary = ", ".join(f"{status.description}: {count}" for status, count in counts.items())
            console.print(f"\n{summary}")

        return output.getvalue()

    def format_travel(self, report: TravelReport) -> str:
        """Format a travel report as a comment by commit matrix."""
        output = StringIO()
        console = self._console(output)

        if not report.commits:
            console.print("[dim]No commits.[/dim]")
            return output.getvalue()

        table = Table(title="Comment status by commit", show_header=True, header_style="bold")
        table.add_column("Comment", justify="right")
        table.add_column("Location", style="cyan")
        for commit in report.commits:
            table.add_column(short_sha(commit), justify="center")

        for comment in report.comments:
            location = comment.file_path or "-"
            if comment.anchor_line is not None:
                location = f"{location}:{comment.anchor_line}"
            cells = [self._cell(report.status(comment.id, commit)) for commit in report.commits]
            table.add_row(f"#{comment.id}", escape(location), *cells)

        console.print(table)
        legend = "  ".join(f"{status.symbol} {status.description}" for status in LineMappingStatus)
        console.print(f"\n[dim]{legend}[/dim]")

        return output.getvalue()

    def format_hunks(self, hunks: list[RenderedDiffHunk]) -> str:
        """Format rendered hunks one after another."""
        output = StringIO()
        console = self._console(output)

        if not hunks:
            console.print(NO_CONTEXT_PLACEHOLDER, markup=False, highlight=False)
            return output.getvalue()

        for index, rendered in enumerate(hunks):
            header = render_header(rendered.hunk, index, len(hunks))
            console.print(header, style="bold" if self.colorize else None, markup=False, highlight=False)
            for line in rendered.lines:
                console.print(line, style=self._line_style(line), markup=False, highlight=False, soft_wrap=True)
            console.print()

        return output.getvalue()

    def _line_style(self, line: str) -> Optional[str]:
        if not self.colorize:
            return None
        if line.startswith("+"):
            return "green"
        if line.startswith("-"):
            return "red"
        if line.startswith("@@"):
            return "cyan"
        return None
