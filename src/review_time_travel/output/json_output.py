"""
JSON output formatter.
"""

import json
from typing import Any, Optional

from review_time_travel.models.comment import ReviewComment
from review_time_travel.models.hunk import RenderedDiffHunk
from review_time_travel.models.report import TravelReport, VerificationReport
from review_time_travel.models.snapshot import LineMappingVerification
from review_time_travel.output.formatters import BaseFormatter, register_formatter


@register_formatter("json")
class JsonFormatter(BaseFormatter):
    """
    Format output as JSON.
    """

    def __init__(self, indent: int = 2) -> None:
        """
        Initialize the JSON formatter.

        Args:
            indent: JSON indentation level.
        """
        self.indent = indent

    def _verification_to_dict(self, verification: Optional[LineMappingVerification]) -> Optional[dict[str, Any]]:
        if verification is None:
            return None
        snapshot = verification.original_snapshot
        return {
            "status": verification.status.value,
            "original_line": verification.original_line,
            "new_line": verification.new_line_number,
            "offset": verification.offset,
            "original_commit": snapshot.commit if snapshot else None,
            "original_text": snapshot.text if snapshot else None,
            "reason": verification.reason,
        }

    def _comment_to_dict(self, comment: ReviewComment) -> dict[str, Any]:
        return {
            "id": comment.id,
            "author": comment.author,
            "file": comment.file_path,
            "line": comment.anchor_line,
            "commit": comment.commit_sha,
        }

    def format_verification(self, report: VerificationReport) -> str:
        """Format a verification report as JSON."""
        data = {
            "timestamp": report.timestamp.isoformat(),
            "target_commit": report.target_commit,
            "summary": {status.value: count for status, count in report.status_counts().items()},
            "comments": [
                {
                    "comment": self._comment_to_dict(comment),
                    "verification": self._verification_to_dict(report.result_for(comment)),
                }
                for comment in report.comments
            ],
        }

        return self._dump(data)

    def format_travel(self, report: TravelReport) -> str:
        """Format a travel report as JSON."""
        data = {
            "commits": report.commits,
            "comments": [
                {
                    "comment": self._comment_to_dict(comment),
                    "statuses": {
                        commit: self._verification_to_dict(report.status(comment.id, commit))
                        for commit in report.commits
                    },
                }
                for comment in report.comments
            ],
        }

        return self._dump(data)

    def format_hunks(self, hunks: list[RenderedDiffHunk]) -> str:
        """Format rendered hunks as JSON."""
        data = {
            "total": len(hunks),
            "hunks": [
                {
                    "file": rendered.hunk.file,
                    "line": rendered.hunk.anchor_line,
                    "line_range": rendered.hunk.anchor_line_range,
                    "comment_id": rendered.hunk.owning_comment_id,
                    "width": rendered.width,
                    "lines": list(rendered.lines),
                }
                for rendered in hunks
            ],
        }

        return self._dump(data)

    def _dump(self, data: dict[str, Any]) -> str:
        return json.dumps(data, indent=self.indent, default=str)
