"""
Report data models.

Models collecting verification results for output.
"""

from collections import Counter
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from review_time_travel.models.comment import ReviewComment
from review_time_travel.models.snapshot import LineMappingStatus, LineMappingVerification
from review_time_travel.models.types import CommitSha


class VerificationReport(BaseModel):
    """Results of one verification pass against one commit."""

    target_commit: CommitSha = Field(description="Commit the comments were checked against")
    comments: list[ReviewComment] = Field(default_factory=list)
    results: dict[int, LineMappingVerification] = Field(
        default_factory=dict,
        description="Verification per comment id",
    )
    timestamp: datetime = Field(default_factory=datetime.now)

    class Config:
        frozen = True

    def result_for(self, comment: ReviewComment) -> Optional[LineMappingVerification]:
        return self.results.get(comment.id)

    def status_counts(self) -> dict[LineMappingStatus, int]:
        """How many comments ended up in each status."""
        counts = Counter(v.status for v in self.results.values())
        return {status: counts[status] for status in LineMappingStatus if counts[status]}


class TravelReport(BaseModel):
    """Status of every comment at every commit of a range."""

    commits: list[CommitSha] = Field(description="Commits, oldest first")
    comments: list[ReviewComment] = Field(default_factory=list)
    passes: list[VerificationReport] = Field(
        default_factory=list,
        description="One report per commit in the order they were visited",
    )

    class Config:
        frozen = True

    def report_for(self, commit: CommitSha) -> Optional[VerificationReport]:
        for report in self.passes:
            if report.target_commit == commit:
                return report
        return None

    def status(self, comment_id: int, commit: CommitSha) -> Optional[LineMappingVerification]:
        report = self.report_for(commit)
        if report is None:
            return None
        return report.results.get(comment_id)
