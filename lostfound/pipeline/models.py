"""Data models for matching run tracking and reporting."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from lostfound.matching.models import MatchCandidate


@dataclass
class MatchRunResult:
    """
    Outcome of one matching run for a newly posted item.

    Attributes:
        run_id: Unique identifier for the run (also in every log line)
        item_id: Id of the newly posted item
        item_type: "lost" or "found"
        run_started_at: UTC timestamp when the run began
        run_finished_at: UTC timestamp when the run completed
        retrieved_count: Candidates returned by retrieval
        matches: Ranked matches, best first
        notifications_created: In-app notifications written
        notifications_failed: Notification writes that failed
        emails_sent: Match emails delivered
        emails_failed: Match emails that failed
        emails_skipped: Match emails not attempted
        dry_run: Whether dispatch was deliberately skipped
        skipped: Whether the run did nothing (e.g. matching disabled for the campus)
        skip_reason: Why the run was skipped
        error: Message of an unexpected error that ended the run early
    """

    run_id: str
    item_id: str
    item_type: str
    run_started_at: datetime
    run_finished_at: Optional[datetime] = None
    retrieved_count: int = 0
    matches: List[MatchCandidate] = field(default_factory=list)
    notifications_created: int = 0
    notifications_failed: int = 0
    emails_sent: int = 0
    emails_failed: int = 0
    emails_skipped: int = 0
    dry_run: bool = False
    skipped: bool = False
    skip_reason: Optional[str] = None
    error: Optional[str] = None

    @property
    def match_count(self) -> int:
        return len(self.matches)

    @property
    def had_errors(self) -> bool:
        return bool(self.error) or self.notifications_failed > 0 or self.emails_failed > 0

    @property
    def duration_seconds(self) -> float:
        if self.run_finished_at is None:
            return 0.0
        return (self.run_finished_at - self.run_started_at).total_seconds()
