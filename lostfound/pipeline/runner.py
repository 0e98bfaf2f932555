"""Matching run orchestration: retrieve, score, rank, dispatch."""

from typing import List, Optional
from uuid import uuid4

from sqlalchemy.orm import Session

from lostfound.config.environment import EnvironmentConfig
from lostfound.config.models import AppConfig, MatchingConfig
from lostfound.domain.models import Item, ItemType
from lostfound.logging import get_logger
from lostfound.logging.context import log_context
from lostfound.matching.models import MatchCandidate
from lostfound.matching.ranker import MatchRanker
from lostfound.matching.retriever import CandidateRetriever, ItemStore
from lostfound.matching.scorer import SimilarityScorer
from lostfound.notifications.base import MatchEmailSender, NotificationStore, UserDirectory
from lostfound.notifications.dispatcher import NotificationDispatcher
from lostfound.notifications.email_service import MatchEmailService
from lostfound.persistence.repositories import (
    ItemRepository,
    NotificationRepository,
    UserRepository,
)
from lostfound.utils.timestamps import utc_now

from .models import MatchRunResult

logger = get_logger(__name__, component="pipeline")


class MatchingPipeline:
    """
    Runs the matching engine for one newly posted item.

    Retrieval and dispatch are injected collaborators. The scorer and
    ranker are built per run because the recency window may differ per
    campus. A run never raises: failures are logged and reflected in the
    returned MatchRunResult.
    """

    def __init__(
        self,
        matching_config: MatchingConfig,
        retriever: CandidateRetriever,
        dispatcher: Optional[NotificationDispatcher] = None,
    ):
        """
        Initialize the matching pipeline.

        Args:
            matching_config: Thresholds, limits, weights and campus overrides
            retriever: Candidate retriever bound to an item store
            dispatcher: Notification dispatcher (None ranks without notifying)
        """
        self.matching_config = matching_config
        self.retriever = retriever
        self.dispatcher = dispatcher

    def build_ranker(self, campus_id: Optional[str]) -> MatchRanker:
        """Scorer and ranker configured for a campus."""
        scorer = SimilarityScorer(
            weights=self.matching_config.weights,
            recency_window_seconds=self.matching_config.recency_window_for(campus_id),
            distance_radius_meters=self.matching_config.distance_radius_meters,
        )
        return MatchRanker(
            scorer,
            notify_threshold=self.matching_config.notify_threshold,
            top_n=self.matching_config.top_n,
        )

    def run(self, new_item: Item, item_type: ItemType, dry_run: bool = False) -> MatchRunResult:
        """
        Match a newly posted item and notify both parties of every match.

        Args:
            new_item: The item that was just created
            item_type: Whether new_item is lost or found
            dry_run: Rank only, create no notifications and send no email

        Returns:
            MatchRunResult with the ranked matches and dispatch counts
        """
        item_type = ItemType(item_type)
        result = MatchRunResult(
            run_id=uuid4().hex,
            item_id=new_item.id,
            item_type=item_type.value,
            run_started_at=utc_now(),
            dry_run=dry_run,
        )

        with log_context(
            run_id=result.run_id,
            item_id=new_item.id,
            item_type=item_type.value,
            campus_id=new_item.campus_id,
        ):
            logger.info(
                f"Matching run started for {item_type.value} item {new_item.id}",
                extra={"event": "matching.run.started", "dry_run": dry_run},
            )

            try:
                self._run(new_item, item_type, result)
            except Exception as e:
                result.error = str(e)
                logger.error(
                    f"Matching run failed for item {new_item.id}: {e}",
                    extra={"event": "matching.run.failed", "error_type": type(e).__name__},
                    exc_info=True,
                )

            result.run_finished_at = utc_now()
            logger.info(
                f"Matching run completed: {result.match_count} matches from "
                f"{result.retrieved_count} candidates, "
                f"{result.notifications_created} notifications, {result.emails_sent} emails",
                extra={
                    "event": "matching.run.completed",
                    "duration_ms": int(result.duration_seconds * 1000),
                    "retrieved_count": result.retrieved_count,
                    "match_count": result.match_count,
                    "top_score": result.matches[0].score if result.matches else None,
                    "notifications_created": result.notifications_created,
                    "notifications_failed": result.notifications_failed,
                    "emails_sent": result.emails_sent,
                    "emails_failed": result.emails_failed,
                    "emails_skipped": result.emails_skipped,
                    "skipped": result.skipped,
                    "had_errors": result.had_errors,
                },
            )

        return result

    def _run(self, new_item: Item, item_type: ItemType, result: MatchRunResult) -> None:
        if not self.matching_config.is_enabled_for(new_item.campus_id):
            result.skipped = True
            result.skip_reason = "auto_match_disabled"
            logger.info(
                f"Automatic matching disabled for campus {new_item.campus_id}",
                extra={"event": "matching.run.skipped", "reason": result.skip_reason},
            )
            return

        candidates = self.retriever.retrieve(new_item, item_type)
        result.retrieved_count = len(candidates)
        if not candidates:
            return

        result.matches = self.build_ranker(new_item.campus_id).rank(new_item, candidates)
        if not result.matches or result.dry_run:
            return

        if self.dispatcher is None:
            logger.debug("No dispatcher configured; matches are not notified")
            return

        dispatch = self.dispatcher.dispatch(new_item, item_type, result.matches)
        result.notifications_created = dispatch.notifications_created
        result.notifications_failed = dispatch.notifications_failed
        result.emails_sent = dispatch.emails_sent
        result.emails_failed = dispatch.emails_failed
        result.emails_skipped = dispatch.emails_skipped


def run_matching(
    new_item: Item,
    item_type: ItemType,
    item_store: ItemStore,
    notification_store: NotificationStore,
    email_sender: Optional[MatchEmailSender] = None,
    user_directory: Optional[UserDirectory] = None,
    matching_config: Optional[MatchingConfig] = None,
) -> List[MatchCandidate]:
    """
    Run matching for one item with explicit collaborators.

    Returns:
        The ranked matches (empty when nothing qualifies or the run failed)
    """
    matching_config = matching_config or MatchingConfig()
    pipeline = MatchingPipeline(
        matching_config=matching_config,
        retriever=CandidateRetriever(item_store, fetch_limit=matching_config.candidate_limit),
        dispatcher=NotificationDispatcher(
            notification_store,
            email_sender=email_sender,
            user_directory=user_directory,
            email_threshold=matching_config.email_threshold,
        ),
    )
    return pipeline.run(new_item, item_type).matches


def create_pipeline(
    app_config: AppConfig,
    env_config: EnvironmentConfig,
    session: Session,
    email_sender: Optional[MatchEmailSender] = None,
) -> MatchingPipeline:
    """
    Build a pipeline wired to the SQLAlchemy repositories of a session.

    Email goes through MatchEmailService unless another sender is given;
    when SMTP is not configured or email is disabled, no sender is wired
    and match emails are counted as skipped.
    """
    if email_sender is None:
        service = MatchEmailService(env_config, app_config.email)
        email_sender = service if service.is_available else None

    matching = app_config.matching
    return MatchingPipeline(
        matching_config=matching,
        retriever=CandidateRetriever(
            ItemRepository(session), fetch_limit=matching.candidate_limit
        ),
        dispatcher=NotificationDispatcher(
            NotificationRepository(session),
            email_sender=email_sender,
            user_directory=UserRepository(session),
            email_threshold=matching.email_threshold,
        ),
    )
