"""Background execution of matching runs."""

from datetime import timezone
from typing import Callable, Optional
from uuid import uuid4

from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger

from lostfound.config.environment import EnvironmentConfig
from lostfound.config.models import AppConfig, DispatchConfig
from lostfound.domain.models import Item, ItemType
from lostfound.logging import get_logger
from lostfound.utils.timestamps import utc_now

logger = get_logger(__name__, component="scheduler")

MatchRunner = Callable[[Item, ItemType], object]


def database_runner(app_config: AppConfig, env_config: EnvironmentConfig) -> MatchRunner:
    """Runner that executes each run in its own database session."""
    from lostfound.persistence.database import get_session
    from lostfound.pipeline.runner import create_pipeline

    def run(item: Item, item_type: ItemType):
        with get_session() as session:
            return create_pipeline(app_config, env_config, session).run(item, item_type)

    return run


class BackgroundMatchingService:
    """
    Fire-and-forget matching runs on an APScheduler BackgroundScheduler.

    Every submitted item becomes a one-shot job that runs immediately on the
    worker pool. Runs are independent: there is no max_instances coupling
    and no shared state, so two runs for different items proceed in parallel.
    """

    def __init__(
        self,
        runner: MatchRunner,
        dispatch_config: Optional[DispatchConfig] = None,
    ):
        """
        Initialize the background service.

        Args:
            runner: Callable executing one matching run (e.g. database_runner(...))
            dispatch_config: Worker pool size and misfire grace time
        """
        self.runner = runner
        self.dispatch_config = dispatch_config or DispatchConfig()

        self.scheduler = BackgroundScheduler(
            executors={"default": ThreadPoolExecutor(self.dispatch_config.max_workers)},
            job_defaults={
                "coalesce": False,
                "misfire_grace_time": self.dispatch_config.misfire_grace_time,
            },
            timezone=timezone.utc,
        )

    def start(self) -> None:
        """Start the worker pool."""
        self.scheduler.start()
        logger.info(
            f"Background matching started with {self.dispatch_config.max_workers} workers",
            extra={"event": "scheduler.started", "max_workers": self.dispatch_config.max_workers},
        )

    def shutdown(self, wait: bool = True) -> None:
        """
        Stop accepting runs.

        Args:
            wait: If True, wait for in-flight runs to finish before returning
        """
        logger.info(
            "Shutting down background matching",
            extra={"event": "scheduler.stopping", "wait_for_jobs": wait},
        )
        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)
        logger.info("Background matching stopped", extra={"event": "scheduler.stopped"})

    def is_running(self) -> bool:
        return self.scheduler.running

    def submit(self, item: Item, item_type: ItemType) -> Optional[str]:
        """
        Queue a matching run for a newly created item.

        Never raises; the item-creation request must succeed regardless.

        Returns:
            The job id, or None when the run could not be queued
        """
        if not self.scheduler.running:
            logger.error(
                f"Cannot queue matching for item {item.id}: background service is not running",
                extra={"event": "scheduler.submit.failed", "reason": "not_running", "item_id": item.id},
            )
            return None

        job_id = f"match-{item.id}-{uuid4().hex[:8]}"
        try:
            self.scheduler.add_job(
                func=self._run_job,
                trigger=DateTrigger(run_date=utc_now(), timezone=timezone.utc),
                args=[item, ItemType(item_type)],
                id=job_id,
                name=f"Match {item_type} item {item.id}",
            )
        except Exception as e:
            logger.error(
                f"Failed to queue matching for item {item.id}: {e}",
                extra={"event": "scheduler.submit.failed", "item_id": item.id},
                exc_info=True,
            )
            return None

        logger.debug(
            f"Queued matching run {job_id}",
            extra={"event": "scheduler.submitted", "job_id": job_id, "item_id": item.id},
        )
        return job_id

    def _run_job(self, item: Item, item_type: ItemType) -> None:
        try:
            self.runner(item, item_type)
        except Exception as e:
            logger.error(
                f"Background matching run for item {item.id} failed: {e}",
                extra={"event": "scheduler.job.failed", "item_id": item.id, "error_type": type(e).__name__},
                exc_info=True,
            )
