"""Candidate retrieval for the matching engine.

Fetches active opposite-type items from the same campus, newest first. The
storage collaborator is not trusted to apply every filter, so the retriever
re-checks campus, status and poster on whatever comes back.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from lostfound.domain.models import Item, ItemStatus, ItemType
from lostfound.logging import get_logger

logger = get_logger(__name__, component="retriever")

DEFAULT_CANDIDATE_LIMIT = 50


class ItemStore(ABC):
    """Storage collaborator able to query items by criteria."""

    @abstractmethod
    def find_items(
        self,
        item_type: ItemType,
        campus_id: str,
        status: ItemStatus = ItemStatus.ACTIVE,
        exclude_posted_by: Optional[str] = None,
        limit: int = DEFAULT_CANDIDATE_LIMIT,
    ) -> List[Item]:
        """Return items of item_type on campus_id with the given status.

        Results must be ordered by created_at descending and capped at limit.
        Implementations may ignore exclude_posted_by; the retriever filters
        again after the query.
        """


class CandidateRetriever:
    """Fetches plausible opposite-type candidates for a newly posted item."""

    def __init__(
        self,
        store: ItemStore,
        fetch_limit: int = DEFAULT_CANDIDATE_LIMIT,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize CandidateRetriever.

        Args:
            store: Item storage collaborator
            fetch_limit: Maximum number of candidates returned
            logger_instance: Optional logger (defaults to module logger)
        """
        self.store = store
        self.fetch_limit = fetch_limit
        self.logger = logger_instance or logger

    def retrieve(self, new_item: Item, item_type: ItemType) -> List[Item]:
        """Fetch candidates for new_item.

        Args:
            new_item: The newly posted item
            item_type: Type of new_item (candidates are the opposite type)

        Returns:
            Up to fetch_limit items in retrieval (most recent first) order.
            Empty when the new item has no campus or the store fails.
        """
        item_type = ItemType(item_type)
        target_type = item_type.opposite

        if not new_item.campus_id:
            self.logger.warning(
                f"Item {new_item.id} has no campus; skipping candidate retrieval",
                extra={"event": "retrieval.skipped", "reason": "missing_campus"},
            )
            return []

        try:
            fetched = self.store.find_items(
                item_type=target_type,
                campus_id=new_item.campus_id,
                status=ItemStatus.ACTIVE,
                exclude_posted_by=new_item.posted_by,
                limit=self.fetch_limit,
            )
        except Exception as e:
            self.logger.error(
                f"Candidate retrieval failed for item {new_item.id}: {e}",
                extra={
                    "event": "retrieval.failed",
                    "error_type": type(e).__name__,
                    "target_type": target_type.value,
                },
                exc_info=True,
            )
            return []

        candidates = [item for item in (fetched or []) if self._is_eligible(new_item, item)]
        candidates = candidates[: self.fetch_limit]

        dropped = len(fetched or []) - len(candidates)
        self.logger.debug(
            f"Retrieved {len(candidates)} {target_type.value} candidates",
            extra={
                "event": "retrieval.completed",
                "target_type": target_type.value,
                "candidate_count": len(candidates),
                "dropped_count": max(dropped, 0),
            },
        )
        return candidates

    @staticmethod
    def _is_eligible(new_item: Item, candidate: Item) -> bool:
        if candidate.id == new_item.id:
            return False
        if candidate.campus_id != new_item.campus_id:
            return False
        if not candidate.is_active:
            return False
        if new_item.posted_by is not None and candidate.posted_by == new_item.posted_by:
            return False
        return True
