"""Async access to feedback records for request handlers.

Every public call runs one ``FeedbackService`` operation in its own
transaction on a worker thread and retries it when the store looks
temporarily unreachable. Records are serialized before the session closes.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, TypeVar

from ..config import get_settings
from ..db.database import Database
from ..db.retry import RetryPolicy
from ..db.utils import run_in_transaction
from ..exceptions import FeedbackNotFoundError
from ..schemas.feedback import (
    ServiceFeedbackCreate,
    ServiceFeedbackFilters,
    ServiceFeedbackRead,
    UIFeedbackCreate,
    UIFeedbackRead,
    dump_record,
)
from .feedback import FeedbackService

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FeedbackStore:
    def __init__(self, database: Optional[Database] = None, policy: Optional[RetryPolicy] = None) -> None:
        self.database = database
        self.policy = policy or RetryPolicy.from_settings(get_settings())

    async def _in_transaction(self, operation: Callable[[FeedbackService], T]) -> T:
        return await asyncio.to_thread(
            run_in_transaction,
            lambda db: operation(FeedbackService(db)),
            self.database,
        )

    async def _run(self, operation: Callable[[FeedbackService], T]) -> T:
        return await self.policy.run(self._in_transaction, operation)

    async def submit_ui_feedback(self, payload: UIFeedbackCreate) -> Dict[str, Any]:
        record = await self._run(
            lambda service: dump_record(UIFeedbackRead.model_validate(service.create_ui_feedback(payload)))
        )
        logger.info("Stored UI feedback %s", record["id"])
        return record

    async def submit_service_feedback(self, payload: ServiceFeedbackCreate) -> Dict[str, Any]:
        record = await self._run(
            lambda service: dump_record(ServiceFeedbackRead.model_validate(service.create_service_feedback(payload)))
        )
        logger.info("Stored service feedback %s", record["id"])
        return record

    async def list_ui_feedback(self) -> List[Dict[str, Any]]:
        return await self._run(
            lambda service: [dump_record(UIFeedbackRead.model_validate(item)) for item in service.list_ui_feedback()]
        )

    async def list_service_feedback(self, filters: Optional[ServiceFeedbackFilters] = None) -> List[Dict[str, Any]]:
        return await self._run(
            lambda service: [
                dump_record(ServiceFeedbackRead.model_validate(item))
                for item in service.list_service_feedback(filters)
            ]
        )

    async def list_service_types(self) -> List[str]:
        return await self._run(lambda service: service.list_service_types())

    async def get_ui_feedback(self, feedback_id: str) -> Dict[str, Any]:
        def _get(service: FeedbackService) -> Optional[Dict[str, Any]]:
            record = service.get_ui_feedback(feedback_id)
            return None if record is None else dump_record(UIFeedbackRead.model_validate(record))

        found = await self._run(_get)
        if found is None:
            raise FeedbackNotFoundError("UI", feedback_id)
        return found

    async def get_service_feedback(self, feedback_id: str) -> Dict[str, Any]:
        def _get(service: FeedbackService) -> Optional[Dict[str, Any]]:
            record = service.get_service_feedback(feedback_id)
            return None if record is None else dump_record(ServiceFeedbackRead.model_validate(record))

        found = await self._run(_get)
        if found is None:
            raise FeedbackNotFoundError("Service", feedback_id)
        return found


def get_feedback_store() -> FeedbackStore:
    return FeedbackStore()


__all__ = ["FeedbackStore", "get_feedback_store"]
