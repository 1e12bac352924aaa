from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from ..exceptions import FeedbackNotFoundError
from ..schemas.feedback import ServiceFeedbackCreate, ServiceFeedbackFilters, UIFeedbackCreate
from ..services.feedback_store import FeedbackStore, get_feedback_store
from .errors import internal_error, not_found, validation_failed

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/feedback", tags=["feedback"])

# Both keys must be present for a body to be treated as service feedback.
SERVICE_FEEDBACK_MARKERS = ("serviceDate", "easeOfOrdering")


def is_service_feedback(body: dict[str, Any]) -> bool:
    return all(key in body for key in SERVICE_FEEDBACK_MARKERS)


@router.post("", status_code=201)
async def submit_feedback(
    body: Any = Body(...),
    store: FeedbackStore = Depends(get_feedback_store),
) -> JSONResponse:
    if not isinstance(body, dict):
        return validation_failed(
            [{"loc": ("body",), "msg": "Request body must be an object", "type": "model_type"}]
        )

    service_feedback = is_service_feedback(body)
    payload: BaseModel
    try:
        if service_feedback:
            payload = ServiceFeedbackCreate.model_validate(body)
        else:
            payload = UIFeedbackCreate.model_validate(body)
    except ValidationError as exc:
        logger.info("Feedback submission failed validation: %s", exc.error_count())
        return validation_failed(exc.errors())

    try:
        if service_feedback:
            record = await store.submit_service_feedback(payload)
            message = "Service feedback submitted successfully"
        else:
            record = await store.submit_ui_feedback(payload)
            message = "Feedback submitted successfully"
    except Exception:
        logger.exception("Feedback submission error")
        return internal_error()

    return JSONResponse(status_code=201, content={"message": message, "id": record["id"]})


@router.get("")
async def list_feedback(store: FeedbackStore = Depends(get_feedback_store)) -> Any:
    try:
        ui_feedback, service_feedback = await asyncio.gather(
            store.list_ui_feedback(),
            store.list_service_feedback(),
        )
    except Exception:
        logger.exception("Error fetching feedback")
        return internal_error()
    return {"uiFeedback": ui_feedback, "serviceFeedback": service_feedback}


@router.get("/service")
async def filter_service_feedback(
    search: Optional[str] = Query(default=None),
    service_type: Optional[str] = Query(default=None, alias="serviceType"),
    follow_up: Optional[bool] = Query(default=None, alias="followUp"),
    overall_satisfaction: Optional[int] = Query(default=None, alias="overallSatisfaction", ge=1, le=5),
    date_from: Optional[date] = Query(default=None, alias="dateFrom"),
    date_to: Optional[date] = Query(default=None, alias="dateTo"),
    store: FeedbackStore = Depends(get_feedback_store),
) -> Any:
    filters = ServiceFeedbackFilters(
        search=search,
        service_type=service_type,
        follow_up=follow_up,
        overall_satisfaction=overall_satisfaction,
        date_from=date_from,
        date_to=date_to,
    )
    try:
        records, service_types = await asyncio.gather(
            store.list_service_feedback(filters),
            store.list_service_types(),
        )
    except Exception:
        logger.exception("Error filtering service feedback")
        return internal_error()
    return {
        "serviceFeedback": records,
        "total": len(records),
        "serviceTypes": service_types,
    }


@router.get("/service/{feedback_id}")
async def get_service_feedback(
    feedback_id: str,
    store: FeedbackStore = Depends(get_feedback_store),
) -> Any:
    try:
        return await store.get_service_feedback(feedback_id)
    except FeedbackNotFoundError:
        return not_found("Service feedback not found")
    except Exception:
        logger.exception("Error fetching service feedback %s", feedback_id)
        return internal_error()


@router.get("/ui/{feedback_id}")
async def get_ui_feedback(
    feedback_id: str,
    store: FeedbackStore = Depends(get_feedback_store),
) -> Any:
    try:
        return await store.get_ui_feedback(feedback_id)
    except FeedbackNotFoundError:
        return not_found("UI feedback not found")
    except Exception:
        logger.exception("Error fetching UI feedback %s", feedback_id)
        return internal_error()


__all__ = ["router", "is_service_feedback"]
