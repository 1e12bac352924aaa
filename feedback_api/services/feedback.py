from __future__ import annotations

from datetime import datetime, time
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session as DbSession, selectinload

from ..db.models import FeedbackType, ServiceFeedback, UIFeedback
from ..schemas.feedback import ServiceFeedbackCreate, ServiceFeedbackFilters, UIFeedbackCreate

DEFAULT_UI_TITLE = "Untitled Feedback"


def _text_or_none(value: Optional[str]) -> Optional[str]:
    return value or None


class FeedbackService:
    def __init__(self, db: DbSession) -> None:
        self.db = db

    def create_ui_feedback(self, payload: UIFeedbackCreate) -> UIFeedback:
        record = UIFeedback(
            user_name=_text_or_none(payload.user_name),
            user_email=_text_or_none(payload.user_email),
            user_role=_text_or_none(payload.user_role),
            page_url=_text_or_none(payload.page_url),
            component_name=_text_or_none(payload.component_name),
            device_type=payload.device_type,
            browser_info=_text_or_none(payload.browser_info),
            screen_resolution=_text_or_none(payload.screen_resolution),
            feedback_type=payload.feedback_type or FeedbackType.OTHER,
            severity=payload.severity,
            title=payload.title or DEFAULT_UI_TITLE,
            description=payload.description or "",
            steps_to_reproduce=_text_or_none(payload.steps_to_reproduce),
            expected_behavior=_text_or_none(payload.expected_behavior),
            actual_behavior=_text_or_none(payload.actual_behavior),
            usability_rating=payload.usability_rating,
            design_rating=payload.design_rating,
            performance_rating=payload.performance_rating,
            overall_rating=payload.overall_rating,
            tags=list(payload.tags or []),
            priority=payload.priority,
        )
        self.db.add(record)
        self.db.flush()
        return record

    def create_service_feedback(self, payload: ServiceFeedbackCreate) -> ServiceFeedback:
        data = payload.model_dump()
        for key in (
            "customer_name",
            "company_name",
            "contact_info",
            "service_type_other",
            "most_liked",
            "overall_experience",
            "expectations_met",
            "improvement_areas",
            "issues_experienced",
            "would_recommend",
            "additional_services",
            "future_expectations",
            "service_quality_recommendations",
            "preferred_contact_method",
            "preferred_contact_other",
        ):
            data[key] = _text_or_none(data.get(key))
        data["service_type"] = list(data["service_type"])
        record = ServiceFeedback(**data)
        self.db.add(record)
        self.db.flush()
        return record

    def get_ui_feedback(self, feedback_id: str) -> Optional[UIFeedback]:
        return self.db.get(UIFeedback, feedback_id)

    def get_service_feedback(self, feedback_id: str) -> Optional[ServiceFeedback]:
        return self.db.get(ServiceFeedback, feedback_id)

    def list_ui_feedback(self) -> List[UIFeedback]:
        return (
            self.db.query(UIFeedback)
            .options(selectinload(UIFeedback.responses), selectinload(UIFeedback.votes))
            .order_by(UIFeedback.created_at.desc())
            .all()
        )

    def list_service_feedback(self, filters: Optional[ServiceFeedbackFilters] = None) -> List[ServiceFeedback]:
        query = self.db.query(ServiceFeedback)
        if filters is not None:
            if filters.search:
                term = filters.search.lower()
                query = query.filter(
                    or_(
                        func.lower(ServiceFeedback.customer_name).contains(term, autoescape=True),
                        func.lower(ServiceFeedback.company_name).contains(term, autoescape=True),
                        func.lower(ServiceFeedback.contact_info).contains(term, autoescape=True),
                    )
                )
            if filters.follow_up is not None:
                query = query.filter(ServiceFeedback.follow_up_requested == filters.follow_up)
            if filters.overall_satisfaction is not None:
                query = query.filter(ServiceFeedback.overall_satisfaction == filters.overall_satisfaction)
            if filters.date_from is not None:
                query = query.filter(ServiceFeedback.created_at >= datetime.combine(filters.date_from, time.min))
            if filters.date_to is not None:
                query = query.filter(ServiceFeedback.created_at <= datetime.combine(filters.date_to, time.max))

        records = query.order_by(ServiceFeedback.created_at.desc()).all()

        # service_type is a JSON list; membership is checked here to stay dialect-neutral.
        if filters is not None and filters.service_type:
            records = [record for record in records if filters.service_type in (record.service_type or [])]
        return records

    def list_service_types(self) -> List[str]:
        values: set[str] = set()
        for (service_types,) in self.db.query(ServiceFeedback.service_type).all():
            values.update(item for item in service_types or [] if item)
        return sorted(values)


__all__ = ["FeedbackService", "DEFAULT_UI_TITLE"]
