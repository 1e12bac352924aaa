from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from .base import Base


def _new_id() -> str:
    return uuid.uuid4().hex


class DeviceType(str, enum.Enum):
    DESKTOP = "DESKTOP"
    MOBILE = "MOBILE"
    TABLET = "TABLET"


class FeedbackType(str, enum.Enum):
    BUG = "BUG"
    FEATURE_REQUEST = "FEATURE_REQUEST"
    IMPROVEMENT = "IMPROVEMENT"
    COMPLIMENT = "COMPLIMENT"
    QUESTION = "QUESTION"
    ACCESSIBILITY = "ACCESSIBILITY"
    PERFORMANCE = "PERFORMANCE"
    DESIGN = "DESIGN"
    USABILITY = "USABILITY"
    OTHER = "OTHER"


class Severity(str, enum.Enum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class Priority(str, enum.Enum):
    URGENT = "URGENT"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


def _enum_column(enum_cls: type[enum.Enum], name: str) -> SAEnum:
    return SAEnum(
        enum_cls,
        name=name,
        native_enum=False,
        values_callable=lambda members: [member.value for member in members],
    )


class UIFeedback(Base):
    __tablename__ = "ui_feedback"

    id = Column(String, primary_key=True, default=_new_id)

    user_name = Column(String)
    user_email = Column(String)
    user_role = Column(String)

    page_url = Column(String)
    component_name = Column(String)
    device_type = Column(_enum_column(DeviceType, "device_type"))
    browser_info = Column(String)
    screen_resolution = Column(String)

    feedback_type = Column(_enum_column(FeedbackType, "feedback_type"), nullable=False, default=FeedbackType.OTHER)
    severity = Column(_enum_column(Severity, "severity"))
    title = Column(String(100), nullable=False, default="Untitled Feedback")
    description = Column(Text, nullable=False, default="")
    steps_to_reproduce = Column(Text)
    expected_behavior = Column(Text)
    actual_behavior = Column(Text)

    usability_rating = Column(Integer)
    design_rating = Column(Integer)
    performance_rating = Column(Integer)
    overall_rating = Column(Integer)

    tags = Column(JSON, nullable=False, default=list)
    priority = Column(_enum_column(Priority, "priority"))

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    responses = relationship(
        "UIFeedbackResponse",
        back_populates="feedback",
        cascade="all, delete-orphan",
        order_by="UIFeedbackResponse.created_at",
    )
    votes = relationship(
        "UIFeedbackVote",
        back_populates="feedback",
        cascade="all, delete-orphan",
        order_by="UIFeedbackVote.created_at",
    )

    __table_args__ = (Index("ix_ui_feedback_created_at", "created_at"),)


class UIFeedbackResponse(Base):
    __tablename__ = "ui_feedback_responses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    feedback_id = Column(String, ForeignKey("ui_feedback.id", ondelete="CASCADE"), nullable=False)
    responder_name = Column(String)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    feedback = relationship("UIFeedback", back_populates="responses")


class UIFeedbackVote(Base):
    __tablename__ = "ui_feedback_votes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    feedback_id = Column(String, ForeignKey("ui_feedback.id", ondelete="CASCADE"), nullable=False)
    voter_id = Column(String)
    # +1 upvote, -1 downvote
    value = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    feedback = relationship("UIFeedback", back_populates="votes")


class ServiceFeedback(Base):
    __tablename__ = "service_feedback"

    id = Column(String, primary_key=True, default=_new_id)

    # Section 1: customer information
    customer_name = Column(String)
    company_name = Column(String)
    contact_info = Column(String)
    service_date = Column(String, nullable=False)
    service_type = Column(JSON, nullable=False, default=list)
    service_type_other = Column(String)

    # Section 2: service quality ratings (1-5)
    ease_of_ordering = Column(Integer, nullable=False)
    order_processing_accuracy = Column(Integer, nullable=False)
    order_channel_knowledge = Column(Integer, nullable=False)
    service_timeliness = Column(Integer, nullable=False)
    order_accuracy = Column(Integer, nullable=False)
    product_quality = Column(Integer, nullable=False)
    quantity_accuracy = Column(Integer, nullable=False)
    staff_professionalism = Column(Integer, nullable=False)
    responsiveness = Column(Integer, nullable=False)
    overall_satisfaction = Column(Integer, nullable=False)
    price_competitiveness = Column(Integer, nullable=False)
    stock_availability = Column(Integer, nullable=False)
    technical_instruction = Column(Integer, nullable=False)

    # Section 3: open-ended questions
    most_liked = Column(Text)
    overall_experience = Column(Text)
    expectations_met = Column(Text)
    improvement_areas = Column(Text)
    issues_experienced = Column(Text)
    would_recommend = Column(Text)

    # Section 4: future expectations
    additional_services = Column(Text)
    future_expectations = Column(Text)
    service_quality_recommendations = Column(Text)

    # Section 5: follow-up
    follow_up_requested = Column(Boolean, nullable=False, default=False)
    preferred_contact_method = Column(String)
    preferred_contact_other = Column(String)

    submission_date = Column(DateTime, default=datetime.utcnow, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("ix_service_feedback_created_at", "created_at"),
        Index("ix_service_feedback_overall_satisfaction", "overall_satisfaction"),
    )


__all__ = [
    "DeviceType",
    "FeedbackType",
    "Severity",
    "Priority",
    "UIFeedback",
    "UIFeedbackResponse",
    "UIFeedbackVote",
    "ServiceFeedback",
]
