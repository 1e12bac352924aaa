from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StrictInt, field_validator
from pydantic.alias_generators import to_camel

from ..db.models import DeviceType, FeedbackType, Priority, Severity

# JSON numbers only; "3" and true are rejected rather than coerced.
Rating = Annotated[StrictInt, Field(ge=1, le=5)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UIFeedbackCreate(CamelModel):
    # User information
    user_name: Optional[str] = None
    user_email: Optional[Union[EmailStr, Literal[""]]] = None
    user_role: Optional[str] = None

    # Feedback context
    page_url: Optional[str] = None
    component_name: Optional[str] = None
    device_type: Optional[DeviceType] = None
    browser_info: Optional[str] = None
    screen_resolution: Optional[str] = None

    # Feedback content
    feedback_type: Optional[FeedbackType] = None
    severity: Optional[Severity] = None
    title: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    steps_to_reproduce: Optional[str] = None
    expected_behavior: Optional[str] = None
    actual_behavior: Optional[str] = None

    usability_rating: Optional[Rating] = None
    design_rating: Optional[Rating] = None
    performance_rating: Optional[Rating] = None
    overall_rating: Optional[Rating] = None

    tags: Optional[List[str]] = None
    priority: Optional[Priority] = None


class ServiceFeedbackCreate(CamelModel):
    # Section 1: customer information
    customer_name: Optional[str] = None
    company_name: Optional[str] = None
    contact_info: Optional[str] = None
    service_date: str = Field(min_length=1)
    service_type: List[str] = Field(min_length=1)
    service_type_other: Optional[str] = None

    # Section 2: service quality ratings
    ease_of_ordering: Rating
    order_processing_accuracy: Rating
    order_channel_knowledge: Rating
    service_timeliness: Rating
    order_accuracy: Rating
    product_quality: Rating
    quantity_accuracy: Rating
    staff_professionalism: Rating
    responsiveness: Rating
    overall_satisfaction: Rating
    price_competitiveness: Rating
    stock_availability: Rating
    technical_instruction: Rating

    # Section 3: open-ended questions
    most_liked: Optional[str] = None
    overall_experience: Optional[str] = None
    expectations_met: Optional[str] = None
    improvement_areas: Optional[str] = None
    issues_experienced: Optional[str] = None
    would_recommend: Optional[str] = None

    # Section 4: future expectations
    additional_services: Optional[str] = None
    future_expectations: Optional[str] = None
    service_quality_recommendations: Optional[str] = None

    # Section 5: follow-up
    follow_up_requested: bool = False
    preferred_contact_method: Optional[str] = None
    preferred_contact_other: Optional[str] = None


class UIFeedbackResponseRead(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    feedback_id: str
    responder_name: Optional[str] = None
    message: str
    created_at: datetime


class UIFeedbackVoteRead(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    feedback_id: str
    voter_id: Optional[str] = None
    value: int
    created_at: datetime


class UIFeedbackRead(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    user_role: Optional[str] = None
    page_url: Optional[str] = None
    component_name: Optional[str] = None
    device_type: Optional[DeviceType] = None
    browser_info: Optional[str] = None
    screen_resolution: Optional[str] = None
    feedback_type: FeedbackType
    severity: Optional[Severity] = None
    title: str
    description: str
    steps_to_reproduce: Optional[str] = None
    expected_behavior: Optional[str] = None
    actual_behavior: Optional[str] = None
    usability_rating: Optional[int] = None
    design_rating: Optional[int] = None
    performance_rating: Optional[int] = None
    overall_rating: Optional[int] = None
    tags: List[str] = Field(default_factory=list)
    priority: Optional[Priority] = None
    created_at: datetime
    updated_at: datetime
    responses: List[UIFeedbackResponseRead] = Field(default_factory=list)
    votes: List[UIFeedbackVoteRead] = Field(default_factory=list)


class ServiceFeedbackRead(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    customer_name: Optional[str] = None
    company_name: Optional[str] = None
    contact_info: Optional[str] = None
    service_date: str
    service_type: List[str] = Field(default_factory=list)
    service_type_other: Optional[str] = None
    ease_of_ordering: int
    order_processing_accuracy: int
    order_channel_knowledge: int
    service_timeliness: int
    order_accuracy: int
    product_quality: int
    quantity_accuracy: int
    staff_professionalism: int
    responsiveness: int
    overall_satisfaction: int
    price_competitiveness: int
    stock_availability: int
    technical_instruction: int
    most_liked: Optional[str] = None
    overall_experience: Optional[str] = None
    expectations_met: Optional[str] = None
    improvement_areas: Optional[str] = None
    issues_experienced: Optional[str] = None
    would_recommend: Optional[str] = None
    additional_services: Optional[str] = None
    future_expectations: Optional[str] = None
    service_quality_recommendations: Optional[str] = None
    follow_up_requested: bool
    preferred_contact_method: Optional[str] = None
    preferred_contact_other: Optional[str] = None
    submission_date: datetime
    created_at: datetime
    updated_at: datetime


class ServiceFeedbackFilters(CamelModel):
    """Admin-view filters over service feedback. Unset fields do not filter."""

    search: Optional[str] = None
    service_type: Optional[str] = None
    follow_up: Optional[bool] = None
    overall_satisfaction: Optional[Rating] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    @field_validator("search")
    @classmethod
    def strip_search(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None

    @field_validator("service_type")
    @classmethod
    def normalize_service_type(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        # "all" is the admin view's select-everything option
        if not value or value.lower() == "all":
            return None
        return value

    @property
    def is_active(self) -> bool:
        return any(value is not None for value in self.model_dump().values())


def dump_record(model: BaseModel) -> Dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True)


__all__ = [
    "Rating",
    "CamelModel",
    "UIFeedbackCreate",
    "ServiceFeedbackCreate",
    "UIFeedbackResponseRead",
    "UIFeedbackVoteRead",
    "UIFeedbackRead",
    "ServiceFeedbackRead",
    "ServiceFeedbackFilters",
    "dump_record",
]
