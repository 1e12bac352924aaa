from .feedback import FeedbackService
from .feedback_store import FeedbackStore, get_feedback_store

__all__ = ["FeedbackService", "FeedbackStore", "get_feedback_store"]
