from .database import Database, get_database, reset_database
from .migrations import init_db, ping
from .models import (
    DeviceType,
    FeedbackType,
    Priority,
    ServiceFeedback,
    Severity,
    UIFeedback,
    UIFeedbackResponse,
    UIFeedbackVote,
)
from .retry import AttemptOutcome, AttemptStatus, RetryPolicy, is_transient_error, with_retry
from .utils import get_db, run_in_transaction, transaction_scope

__all__ = [
    "Database",
    "get_database",
    "reset_database",
    "init_db",
    "ping",
    "DeviceType",
    "FeedbackType",
    "Priority",
    "Severity",
    "ServiceFeedback",
    "UIFeedback",
    "UIFeedbackResponse",
    "UIFeedbackVote",
    "AttemptOutcome",
    "AttemptStatus",
    "RetryPolicy",
    "is_transient_error",
    "with_retry",
    "get_db",
    "run_in_transaction",
    "transaction_scope",
]
