from .feedback import (
    ServiceFeedbackCreate,
    ServiceFeedbackFilters,
    ServiceFeedbackRead,
    UIFeedbackCreate,
    UIFeedbackRead,
    UIFeedbackResponseRead,
    UIFeedbackVoteRead,
    dump_record,
)

__all__ = [
    "ServiceFeedbackCreate",
    "ServiceFeedbackFilters",
    "ServiceFeedbackRead",
    "UIFeedbackCreate",
    "UIFeedbackRead",
    "UIFeedbackResponseRead",
    "UIFeedbackVoteRead",
    "dump_record",
]
