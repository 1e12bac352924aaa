from __future__ import annotations

from uuid import uuid4


def new_trace_id() -> str:
    return uuid4().hex


class TrackedError(Exception):
    def __init__(self, message: str, *, error_type: str, trace_id: str | None = None) -> None:
        self.error_type = error_type
        self.trace_id = trace_id or new_trace_id()
        super().__init__(message)


class TransientStoreError(TrackedError):
    """The data store is temporarily unreachable; the call may be retried."""

    def __init__(self, message: str, *, trace_id: str | None = None) -> None:
        super().__init__(message, error_type="transient_store", trace_id=trace_id)


class FeedbackNotFoundError(TrackedError):
    def __init__(self, kind: str, feedback_id: str, *, trace_id: str | None = None) -> None:
        self.kind = kind
        self.feedback_id = feedback_id
        super().__init__(f"{kind} feedback {feedback_id} not found", error_type="not_found", trace_id=trace_id)


__all__ = [
    "new_trace_id",
    "TrackedError",
    "TransientStoreError",
    "FeedbackNotFoundError",
]
