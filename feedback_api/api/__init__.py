from .errors import register_exception_handlers
from .feedback import router as feedback_router

__all__ = [
    "feedback_router",
    "register_exception_handlers",
]
