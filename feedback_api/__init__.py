"""Feedback collection API: UI and service-quality feedback forms backed by SQL storage."""

__version__ = "0.1.0"
