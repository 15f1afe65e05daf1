"""Utility functions."""
from app.utils.retry import backoff_delay

__all__ = ["backoff_delay"]
