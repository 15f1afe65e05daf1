"""Middleware package for FastAPI application."""

from app.middleware.request_id import RequestIdMiddleware

__all__ = ["RequestIdMiddleware"]
