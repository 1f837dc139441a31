"""FastAPI dependency injection — sandbox configuration."""

from __future__ import annotations

from fastapi import Request

from restfiles.config import RootContext


def get_root_context(request: Request) -> RootContext:
    """The RootContext built once at application startup."""
    return request.app.state.root_context
