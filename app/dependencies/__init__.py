# app/dependencies/__init__.py

from .permissions import (
    get_current_user,
    get_event_publisher,
    resolve_user_from_token,
)

__all__ = [
    "get_current_user",
    "get_event_publisher",
    "resolve_user_from_token",
]
