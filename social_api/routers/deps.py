"""Request-scoped accessors shared by the routers."""
from __future__ import annotations

from fastapi import Request

from social_api.repositories.json_storage import JsonStorage


def get_storage(request: Request) -> JsonStorage:
    storage = getattr(getattr(request.app, "state", None), "storage", None)
    if not storage:
        raise RuntimeError("JsonStorage not configured")
    return storage
