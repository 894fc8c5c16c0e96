from __future__ import annotations

from fastapi import HTTPException, Request

from ..store import UserStore


def get_store(request: Request) -> UserStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status_code=503, detail="store not ready")
    return store
