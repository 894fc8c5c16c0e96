from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from ..logs import search_logs
from ..store import UserStore
from .deps import get_store

router = APIRouter()


@router.get("/api/logs/search")
def api_logs_search(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=500),
    action: str | None = None,
    query: str | None = None,
    store: UserStore = Depends(get_store),
):
    with store.connection() as conn:
        total, items = search_logs(conn, query, action, page, size)
    return {"total": total, "items": items}
