from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from ..domain.user_query import Filters, OrderSpec, RetrieveOptions, User, require_page_params
from ..errors import StoreError
from ..logs import LogContext
from ..store import UserStore
from .deps import get_store

logger = logging.getLogger(__name__)

router = APIRouter()

# static messages: storage error details stay in the server log
INSERT_FAILED_MSG = "Failed to insert user"
RETRIEVE_FAILED_MSG = "Failed to retrieve users"


class UserCreate(BaseModel):
    # required-ness is enforced by the table's NOT NULL constraints
    name: Optional[str] = None
    age: Optional[int] = None
    country: Optional[str] = None
    degree: Optional[str] = None
    status: Optional[str] = None
    site: Optional[str] = None


class FiltersIn(BaseModel):
    status: Optional[str] = None
    countries: Optional[List[str]] = None
    age: Optional[int] = None
    degree: Optional[str] = None


class PaginateReq(BaseModel):
    pageSize: Optional[int] = None
    page: Optional[int] = None
    orderBy: Optional[Dict[str, Optional[str]]] = None  # e.g. {"age": "desc", "name": "asc"}
    filters: Optional[FiltersIn] = None


@router.post("/insert")
def api_insert(body: UserCreate, store: UserStore = Depends(get_store)):
    log = LogContext("INSERT_USER")
    payload = body.model_dump()
    log.set_payload(payload)
    try:
        new_id = store.insert(User(**payload))
    except StoreError as e:
        logger.exception("insert user failed")
        log.write(store, "ERROR", str(e))
        raise HTTPException(status_code=500, detail=INSERT_FAILED_MSG)
    log.set_entity("user", str(new_id))
    log.write(store)
    return {"message": "User inserted successfully", "id": new_id}


@router.get("/show", response_class=PlainTextResponse)
def api_show(store: UserStore = Depends(get_store)):
    try:
        users = store.retrieve_all()
    except StoreError:
        logger.exception("show users failed")
        raise HTTPException(status_code=500, detail=RETRIEVE_FAILED_MSG)
    return PlainTextResponse(store.render_table(users))


@router.post("/paginate")
def api_paginate(body: PaginateReq, store: UserStore = Depends(get_store)):
    log = LogContext("PAGINATE_USERS")
    log.set_payload(body.model_dump())
    try:
        page_size, page = require_page_params(body.pageSize, body.page)
        order = OrderSpec.from_mapping(body.orderBy)
        filters = Filters.from_dict(body.filters.model_dump() if body.filters else None)
        users = store.paginate(page_size, page, order, filters)
    except ValueError as ve:
        log.write(store, "REJECTED", str(ve))
        raise HTTPException(status_code=400, detail=str(ve))
    except StoreError as e:
        logger.exception("paginate users failed")
        log.write(store, "ERROR", str(e))
        raise HTTPException(status_code=500, detail=RETRIEVE_FAILED_MSG)
    log.set_after({"count": len(users)})
    log.write(store)
    return {"data": [u.to_dict() for u in users]}


@router.get("/users")
def api_users(
    status: Optional[str] = None,
    country: Optional[List[str]] = Query(None, description="repeatable: ?country=France&country=Spain"),
    age: Optional[int] = None,
    degree: Optional[str] = None,
    order_by: Optional[str] = Query(None, description="id / age / name"),
    order: Optional[str] = Query(None, description="asc / desc"),
    limit: int = 0,
    store: UserStore = Depends(get_store),
):
    filters = Filters.from_dict({"status": status, "countries": country, "age": age, "degree": degree})
    try:
        users = store.retrieve_filtered(filters, RetrieveOptions(order_by=order_by, order=order, limit=limit))
    except ValueError as ve:
        raise HTTPException(status_code=400, detail=str(ve))
    except StoreError:
        logger.exception("filtered users query failed")
        raise HTTPException(status_code=500, detail=RETRIEVE_FAILED_MSG)
    return {"data": [u.to_dict() for u in users]}
