"""
FastAPI app entry point for the users pagination service.
Run with `uvicorn userpager.api:app` or `python users_cli.py serve`.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from . import APP_NAME, __version__
from .errors import StoreError
from .logs import setup_logging
from .store import UserStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    try:
        store = UserStore.open()
    except StoreError as e:
        # fatal: the server must not come up without its table
        logger.critical("startup failed: %s", e)
        raise
    app.state.store = store
    try:
        yield
    finally:
        app.state.store = None
        store.close()


app = FastAPI(title=APP_NAME, version=__version__, lifespan=lifespan)


from .routes import base as base_routes
from .routes import users as users_routes
from .routes import logs as logs_routes

app.include_router(base_routes.router)
app.include_router(users_routes.router)
app.include_router(logs_routes.router)
