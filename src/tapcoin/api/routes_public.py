# src/tapcoin/api/routes_public.py
from __future__ import annotations

from fastapi import APIRouter

from tapcoin.api.routes_public_parts.accounts import router as accounts_router
from tapcoin.api.routes_public_parts.events import router as events_router
from tapcoin.api.routes_public_parts.gov import router as gov_router
from tapcoin.api.routes_public_parts.health import router as health_router
from tapcoin.api.routes_public_parts.status import router as status_router
from tapcoin.api.routes_public_parts.tx import router as tx_router

public_router = APIRouter()

# Versioned API surface
public_router.include_router(health_router, prefix="/v1", tags=["health"])
public_router.include_router(status_router, prefix="/v1", tags=["status"])
public_router.include_router(accounts_router, prefix="/v1", tags=["accounts"])
public_router.include_router(gov_router, prefix="/v1", tags=["governance"])
public_router.include_router(events_router, prefix="/v1", tags=["events"])
public_router.include_router(tx_router, prefix="/v1", tags=["tx"])
