"""
IP Reverser: Health Check Routes
==================================

What:  Liveness and store-readiness probes.
Who:   Kubernetes probes, Docker health checks, load balancers.

Probe Split:
    GET /health        Liveness. Answers 200 "healthy" as long as the process
                       serves requests, whatever the database is doing.
    GET /health/store  Readiness of the record store. Runs the store's
                       round-trip check and answers 503 when it fails.
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ipreverser.dependencies import get_record_store
from ipreverser.schemas.ip_record import HealthResponse, StoreHealthResponse
from ipreverser.services.record_store import RecordStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Monotonic so uptime can never go negative when the wall clock moves
_start_time = time.monotonic()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Process liveness",
)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        uptime=round(time.monotonic() - _start_time, 3),
    )


@router.get(
    "/health/store",
    response_model=StoreHealthResponse,
    responses={503: {"description": "Store unreachable", "model": StoreHealthResponse}},
    summary="Record store reachability",
)
async def store_health_check(store: RecordStore = Depends(get_record_store)):
    if await store.health_check():
        return StoreHealthResponse(status="healthy", database="connected")

    logger.warning("Health check: record store unreachable")
    body = StoreHealthResponse(status="unhealthy", database="disconnected")
    return JSONResponse(status_code=503, content=body.model_dump())
