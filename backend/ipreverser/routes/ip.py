"""
IP Reverser: IP Route Handlers
================================

What:  GET / (reverse and store the caller's IP) and GET /ips (recent records).
How:   Builds a ConnectionInfo from the request, delegates to ReversalService,
       and maps any application error to an opaque HTTP 500.

Error Mapping:
    InvalidInputError, StorageError  → 500, fixed body, detail logged only
    anything else                    → global handler in main.py (500)
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from ipreverser.dependencies import get_reversal_service
from ipreverser.exceptions import IPReverserError
from ipreverser.middleware.request_id import request_id_var
from ipreverser.schemas.ip_record import ErrorResponse, IPRecord, ReverseResponse
from ipreverser.services.ip_service import ConnectionInfo
from ipreverser.services.record_store import DEFAULT_LIST_LIMIT
from ipreverser.services.reversal_service import ReversalService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["IP"])


def _error_response(error: str, message: str | None = None) -> JSONResponse:
    body = ErrorResponse(error=error, message=message)
    return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))


@router.get(
    "/",
    response_model=ReverseResponse,
    responses={500: {"description": "Processing failed", "model": ErrorResponse}},
    summary="Reverse the caller's IP address",
    description=(
        "Determines the caller's IPv4 address from X-Forwarded-For, X-Real-IP, "
        "X-Client-IP, or the connection itself, reverses its octets, stores the "
        "pair, and returns both."
    ),
)
async def reverse_caller_ip(
    request: Request,
    service: ReversalService = Depends(get_reversal_service),
):
    try:
        return await service.reverse_client_ip(ConnectionInfo.from_request(request))
    except IPReverserError as e:
        logger.error(
            "[%s] Error processing request: %s | Context: %s",
            request_id_var.get(""),
            e.message,
            e.context,
        )
        return _error_response("Internal server error", "Failed to process IP address")


@router.get(
    "/ips",
    response_model=List[IPRecord],
    responses={500: {"description": "Store unavailable", "model": ErrorResponse}},
    summary="List recently stored records",
    description="Returns stored records, most recent first.",
)
async def list_ips(
    limit: int = Query(
        default=DEFAULT_LIST_LIMIT, ge=1, le=1000,
        description="Maximum number of records to return",
    ),
    service: ReversalService = Depends(get_reversal_service),
):
    try:
        return await service.list_records(limit)
    except IPReverserError as e:
        logger.error(
            "[%s] Error fetching records: %s | Context: %s",
            request_id_var.get(""),
            e.message,
            e.context,
        )
        return _error_response("Failed to fetch records")
