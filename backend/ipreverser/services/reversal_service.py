"""
IP Reverser: Reversal Service (Request Orchestrator)
======================================================

What:  Composes extraction, reversal, and persistence for one request.
Who:   Called by the route handlers in routes/ip.py.

Orchestration Flow (GET /):
    ┌────────────┐    ┌───────────┐    ┌──────────────┐    ┌──────────┐
    │  Extract   │───▶│  Reverse  │───▶│  Store       │───▶│ Response │
    │ (headers)  │    │ (shape)   │    │ (RecordStore)│    │          │
    └────────────┘    └───────────┘    └──────────────┘    └──────────┘

    Extraction never fails. Reversal raises InvalidInputError and storage
    raises StorageError; both propagate unchanged to the route, which owns
    the mapping to HTTP.

ReversalService holds no per-request state: the store it wraps is the
only shared resource.
"""

import logging
from typing import List

from ipreverser.schemas.ip_record import IPRecord, ReverseResponse
from ipreverser.services.ip_service import ConnectionInfo, extract_from, reverse_ip
from ipreverser.services.record_store import DEFAULT_LIST_LIMIT, RecordStore

logger = logging.getLogger(__name__)


class ReversalService:
    """Business logic for the primary and listing endpoints."""

    def __init__(self, store: RecordStore):
        self.store = store

    async def reverse_client_ip(self, connection: ConnectionInfo) -> ReverseResponse:
        """
        Extract → reverse → store → build the response body.

        Raises:
            InvalidInputError: The extracted address is not a dotted quad.
            StorageError: The record could not be persisted.
        """
        client_ip = extract_from(connection)
        logger.info("Extracted client IP: %s", client_ip)

        reversed_ip = reverse_ip(client_ip)
        logger.info("Reversed IP: %s", reversed_ip)

        record = await self.store.store(client_ip, reversed_ip)

        return ReverseResponse(
            original_ip=record.original_ip,
            reversed_ip=record.reversed_ip,
            timestamp=record.created_at,
            message=f"Your IP {record.original_ip} reversed is {record.reversed_ip}",
        )

    async def list_records(self, limit: int = DEFAULT_LIST_LIMIT) -> List[IPRecord]:
        """Recent records exactly as the store returns them."""
        return await self.store.list_recent(limit)
