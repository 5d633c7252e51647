"""
IP Reverser: Pydantic Request/Response Schemas
================================================

What:  Pydantic models defining the API contract and the record copies
       handed out by record stores.
How:   FastAPI serializes these for responses and builds OpenAPI docs from them.

Design Decision:
    IPRecord is separate from the IPRecordRow ORM model. Stores return
    IPRecord copies, so callers never hold a live ORM object tied to a
    session.

    The primary endpoint keeps its historical camelCase keys
    (originalIP, reversedIP) through field aliases; Python code uses
    snake_case names.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ══════════════════════════════════════════════════════════════════════════
# Record Model: what stores return and GET /ips lists
# ══════════════════════════════════════════════════════════════════════════


class IPRecord(BaseModel):
    """
    Immutable copy of one stored record.

    Invariant: reversed_ip is the octet-reverse of original_ip.
    """
    id: int = Field(description="Store-assigned identifier")
    original_ip: str = Field(max_length=15, description="Caller address as extracted")
    reversed_ip: str = Field(max_length=15, description="Octet-reversed address")
    created_at: datetime = Field(description="When the record was stored")

    model_config = ConfigDict(from_attributes=True, frozen=True)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class ReverseResponse(BaseModel):
    """
    What:  Body of GET / on success.

    Example:
        {
            "originalIP": "1.2.3.4",
            "reversedIP": "4.3.2.1",
            "timestamp": "2024-01-15T12:00:00Z",
            "message": "Your IP 1.2.3.4 reversed is 4.3.2.1"
        }
    """
    original_ip: str = Field(alias="originalIP", description="Caller address as extracted")
    reversed_ip: str = Field(alias="reversedIP", description="Octet-reversed address")
    timestamp: datetime = Field(description="Stored timestamp of the record")
    message: str = Field(description="Human-readable summary")

    model_config = ConfigDict(populate_by_name=True)


class HealthResponse(BaseModel):
    """
    Liveness report for GET /health.

    Reports the process only. The store has its own probe at /health/store.
    """
    status: str = Field(default="healthy", description="Always 'healthy' while the process serves")
    timestamp: datetime = Field(description="Server time of the check (UTC)")
    uptime: float = Field(ge=0, description="Seconds since the service started")


class StoreHealthResponse(BaseModel):
    """Readiness report for GET /health/store."""
    status: str = Field(description="healthy or unhealthy")
    database: str = Field(description="connected or disconnected")


# ══════════════════════════════════════════════════════════════════════════
# Error Response Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Error body returned with HTTP 500.

    Never contains exception text, SQL, or stack traces.
    """
    error: str = Field(description="Error summary")
    message: Optional[str] = Field(default=None, description="Human-readable description")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")
