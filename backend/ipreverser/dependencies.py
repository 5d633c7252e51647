"""
FastAPI dependencies shared by the routers.

The record store is created by the app factory and parked on `app.state`,
so tests can build an app around an InMemoryRecordStore without patching.
"""

from fastapi import Depends, Request

from ipreverser.services.record_store import RecordStore
from ipreverser.services.reversal_service import ReversalService


def get_record_store(request: Request) -> RecordStore:
    return request.app.state.record_store


def get_reversal_service(store: RecordStore = Depends(get_record_store)) -> ReversalService:
    return ReversalService(store)
