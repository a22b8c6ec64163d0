"""
HTTP API routes for the address verification service.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import asdict

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import StreamingResponse

from backend.config import get_settings
from backend.dependencies import get_session, get_store_client
from backend.feed import SnapshotFeed
from backend.schemas import (
    CustomerDataResponse,
    CustomerLinkResponse,
    SessionResponse,
    SubmitRequest,
    SubmitResponse,
    SummaryOut,
    SyncResponse,
    VerificationListResponse,
    VerificationOut,
    ViewResponse,
)
from backend.session import SessionBootstrapper
from backend.verifications import VerificationStoreClient, filter_records, summarize
from backend.views import build_customer_link, resolve_view
from shared.constants import (
    EXAMPLE_ADDRESS,
    EXAMPLE_CUSTOMER_NAME,
    EXAMPLE_ORDER_ID,
)
from shared.types import VerificationRecord

router = APIRouter()

STREAM_POLL_SECONDS = 1.0


def _to_out(records: list[VerificationRecord]) -> list[VerificationOut]:
    return [VerificationOut(**record.as_dict()) for record in records]


def customer_link_base(request: Request) -> str:
    settings = get_settings()
    return settings.public_base_url or str(request.base_url)


@router.get("/session", response_model=SessionResponse)
def session_status(session: SessionBootstrapper = Depends(get_session)):
    identity = session.identity
    if identity is None:
        return SessionResponse(authenticated=False)
    return SessionResponse(
        authenticated=True, uid=identity.uid, is_anonymous=identity.is_anonymous
    )


@router.get("/view", response_model=ViewResponse)
def view_state(request: Request):
    state = resolve_view(request.query_params)
    customer = (
        CustomerDataResponse(**state.customer.as_dict()) if state.customer else None
    )
    return ViewResponse(screen=state.screen.value, customer=customer)


@router.post("/verifications", response_model=SubmitResponse)
def submit_verification(
    payload: SubmitRequest,
    client: VerificationStoreClient = Depends(get_store_client),
):
    record_id = client.submit(
        order_id=payload.order_id,
        name=payload.name,
        original_address=payload.original_address,
        status=payload.status,
        updated_address=payload.updated_address,
    )
    return SubmitResponse(submitted=record_id is not None, id=record_id)


@router.get("/verifications", response_model=VerificationListResponse)
def list_verifications(
    q: str | None = Query(None, description="Filter by customer name or order id"),
    client: VerificationStoreClient = Depends(get_store_client),
    session: SessionBootstrapper = Depends(get_session),
):
    records = client.list_records()
    summary = summarize(records)
    return VerificationListResponse(
        records=_to_out(filter_records(records, q)),
        summary=SummaryOut(**asdict(summary)),
        loading=session.identity is None,
    )


@router.post("/verifications/{record_id}/synced", response_model=SyncResponse)
def mark_verification_synced(
    record_id: str,
    client: VerificationStoreClient = Depends(get_store_client),
):
    return SyncResponse(id=record_id, synced=client.mark_synced(record_id))


async def _snapshot_events(request: Request, feed: SnapshotFeed, term: str | None):
    try:
        while not await request.is_disconnected():
            records = await asyncio.to_thread(feed.get, STREAM_POLL_SECONDS)
            if records is None:
                continue
            payload = [
                item.model_dump() for item in _to_out(filter_records(records, term))
            ]
            yield f"data: {json.dumps(payload)}\n\n"
    finally:
        feed.close()


@router.get("/verifications/stream")
def stream_verifications(
    request: Request,
    q: str | None = Query(None),
    client: VerificationStoreClient = Depends(get_store_client),
    session: SessionBootstrapper = Depends(get_session),
):
    """Server-sent events: the full filtered record list on every change."""
    feed = SnapshotFeed(client, session).open()
    return StreamingResponse(
        _snapshot_events(request, feed, q),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )


@router.get("/customer-link", response_model=CustomerLinkResponse)
def customer_link(
    request: Request,
    order_id: str = Query(EXAMPLE_ORDER_ID, alias="orderId"),
    name: str = Query(EXAMPLE_CUSTOMER_NAME),
    address: str = Query(EXAMPLE_ADDRESS),
):
    url = build_customer_link(customer_link_base(request), order_id, name, address)
    return CustomerLinkResponse(url=url)
