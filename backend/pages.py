"""
HTML routes: the customer confirmation flow and the admin dashboard.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from backend.dependencies import get_admin_feed, get_store_client
from backend.feed import SnapshotFeed
from backend.rendering import render_admin, render_customer
from backend.routes import customer_link_base
from backend.verifications import VerificationStoreClient, filter_records, summarize
from backend.views import (
    CustomerData,
    Screen,
    ViewState,
    back_to_confirm,
    build_customer_link,
    can_submit_update,
    mark_submitted,
    resolve_view,
    start_edit,
)
from shared.constants import (
    DEFAULT_ADDRESS,
    DEFAULT_CUSTOMER_NAME,
    DEFAULT_ORDER_ID,
    EXAMPLE_ADDRESS,
    EXAMPLE_CUSTOMER_NAME,
    EXAMPLE_ORDER_ID,
    MAX_ADDRESS_LENGTH,
    MAX_NAME_LENGTH,
    MAX_ORDER_ID_LENGTH,
)
from shared.types import VerificationStatus

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
def index(
    request: Request,
    q: str = "",
    feed: SnapshotFeed = Depends(get_admin_feed),
):
    state = resolve_view(request.query_params)
    if state.is_customer:
        return HTMLResponse(render_customer(state))

    records = feed.latest
    link = build_customer_link(
        customer_link_base(request),
        EXAMPLE_ORDER_ID,
        EXAMPLE_CUSTOMER_NAME,
        EXAMPLE_ADDRESS,
    )
    return HTMLResponse(
        render_admin(
            filter_records(records, q),
            summarize(records),
            search_term=q,
            loading=feed.loading,
            customer_link=link,
        )
    )


@router.post("/customer", response_class=HTMLResponse)
def customer_action(
    action: str = Form(...),
    order_id: str = Form("", max_length=MAX_ORDER_ID_LENGTH),
    name: str = Form("", max_length=MAX_NAME_LENGTH),
    address: str = Form("", max_length=MAX_ADDRESS_LENGTH),
    updated_address: str = Form("", max_length=MAX_ADDRESS_LENGTH),
    client: VerificationStoreClient = Depends(get_store_client),
):
    state = ViewState(
        screen=Screen.CUSTOMER_CONFIRM,
        customer=CustomerData(
            order_id=order_id or DEFAULT_ORDER_ID,
            name=name or DEFAULT_CUSTOMER_NAME,
            address=address or DEFAULT_ADDRESS,
        ),
    )
    customer = state.customer

    if action == "edit":
        return HTMLResponse(render_customer(start_edit(state)))
    if action == "back":
        return HTMLResponse(render_customer(back_to_confirm(state)))
    if action == "confirm":
        record_id = client.submit(
            customer.order_id,
            customer.name,
            customer.address,
            VerificationStatus.CONFIRMED,
        )
        if record_id:
            state = mark_submitted(state)
        return HTMLResponse(render_customer(state))
    if action == "update":
        state = start_edit(state)
        if can_submit_update(updated_address):
            record_id = client.submit(
                customer.order_id,
                customer.name,
                customer.address,
                VerificationStatus.NEEDS_CHANGE,
                updated_address,
            )
            if record_id:
                state = mark_submitted(state)
        return HTMLResponse(render_customer(state, updated_address=updated_address))
    raise HTTPException(status_code=400, detail=f"Unknown action: {action}")


@router.post("/admin/verifications/{record_id}/synced")
def admin_mark_synced(
    record_id: str,
    client: VerificationStoreClient = Depends(get_store_client),
):
    client.mark_synced(record_id)
    return RedirectResponse("/", status_code=303)
