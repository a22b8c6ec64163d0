"""
Pydantic schemas for the address verification API.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

from shared.constants import MAX_ADDRESS_LENGTH, MAX_NAME_LENGTH, MAX_ORDER_ID_LENGTH


class SessionResponse(BaseModel):
    authenticated: bool
    uid: Optional[str] = None
    is_anonymous: Optional[bool] = None


class CustomerDataResponse(BaseModel):
    order_id: str
    name: str
    address: str


class ViewResponse(BaseModel):
    screen: Literal["customer", "customer_edit", "admin"]
    customer: Optional[CustomerDataResponse] = None


class SubmitRequest(BaseModel):
    order_id: str = Field(..., max_length=MAX_ORDER_ID_LENGTH)
    name: str = Field(..., max_length=MAX_NAME_LENGTH)
    original_address: str = Field(..., max_length=MAX_ADDRESS_LENGTH)
    status: Literal["confirmed", "needs_change"]
    updated_address: Optional[str] = Field(default=None, max_length=MAX_ADDRESS_LENGTH)


class SubmitResponse(BaseModel):
    submitted: bool
    id: Optional[str] = None


class VerificationOut(BaseModel):
    id: str
    orderId: str
    customerName: str
    originalAddress: str
    status: Literal["confirmed", "needs_change"]
    updatedAddress: str = ""
    syncedWithCarrier: bool = False
    createdAt: int


class SummaryOut(BaseModel):
    total: int
    confirmed: int
    needs_change: int
    pending_sync: int


class VerificationListResponse(BaseModel):
    records: list[VerificationOut]
    summary: SummaryOut
    loading: bool


class SyncResponse(BaseModel):
    id: str
    synced: bool


class CustomerLinkResponse(BaseModel):
    url: str
