"""
View routing: which screen to render, derived from URL query parameters.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Mapping, Optional
from urllib.parse import urlencode

from shared.constants import (
    ADDRESS_PARAM,
    CUSTOMER_VIEW,
    DEFAULT_ADDRESS,
    DEFAULT_CUSTOMER_NAME,
    DEFAULT_ORDER_ID,
    MIN_UPDATED_ADDRESS_LENGTH,
    NAME_PARAM,
    ORDER_ID_PARAM,
    VIEW_PARAM,
)


class Screen(Enum):
    CUSTOMER_CONFIRM = "customer"
    CUSTOMER_EDIT = "customer_edit"
    ADMIN = "admin"


@dataclass(frozen=True)
class CustomerData:
    order_id: str = DEFAULT_ORDER_ID
    name: str = DEFAULT_CUSTOMER_NAME
    address: str = DEFAULT_ADDRESS

    def as_dict(self) -> dict:
        return {"order_id": self.order_id, "name": self.name, "address": self.address}


@dataclass(frozen=True)
class ViewState:
    screen: Screen
    customer: Optional[CustomerData] = None
    submitted: bool = False

    @property
    def is_customer(self) -> bool:
        return self.screen in (Screen.CUSTOMER_CONFIRM, Screen.CUSTOMER_EDIT)


def resolve_view(params: Mapping[str, str]) -> ViewState:
    """Customer confirmation when `view=customer`, the admin dashboard otherwise."""
    if params.get(VIEW_PARAM) != CUSTOMER_VIEW:
        return ViewState(screen=Screen.ADMIN)
    customer = CustomerData(
        order_id=params.get(ORDER_ID_PARAM) or DEFAULT_ORDER_ID,
        name=params.get(NAME_PARAM) or DEFAULT_CUSTOMER_NAME,
        address=params.get(ADDRESS_PARAM) or DEFAULT_ADDRESS,
    )
    return ViewState(screen=Screen.CUSTOMER_CONFIRM, customer=customer)


def _require_customer(state: ViewState) -> None:
    if not state.is_customer:
        raise ValueError(f"No customer transition from {state.screen.name}")


def start_edit(state: ViewState) -> ViewState:
    _require_customer(state)
    return replace(state, screen=Screen.CUSTOMER_EDIT)


def back_to_confirm(state: ViewState) -> ViewState:
    _require_customer(state)
    return replace(state, screen=Screen.CUSTOMER_CONFIRM)


def mark_submitted(state: ViewState) -> ViewState:
    _require_customer(state)
    return replace(state, submitted=True)


def can_submit_update(updated_address: str | None) -> bool:
    return len(updated_address or "") >= MIN_UPDATED_ADDRESS_LENGTH


def build_customer_link(base_url: str, order_id: str, name: str, address: str) -> str:
    query = urlencode(
        {
            VIEW_PARAM: CUSTOMER_VIEW,
            ORDER_ID_PARAM: order_id,
            NAME_PARAM: name,
            ADDRESS_PARAM: address,
        }
    )
    return f"{base_url.split('?', 1)[0]}?{query}"
