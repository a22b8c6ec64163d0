"""
Print a personalized customer confirmation link.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.config import get_settings
from backend.views import build_customer_link
from shared.constants import EXAMPLE_ADDRESS, EXAMPLE_CUSTOMER_NAME, EXAMPLE_ORDER_ID


def main() -> int:
    parser = argparse.ArgumentParser(description="Build a customer confirmation link")
    parser.add_argument("--order-id", default=EXAMPLE_ORDER_ID, help="Order id")
    parser.add_argument("--name", default=EXAMPLE_CUSTOMER_NAME, help="Customer name")
    parser.add_argument("--address", default=EXAMPLE_ADDRESS, help="Address on file")
    parser.add_argument(
        "--base-url",
        default=None,
        help="Public URL of the service (defaults to PUBLIC_BASE_URL)",
    )
    args = parser.parse_args()

    base_url = args.base_url or get_settings().public_base_url
    if not base_url:
        parser.error("--base-url is required when PUBLIC_BASE_URL is not set")

    print(build_customer_link(base_url, args.order_id, args.name, args.address))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
