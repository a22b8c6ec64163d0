# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

from enum import StrEnum
from dataclasses import asdict, dataclass
from typing import Any

from dacite import Config, from_dict

from shared.json_utils import convert_keys


class VerificationStatus(StrEnum):
    CONFIRMED = "confirmed"
    NEEDS_CHANGE = "needs_change"


@dataclass
class VerificationRecord:
    """A single customer response to an address-confirmation request."""

    id: str
    order_id: str
    customer_name: str
    original_address: str
    status: VerificationStatus
    created_at: int
    updated_address: str = ""
    synced_with_carrier: bool = False

    def to_document(self) -> dict[str, Any]:
        """Returns the stored (camelCase) form, without the id."""
        data = asdict(self)
        data.pop("id")
        data["status"] = str(self.status)
        return convert_keys(data, "snake_to_camel")

    def as_dict(self) -> dict[str, Any]:
        data = self.to_document()
        data["id"] = self.id
        return data

    @classmethod
    def from_document(cls, record_id: str, data: dict) -> "VerificationRecord":
        """Builds a record from a stored (camelCase) document."""
        fields = convert_keys(data, "camel_to_snake")
        fields["id"] = record_id
        fields.setdefault("updated_address", "")
        fields.setdefault("synced_with_carrier", False)
        return from_dict(
            data_class=cls,
            data=fields,
            config=Config(cast=[VerificationStatus], check_types=False),
        )


@dataclass
class VerificationSummary:
    """Counters shown on the admin dashboard."""

    total: int
    confirmed: int
    needs_change: int
    pending_sync: int
