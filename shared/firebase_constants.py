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

# Records live under artifacts/{appId}/public/data/verifications.
ARTIFACTS_COLLECTION = "artifacts"
PUBLIC_COLLECTION = "public"
PUBLIC_DATA_DOCUMENT = "data"
VERIFICATIONS_COLLECTION = "verifications"


def verifications_path(app_id: str) -> tuple[str, ...]:
    """Returns the path segments of the verifications collection for an app."""
    return (
        ARTIFACTS_COLLECTION,
        app_id,
        PUBLIC_COLLECTION,
        PUBLIC_DATA_DOCUMENT,
        VERIFICATIONS_COLLECTION,
    )
