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

# Customer link query parameters.
VIEW_PARAM = "view"
CUSTOMER_VIEW = "customer"
ORDER_ID_PARAM = "orderId"
NAME_PARAM = "name"
ADDRESS_PARAM = "address"

# Fallbacks rendered when a customer link omits a parameter.
DEFAULT_ORDER_ID = "S/N"
DEFAULT_CUSTOMER_NAME = "Cliente"
DEFAULT_ADDRESS = "Confirme seu endereço abaixo"

# The edit screen keeps its submit button disabled below this length.
MIN_UPDATED_ADDRESS_LENGTH = 10

MAX_ORDER_ID_LENGTH = 128
MAX_NAME_LENGTH = 256
MAX_ADDRESS_LENGTH = 1024

DEFAULT_APP_ID = "address-fix-pro"

# Example values used by the dashboard's test link.
EXAMPLE_ORDER_ID = "EX-123"
EXAMPLE_CUSTOMER_NAME = "Maria"
EXAMPLE_ADDRESS = "Rua Exemplo, 10"
