# Copyright 2024 Hathor Labs
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from __future__ import annotations

import hashlib
from typing import Callable

from tokenswap.contracts.types import (
    NC_ALLOW_REENTRANCY_ATTR,
    NC_METHOD_TYPE_ATTR,
    BlueprintId,
    CallerId,
    ContractId,
    NCMethodType,
    VertexId,
)

CONTRACT_ID_PREFIX: bytes = b'contract'


def is_nc_public_method(method: Callable) -> bool:
    """Return True if the method is nc_public."""
    return getattr(method, NC_METHOD_TYPE_ATTR, None) is NCMethodType.PUBLIC


def is_nc_view_method(method: Callable) -> bool:
    """Return True if the method is nc_view."""
    return getattr(method, NC_METHOD_TYPE_ATTR, None) is NCMethodType.VIEW


def allows_reentrancy(method: Callable) -> bool:
    """Return True if the public method may be called while its contract is already executing."""
    return getattr(method, NC_ALLOW_REENTRANCY_ATTR, False) is True


def derive_contract_id(deployer: CallerId, salt: bytes, blueprint_id: BlueprintId) -> ContractId:
    """Derive the id of a contract deployed by `deployer` from `blueprint_id`. Different salts give different ids."""
    h = hashlib.sha256()
    h.update(CONTRACT_ID_PREFIX)
    h.update(deployer)
    h.update(salt)
    h.update(blueprint_id)
    return ContractId(VertexId(h.digest()))
