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

from typing import Any, final

from tokenswap.contracts.exception import NCInvalidContext
from tokenswap.contracts.types import VERTEX_ID_SIZE, Address, CallerId, ContractId, Timestamp
from tokenswap.crypto.util import ADDRESS_SIZE, get_address_b58_from_bytes


@final
class Context:
    """Context passed to a public method call.

    It carries the identity of the caller, which is either a wallet address or the id of the contract that made the
    call, and the timestamp of the execution.
    """
    __slots__ = ('__caller_id', '__timestamp')
    __caller_id: CallerId
    __timestamp: Timestamp

    def __init__(self, *, caller_id: CallerId, timestamp: int) -> None:
        if not isinstance(caller_id, bytes):
            raise NCInvalidContext(f'caller_id must be bytes, found `{type(caller_id).__name__}`')
        if len(caller_id) not in (ADDRESS_SIZE, VERTEX_ID_SIZE):
            raise NCInvalidContext(
                f'caller_id must have {ADDRESS_SIZE} or {VERTEX_ID_SIZE} bytes, found {len(caller_id)}'
            )
        if timestamp < 0:
            raise NCInvalidContext('timestamp must be non-negative')

        # Address or contract calling the method.
        self.__caller_id = caller_id

        # Timestamp of the execution.
        self.__timestamp = Timestamp(timestamp)

    @property
    def caller_id(self) -> CallerId:
        """Get the caller ID which can be either an Address or a ContractId."""
        return self.__caller_id

    @property
    def timestamp(self) -> Timestamp:
        return self.__timestamp

    def get_caller_address(self) -> Address | None:
        """Get the caller address if the caller is an address, None if it's a contract."""
        if len(self.__caller_id) == ADDRESS_SIZE:
            return Address(self.__caller_id)
        return None

    def get_caller_contract_id(self) -> ContractId | None:
        """Get the caller contract ID if the caller is a contract, None if it's an address."""
        if len(self.__caller_id) == ADDRESS_SIZE:
            return None
        return ContractId(self.__caller_id)

    def copy(self) -> Context:
        """Return a copy of the context."""
        return Context(caller_id=self.__caller_id, timestamp=self.__timestamp)

    def to_json(self) -> dict[str, Any]:
        """Return a JSON representation of the context."""
        address = self.get_caller_address()
        return {
            'caller_id': self.__caller_id.hex(),
            'address': get_address_b58_from_bytes(address) if address is not None else None,
            'timestamp': self.__timestamp,
        }
