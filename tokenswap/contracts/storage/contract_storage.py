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

from typing import Any

from tokenswap.contracts.storage.types import _NOT_PROVIDED
from tokenswap.contracts.types import BlueprintId, ContractId


class NCContractStorage:
    """This is the storage of the attributes of a single contract.

    It starts locked. The runner unlocks it only to commit the changes of a successful call, so any write outside a
    commit is a bug and fails loudly."""

    def __init__(self, *, nc_id: ContractId, blueprint_id: BlueprintId) -> None:
        # Contract id
        self.nc_id = nc_id

        # Blueprint this contract was created from.
        self._blueprint_id = blueprint_id

        # Attributes of the contract.
        self._data: dict[bytes, Any] = {}

        self.is_locked = True

    def lock(self) -> None:
        """Lock the storage for changes or commits."""
        self.is_locked = True

    def unlock(self) -> None:
        """Unlock the storage."""
        self.is_locked = False

    def check_if_locked(self) -> None:
        """Raise a runtime error if the storage is locked."""
        if self.is_locked:
            raise RuntimeError('you cannot modify or commit if the storage is locked')

    def get_blueprint_id(self) -> BlueprintId:
        """Return the blueprint id of the contract."""
        return self._blueprint_id

    def get(self, key: bytes, *, default: Any = _NOT_PROVIDED) -> Any:
        """Return the value of the provided `key`.

        It raises KeyError if key is not found and a default is not provided."""
        if key not in self._data:
            if default is _NOT_PROVIDED:
                raise KeyError(key)
            return default
        return self._data[key]

    def has(self, key: bytes) -> bool:
        """Return True if the key is set."""
        return key in self._data

    def put(self, key: bytes, value: Any) -> None:
        """Store the `value` for the provided `key`."""
        self.check_if_locked()
        self._data[key] = value

    def delete(self, key: bytes) -> None:
        """Delete `key` from storage."""
        self.check_if_locked()
        self._data.pop(key, None)

    def is_empty(self) -> bool:
        """Return True if no attribute is set."""
        return not self._data
