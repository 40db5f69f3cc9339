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

from typing_extensions import override

from tokenswap.contracts.storage.contract_storage import NCContractStorage
from tokenswap.contracts.storage.types import _NOT_PROVIDED, DeletedKey
from tokenswap.contracts.types import BlueprintId, ContractId


class NCChangesTracker(NCContractStorage):
    """Keep track of changes during the execution of a contract's method.

    These changes are not committed to the storage until `commit()` is called. The storage below may be either the
    contract storage or the change tracker of an outer call to the same contract."""

    def __init__(self, nc_id: ContractId, storage: NCContractStorage):
        self.storage = storage
        self.nc_id = nc_id

        self.data: dict[bytes, Any] = {}

        self.has_been_commited = False
        self.has_been_blocked = False

    @override
    def get_blueprint_id(self) -> BlueprintId:
        return self.storage.get_blueprint_id()

    @override
    def lock(self) -> None:
        raise NotImplementedError('change trackers cannot be locked, use block() instead')

    @override
    def unlock(self) -> None:
        raise NotImplementedError('change trackers cannot be unlocked')

    @override
    def check_if_locked(self) -> None:
        """Check if this instance has been locked. A lock occurs after a commit is executed."""
        if self.has_been_commited:
            raise RuntimeError('you cannot change any value after the commit has been executed')
        elif self.has_been_blocked:
            raise RuntimeError('you cannot change any value after the changes have been blocked')

    def block(self) -> None:
        """Block the changes and prevent them from being committed."""
        self.check_if_locked()
        self.has_been_blocked = True

    @override
    def get(self, key: bytes, *, default: Any = _NOT_PROVIDED) -> Any:
        if key in self.data:
            value = self.data[key]
            if value is DeletedKey:
                if default is _NOT_PROVIDED:
                    raise KeyError(key)
                return default
            return value
        return self.storage.get(key, default=default)

    @override
    def has(self, key: bytes) -> bool:
        if key in self.data:
            return self.data[key] is not DeletedKey
        return self.storage.has(key)

    @override
    def put(self, key: bytes, value: Any) -> None:
        self.check_if_locked()
        self.data[key] = value

    @override
    def delete(self, key: bytes) -> None:
        self.check_if_locked()
        self.data[key] = DeletedKey

    def commit(self) -> None:
        """Save the changes in the storage."""
        self.check_if_locked()
        for key, value in self.data.items():
            if value is DeletedKey:
                self.storage.delete(key)
            else:
                self.storage.put(key, value)
        self.has_been_commited = True

    @override
    def is_empty(self) -> bool:
        return not bool(self.data)
