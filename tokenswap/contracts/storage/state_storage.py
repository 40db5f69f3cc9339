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

from structlog import get_logger

from tokenswap.contracts.exception import NCAlreadyInitializedContractError, NCUninitializedContractError
from tokenswap.contracts.storage.contract_storage import NCContractStorage
from tokenswap.contracts.types import BlueprintId, ContractId

logger = get_logger()


class NCStateStorage:
    """Memory storage of all contracts.

    It maps each contract id to the storage of its attributes. Contracts are never removed."""

    def __init__(self) -> None:
        self.log = logger.new()
        self._contracts: dict[ContractId, NCContractStorage] = {}

    def has_contract(self, contract_id: ContractId) -> bool:
        """Return True if a contract with the given id exists."""
        return contract_id in self._contracts

    def get_contract_storage(self, contract_id: ContractId) -> NCContractStorage:
        """Return the storage of an existing contract."""
        try:
            return self._contracts[contract_id]
        except KeyError:
            raise NCUninitializedContractError(f'contract does not exist: {contract_id.hex()}')

    def create_contract_storage(self, contract_id: ContractId, blueprint_id: BlueprintId) -> NCContractStorage:
        """Create an empty, locked storage for a new contract.

        The storage is not part of the state until `save_contract_storage()` is called."""
        if contract_id in self._contracts:
            raise NCAlreadyInitializedContractError(contract_id.hex())
        return NCContractStorage(nc_id=contract_id, blueprint_id=blueprint_id)

    def save_contract_storage(self, storage: NCContractStorage) -> None:
        """Add the storage of a newly created contract to the state."""
        assert storage.nc_id not in self._contracts
        self._contracts[storage.nc_id] = storage
        self.log.debug(
            'contract created',
            contract_id=storage.nc_id.hex(),
            blueprint_id=storage.get_blueprint_id().hex(),
        )
