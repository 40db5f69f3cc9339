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

from typing import TYPE_CHECKING, Any, final

from tokenswap.contracts.types import BlueprintId, ContractId

if TYPE_CHECKING:
    from tokenswap.contracts.nc_exec_logs import NCLogger
    from tokenswap.contracts.runner import Runner
    from tokenswap.contracts.storage import NCContractStorage


@final
class BlueprintEnvironment:
    """A class that holds all possible interactions a blueprint may have with the system."""

    __slots__ = ('__runner', '__log__', '__storage__')

    def __init__(self, runner: Runner, nc_logger: NCLogger, storage: NCContractStorage) -> None:
        self.__log__ = nc_logger
        self.__runner = runner
        self.__storage__ = storage

    def get_contract_id(self) -> ContractId:
        """Return the ContractId of the current contract."""
        return self.__runner.get_current_contract_id()

    def get_blueprint_id(self, contract_id: ContractId | None = None) -> BlueprintId:
        """Return the BlueprintId of a contract, the current one by default."""
        if contract_id is None:
            contract_id = self.get_contract_id()
        return self.__runner.get_blueprint_id(contract_id)

    def call_public_method(self, contract_id: ContractId, method_name: str, *args: Any, **kwargs: Any) -> Any:
        """Call a public method of another contract. The current contract becomes the caller."""
        return self.__runner.syscall_call_another_contract_public_method(contract_id, method_name, args, kwargs)

    def call_view_method(self, contract_id: ContractId, method_name: str, *args: Any, **kwargs: Any) -> Any:
        """Call a view method of another contract."""
        return self.__runner.syscall_call_another_contract_view_method(contract_id, method_name, args, kwargs)

    def emit_event(self, data: bytes) -> None:
        """Emit a custom event from a contract."""
        self.__runner.syscall_emit_event(data)
