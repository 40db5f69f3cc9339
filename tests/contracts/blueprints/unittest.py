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

from tokenswap.contracts.blueprint import Blueprint
from tokenswap.contracts.blueprint_env import BlueprintEnvironment
from tokenswap.contracts.catalog import generate_catalog_from_settings
from tokenswap.contracts.context import Context
from tokenswap.contracts.nc_exec_logs import NCLogger, NCLogStorage
from tokenswap.contracts.runner import Runner, RunnerFactory
from tokenswap.contracts.types import Address, BlueprintId, CallerId, ContractId, VertexId
from tokenswap.crypto.util import ADDRESS_HASH_SIZE, get_address_from_public_key_hash
from tests import unittest


class BlueprintTestCase(unittest.TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.nc_catalog = generate_catalog_from_settings(self._settings)
        self.runner = self.build_runner()
        self.now = int(self.reactor.seconds())

    def build_runner(self, *, log_storage: NCLogStorage | None = None) -> Runner:
        """Create a runner with an empty state that shares the catalog of this test."""
        factory = RunnerFactory(
            reactor=self.reactor,
            settings=self._settings,
            catalog=self.nc_catalog,
            log_storage=log_storage,
        )
        return factory.create()

    def get_readonly_contract(self, contract_id: ContractId) -> Blueprint:
        """ Returns a read-only instance of a given contract to help testing it.

        The storage is locked, so writing any field fails.
        """
        contract_storage = self.runner.get_storage(contract_id)
        contract_storage.lock()
        nc_logger = NCLogger(__reactor__=self.reactor, __nc_id__=contract_id)
        env = BlueprintEnvironment(self.runner, nc_logger, contract_storage)
        blueprint_class = self.nc_catalog.get_blueprint_class(contract_storage.get_blueprint_id())
        return blueprint_class(env)

    def _register_blueprint_class(
        self,
        blueprint_class: type[Blueprint],
        blueprint_id: BlueprintId | None = None,
    ) -> BlueprintId:
        """Register a blueprint class with an optional id, allowing contracts to be created from it."""
        if blueprint_id is None:
            blueprint_id = self.gen_random_blueprint_id()
        self.nc_catalog.register(blueprint_id, blueprint_class)
        return blueprint_id

    def create_context(self, caller_id: CallerId | None = None, timestamp: int | None = None) -> Context:
        """Create a Context instance with optional values or defaults."""
        return Context(
            caller_id=caller_id if caller_id is not None else self.gen_random_address(),
            timestamp=timestamp if timestamp is not None else self.now,
        )

    def call_view(self, contract_id: ContractId, method_name: str, *args: Any) -> Any:
        return self.runner.call_view_method(contract_id, method_name, *args)

    def gen_random_address(self) -> Address:
        """Generate a random wallet address."""
        return Address(get_address_from_public_key_hash(self.rng.randbytes(ADDRESS_HASH_SIZE)))

    def gen_random_contract_id(self) -> ContractId:
        """Generate a random contract id."""
        return ContractId(VertexId(self.rng.randbytes(32)))

    def gen_random_blueprint_id(self) -> BlueprintId:
        """Generate a random blueprint id."""
        return BlueprintId(VertexId(self.rng.randbytes(32)))
