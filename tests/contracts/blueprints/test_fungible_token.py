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

from tokenswap.contracts.blueprints import FungibleToken
from tokenswap.contracts.blueprints.events import Approval, Transfer, parse_event
from tokenswap.contracts.blueprints.fungible_token import InsufficientAllowance, InsufficientBalance
from tokenswap.contracts.exception import NCFail, NCInvalidArgument
from tokenswap.contracts.types import Address, ContractId, VertexId
from tests.contracts.blueprints.unittest import BlueprintTestCase


class FungibleTokenTestCase(BlueprintTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.blueprint_id = self.nc_catalog.get_blueprint_id(FungibleToken)
        self.token_id = self.gen_random_contract_id()
        self.owner = self.gen_random_address()
        self.alice = self.gen_random_address()
        self.bob = self.gen_random_address()

        ctx = self.create_context(self.owner)
        self.runner.create_contract(self.token_id, self.blueprint_id, ctx, 'HigherToken', 'MHT', 1_000)

    def _balance(self, account: bytes) -> int:
        return self.call_view(self.token_id, 'balance_of', account)

    def _events(self) -> list:
        return [parse_event(event.data) for event in self.runner.get_events() if event.nc_id == self.token_id]

    def test_initialize(self) -> None:
        self.assertEqual(self.call_view(self.token_id, 'get_name'), 'HigherToken')
        self.assertEqual(self.call_view(self.token_id, 'get_symbol'), 'MHT')
        self.assertEqual(self.call_view(self.token_id, 'get_decimals'), self._settings.TOKEN_DECIMALS)
        self.assertEqual(self.call_view(self.token_id, 'get_total_supply'), 1_000)
        self.assertEqual(self._balance(self.owner), 1_000)
        self.assertEqual(self._balance(self.alice), 0)
        self.assertEqual(self._events(), [Transfer(sender=None, to=self.owner.hex(), amount=1_000)])

    def test_initialize_empty_name(self) -> None:
        token_id = self.gen_random_contract_id()
        with self.assertRaises(NCFail):
            self.runner.create_contract(token_id, self.blueprint_id, self.create_context(), '', 'MHT', 1_000)
        self.assertFalse(self.runner.has_contract_been_initialized(token_id))

    def test_transfer(self) -> None:
        ctx = self.create_context(self.owner)
        ret = self.runner.call_public_method(self.token_id, 'transfer', ctx, self.alice, 300)
        self.assertTrue(ret)
        self.assertEqual(self._balance(self.owner), 700)
        self.assertEqual(self._balance(self.alice), 300)
        self.assertEqual(self._events()[-1], Transfer(sender=self.owner.hex(), to=self.alice.hex(), amount=300))

        # The supply does not change.
        self.assertEqual(self.call_view(self.token_id, 'get_total_supply'), 1_000)

    def test_transfer_insufficient_balance(self) -> None:
        n_events = len(self.runner.get_events())
        with self.assertRaises(InsufficientBalance) as cm:
            self.runner.call_public_method(self.token_id, 'transfer', self.create_context(self.alice), self.bob, 1)
        self.assertEqual(str(cm.exception), 'balance of 0 is lower than 1')
        self.assertEqual(self._balance(self.alice), 0)
        self.assertEqual(self._balance(self.bob), 0)
        self.assertEqual(len(self.runner.get_events()), n_events)

    def test_transfer_to_self(self) -> None:
        self.runner.call_public_method(self.token_id, 'transfer', self.create_context(self.owner), self.owner, 400)
        self.assertEqual(self._balance(self.owner), 1_000)

    def test_transfer_to_contract(self) -> None:
        contract_id = self.gen_random_contract_id()
        self.runner.call_public_method(self.token_id, 'transfer', self.create_context(self.owner), contract_id, 10)
        self.assertEqual(self._balance(contract_id), 10)

    def test_transfer_invalid_arguments(self) -> None:
        ctx = self.create_context(self.owner)
        with self.assertRaises(NCInvalidArgument):
            self.runner.call_public_method(self.token_id, 'transfer', ctx, self.alice, -1)
        with self.assertRaises(NCInvalidArgument):
            self.runner.call_public_method(self.token_id, 'transfer', ctx, self.alice.hex(), 1)
        with self.assertRaises(NCInvalidArgument):
            self.runner.call_public_method(self.token_id, 'transfer', ctx, self.alice, True)
        with self.assertRaises(NCInvalidArgument):
            self.runner.call_public_method(self.token_id, 'transfer', ctx, self.alice)

    def test_approve(self) -> None:
        ctx = self.create_context(self.owner)
        self.assertTrue(self.runner.call_public_method(self.token_id, 'approve', ctx, self.alice, 50))
        self.assertEqual(self.call_view(self.token_id, 'allowance', self.owner, self.alice), 50)
        self.assertEqual(self.call_view(self.token_id, 'allowance', self.alice, self.owner), 0)
        self.assertEqual(self._events()[-1], Approval(owner=self.owner.hex(), spender=self.alice.hex(), amount=50))

        # A new approval replaces the previous one.
        self.runner.call_public_method(self.token_id, 'approve', ctx, self.alice, 20)
        self.assertEqual(self.call_view(self.token_id, 'allowance', self.owner, self.alice), 20)

    def test_transfer_from(self) -> None:
        self.runner.call_public_method(self.token_id, 'approve', self.create_context(self.owner), self.alice, 50)

        ctx = self.create_context(self.alice)
        self.runner.call_public_method(self.token_id, 'transfer_from', ctx, self.owner, self.bob, 30)

        self.assertEqual(self._balance(self.owner), 970)
        self.assertEqual(self._balance(self.bob), 30)
        self.assertEqual(self._balance(self.alice), 0)
        self.assertEqual(self.call_view(self.token_id, 'allowance', self.owner, self.alice), 20)

    def test_transfer_from_insufficient_allowance(self) -> None:
        self.runner.call_public_method(self.token_id, 'approve', self.create_context(self.owner), self.alice, 10)

        ctx = self.create_context(self.alice)
        with self.assertRaises(InsufficientAllowance):
            self.runner.call_public_method(self.token_id, 'transfer_from', ctx, self.owner, self.bob, 11)
        self.assertEqual(self._balance(self.owner), 1_000)
        self.assertEqual(self.call_view(self.token_id, 'allowance', self.owner, self.alice), 10)

    def test_transfer_from_insufficient_balance(self) -> None:
        self.runner.call_public_method(self.token_id, 'approve', self.create_context(self.bob), self.alice, 10)

        ctx = self.create_context(self.alice)
        with self.assertRaises(InsufficientBalance):
            self.runner.call_public_method(self.token_id, 'transfer_from', ctx, self.bob, self.alice, 5)
        # The allowance is restored along with everything else.
        self.assertEqual(self.call_view(self.token_id, 'allowance', self.bob, self.alice), 10)

    def test_allowances_of_different_pairs_are_apart(self) -> None:
        contract_id = self.gen_random_contract_id()
        self.runner.call_public_method(self.token_id, 'transfer', self.create_context(self.owner), self.alice, 100)

        # Same bytes once joined: a 32-byte owner with a 25-byte spender, and alice with the contract.
        joined = self.alice + contract_id
        other_owner = ContractId(VertexId(joined[:32]))
        other_spender = Address(joined[32:])
        ctx = self.create_context(other_owner)
        self.runner.call_public_method(self.token_id, 'approve', ctx, other_spender, 50)

        self.assertEqual(self.call_view(self.token_id, 'allowance', other_owner, other_spender), 50)
        self.assertEqual(self.call_view(self.token_id, 'allowance', self.alice, contract_id), 0)
        with self.assertRaises(InsufficientAllowance):
            self.runner.call_public_method(
                self.token_id, 'transfer_from', self.create_context(contract_id), self.alice, contract_id, 50
            )
        self.assertEqual(self._balance(self.alice), 100)

    def test_ids_of_wrong_size(self) -> None:
        ctx = self.create_context(self.owner)
        with self.assertRaises(NCInvalidArgument):
            self.runner.call_public_method(self.token_id, 'approve', ctx, self.alice[:-1], 50)
        with self.assertRaises(NCInvalidArgument):
            self.runner.call_public_method(self.token_id, 'transfer', ctx, self.alice + b'\x00', 1)
        with self.assertRaises(NCInvalidArgument):
            self.call_view(self.token_id, 'allowance', self.owner + self.alice[:7], self.alice[7:])
        self.assertEqual(self._balance(self.owner), 1_000)
