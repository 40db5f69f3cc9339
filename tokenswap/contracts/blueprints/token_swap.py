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

from tokenswap.contracts.blueprint import Blueprint
from tokenswap.contracts.blueprints.events import TokensSwapped
from tokenswap.contracts.context import Context
from tokenswap.contracts.exception import NCFail
from tokenswap.contracts.types import Amount, ContractId, public, view


class TokenSwap(Blueprint):
    """Pool that swaps HT for LT, and back, at the ratio of the liquidity it recorded.

    The exchange rate is `lt_liquidity // ht_liquidity`, recomputed on every call. Liquidity can only be added,
    and `add_liquidity()` keeps `lt_liquidity >= ht_liquidity`.

    Both swaps increase both counters: the amount paid in and the amount paid out are added to their sides. The
    counters record the volume the pool saw, not its token balances.

    Callers pay with `transfer_from()`, so they must approve the pool on the token they pay with beforehand.
    """

    # Tokens of the pair, fixed at creation.
    ht_token: ContractId
    lt_token: ContractId

    ht_liquidity: Amount
    lt_liquidity: Amount

    @public
    def initialize(self, ctx: Context, ht_token: ContractId, lt_token: ContractId) -> None:
        if ht_token == lt_token:
            raise NCFail('ht_token cannot be equal to lt_token')

        self.ht_token = ht_token
        self.lt_token = lt_token
        self.ht_liquidity = 0
        self.lt_liquidity = 0

    @public
    def add_liquidity(self, ctx: Context, amount_ht: Amount, amount_lt: Amount) -> None:
        """Pull `amount_ht` HT and `amount_lt` LT from the caller into the pool."""
        ht_liquidity = self.ht_liquidity + amount_ht
        lt_liquidity = self.lt_liquidity + amount_lt
        if lt_liquidity < ht_liquidity:
            raise InvalidRatio('Please input higher number for MLT')

        self.ht_liquidity = ht_liquidity
        self.lt_liquidity = lt_liquidity

        pool_id = self.syscall.get_contract_id()
        self.syscall.call_public_method(self.ht_token, 'transfer_from', ctx.caller_id, pool_id, amount_ht)
        self.syscall.call_public_method(self.lt_token, 'transfer_from', ctx.caller_id, pool_id, amount_lt)
        self.log.info('liquidity added', amount_ht=amount_ht, amount_lt=amount_lt)

    @view
    def get_exchange_rate(self) -> int:
        """Return how many LT one HT is worth."""
        return self._exchange_rate()

    @public
    def swap_high_to_low(self, ctx: Context, amount: Amount) -> Amount:
        """Swap `amount` HT for LT at the current rate and return the LT amount sent to the caller."""
        if amount <= 0:
            raise AmountZero('Amount must be greater than 0')
        if amount > self.ht_liquidity:
            raise InsufficientLiquidity('Not enough MHT liquidity')

        swapped = amount * self._exchange_rate()

        self.ht_liquidity += amount
        self.lt_liquidity += swapped

        pool_id = self.syscall.get_contract_id()
        self.syscall.call_public_method(self.ht_token, 'transfer_from', ctx.caller_id, pool_id, amount)
        self.syscall.call_public_method(self.lt_token, 'transfer', ctx.caller_id, swapped)

        self.syscall.emit_event(TokensSwapped(user=ctx.caller_id.hex(), amount=swapped, high_to_low=True).json_dumpb())
        return swapped

    @public
    def swap_low_to_high(self, ctx: Context, amount: Amount) -> Amount:
        """Swap `amount` LT for HT at the current rate and return the HT amount sent to the caller."""
        if amount <= 0:
            raise AmountZero('Amount must be greater than 0')
        if amount > self.lt_liquidity:
            raise InsufficientLiquidity('Not enough MLT liquidity')

        rate = self._exchange_rate()
        swapped = amount // rate

        self.lt_liquidity += amount
        self.ht_liquidity += swapped

        pool_id = self.syscall.get_contract_id()
        self.syscall.call_public_method(self.lt_token, 'transfer_from', ctx.caller_id, pool_id, amount)
        self.syscall.call_public_method(self.ht_token, 'transfer', ctx.caller_id, swapped)

        self.syscall.emit_event(TokensSwapped(user=ctx.caller_id.hex(), amount=swapped, high_to_low=False).json_dumpb())
        return swapped

    @view
    def get_ht_liquidity(self) -> Amount:
        return self.ht_liquidity

    @view
    def get_lt_liquidity(self) -> Amount:
        return self.lt_liquidity

    @view
    def get_tokens(self) -> tuple[ContractId, ContractId]:
        return self.ht_token, self.lt_token

    def _exchange_rate(self) -> int:
        if self.ht_liquidity == 0:
            raise ZeroLiquidityDivision('No MHT liquidity to compute the exchange rate')
        return self.lt_liquidity // self.ht_liquidity


class InvalidRatio(NCFail):
    pass


class AmountZero(NCFail):
    pass


class InsufficientLiquidity(NCFail):
    pass


class ZeroLiquidityDivision(NCFail):
    pass
