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

from tokenswap.conf.get_settings import get_global_settings
from tokenswap.contracts.blueprint import Blueprint
from tokenswap.contracts.blueprints.events import Approval, Transfer
from tokenswap.contracts.context import Context
from tokenswap.contracts.exception import NCFail
from tokenswap.contracts.types import Amount, CallerId, public, view


class FungibleToken(Blueprint):
    """Token with a fixed supply, minted to the creator.

    Balances are kept per caller id, so both wallets and contracts can hold tokens. A spender can move tokens on
    behalf of an owner up to the amount the owner approved.
    """

    name: str
    symbol: str
    decimals: int
    total_supply: Amount

    balances: dict[bytes, Amount]

    # Keyed by `owner + spender`.
    allowances: dict[bytes, Amount]

    @public
    def initialize(self, ctx: Context, name: str, symbol: str, initial_supply: Amount) -> None:
        """Create the token and mint the whole supply to the caller."""
        if not name or not symbol:
            raise NCFail('name and symbol cannot be empty')

        self.name = name
        self.symbol = symbol
        self.decimals = get_global_settings().TOKEN_DECIMALS
        self.total_supply = initial_supply
        self.balances[ctx.caller_id] = initial_supply

        self.syscall.emit_event(Transfer(sender=None, to=ctx.caller_id.hex(), amount=initial_supply).json_dumpb())

    @public
    def transfer(self, ctx: Context, to: CallerId, amount: Amount) -> bool:
        """Move `amount` from the caller to `to`."""
        self._move(ctx.caller_id, to, amount)
        return True

    @public
    def transfer_from(self, ctx: Context, owner: CallerId, to: CallerId, amount: Amount) -> bool:
        """Move `amount` from `owner` to `to`, spending the allowance the owner gave to the caller."""
        key = self._allowance_key(owner, ctx.caller_id)
        allowed = self.allowances.get(key, 0)
        if allowed < amount:
            raise InsufficientAllowance(f'allowance of {allowed} is lower than {amount}')

        self.allowances[key] = allowed - amount
        self._move(owner, to, amount)
        return True

    @public
    def approve(self, ctx: Context, spender: CallerId, amount: Amount) -> bool:
        """Set the amount `spender` may move from the caller's balance."""
        self.allowances[self._allowance_key(ctx.caller_id, spender)] = amount
        self.syscall.emit_event(Approval(owner=ctx.caller_id.hex(), spender=spender.hex(), amount=amount).json_dumpb())
        return True

    @view
    def balance_of(self, account: CallerId) -> Amount:
        return self.balances.get(account, 0)

    @view
    def allowance(self, owner: CallerId, spender: CallerId) -> Amount:
        return self.allowances.get(self._allowance_key(owner, spender), 0)

    @view
    def get_total_supply(self) -> Amount:
        return self.total_supply

    @view
    def get_name(self) -> str:
        return self.name

    @view
    def get_symbol(self) -> str:
        return self.symbol

    @view
    def get_decimals(self) -> int:
        return self.decimals

    def _move(self, sender: CallerId, to: CallerId, amount: Amount) -> None:
        balance = self.balances.get(sender, 0)
        if balance < amount:
            raise InsufficientBalance(f'balance of {balance} is lower than {amount}')

        self.balances[sender] = balance - amount
        self.balances[to] = self.balances.get(to, 0) + amount
        self.syscall.emit_event(Transfer(sender=sender.hex(), to=to.hex(), amount=amount).json_dumpb())

    @staticmethod
    def _allowance_key(owner: CallerId, spender: CallerId) -> bytes:
        # Prefixed with the owner size so that no two pairs share a key.
        return bytes([len(owner)]) + owner + spender


class InsufficientBalance(NCFail):
    pass


class InsufficientAllowance(NCFail):
    pass
