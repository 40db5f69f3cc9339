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

"""Typed payloads of the events emitted by the builtin blueprints.

Events travel as JSON bytes through `syscall.emit_event()`. Contract ids and addresses are hex strings.
"""

from typing import Annotated, Literal

from pydantic import Field, TypeAdapter
from typing_extensions import Self

from tokenswap.util import json_loadb
from tokenswap.utils.pydantic import BaseModel


class BaseEvent(BaseModel):
    event: str

    @classmethod
    def parse(cls, data: bytes) -> Self:
        """Load an event from the bytes emitted by a contract."""
        return cls.model_validate(json_loadb(data))


class TokensSwapped(BaseEvent):
    """Emitted by the pool after each swap. `amount` is the amount sent to the user."""
    event: Literal['TokensSwapped'] = 'TokensSwapped'
    user: str
    amount: int
    high_to_low: bool


class Transfer(BaseEvent):
    """Emitted by a token when balances move. `sender` is None when tokens are minted."""
    event: Literal['Transfer'] = 'Transfer'
    sender: str | None
    to: str
    amount: int


class Approval(BaseEvent):
    event: Literal['Approval'] = 'Approval'
    owner: str
    spender: str
    amount: int


AnyEvent = Annotated[TokensSwapped | Transfer | Approval, Field(discriminator='event')]

_any_event_adapter: TypeAdapter[AnyEvent] = TypeAdapter(AnyEvent)


def parse_event(data: bytes) -> BaseEvent:
    """Load an event of any known type from the bytes emitted by a contract."""
    return _any_event_adapter.validate_python(json_loadb(data))
