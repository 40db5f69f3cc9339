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

from typing import Type

from tokenswap.contracts.blueprint import Blueprint
from tokenswap.contracts.blueprints.fungible_token import FungibleToken
from tokenswap.contracts.blueprints.token_swap import TokenSwap

_blueprints_mapper: dict[str, Type[Blueprint]] = {
    'FungibleToken': FungibleToken,
    'TokenSwap': TokenSwap,
}

__all__ = [
    'FungibleToken',
    'TokenSwap',
]
