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

import inspect
from enum import Enum
from typing import Callable, NewType, TypeAlias

from tokenswap.contracts.exception import BlueprintSyntaxError

# Types to be used by blueprints.
Address = NewType('Address', bytes)
Amount = NewType('Amount', int)
Timestamp = NewType('Timestamp', int)
VertexId = NewType('VertexId', bytes)
BlueprintId = NewType('BlueprintId', VertexId)
ContractId = NewType('ContractId', VertexId)

VERTEX_ID_SIZE: int = 32

"""The identity of whoever calls a public method: a wallet address or another contract."""
CallerId: TypeAlias = Address | ContractId

NC_INITIALIZE_METHOD: str = 'initialize'

NC_METHOD_TYPE_ATTR: str = '__nc_method_type'
NC_ALLOW_REENTRANCY_ATTR: str = '__nc_allow_reentrancy'


class NCMethodType(Enum):
    PUBLIC = 'public'
    VIEW = 'view'


def blueprint_id_from_bytes(data: bytes) -> BlueprintId:
    """Create a BlueprintId from a bytes object."""
    return BlueprintId(VertexId(data))


def _get_arg_names(fn: Callable) -> list[str]:
    return list(inspect.signature(fn).parameters)


def public(
    maybe_fn: Callable | None = None,
    /,
    *,
    allow_reentrancy: bool = False,
) -> Callable:
    """Decorator to mark a blueprint method as public.

    Public methods may change the state of the contract and receive a `Context` as their first argument. They are
    not re-entrant: while a call to a contract is running, other contracts cannot call its public methods back,
    unless the method is marked with `allow_reentrancy=True`.
    """
    def decorator(fn: Callable) -> Callable:
        arg_names = _get_arg_names(fn)
        if len(arg_names) < 2 or arg_names[1] != 'ctx':
            raise BlueprintSyntaxError(f'@public method must have `ctx: Context` argument: `{fn.__name__}()`')
        setattr(fn, NC_METHOD_TYPE_ATTR, NCMethodType.PUBLIC)
        setattr(fn, NC_ALLOW_REENTRANCY_ATTR, allow_reentrancy)
        return fn

    if maybe_fn is not None:
        return decorator(maybe_fn)
    return decorator


def view(fn: Callable) -> Callable:
    """Decorator to mark a blueprint method as view (read-only)."""
    if 'ctx' in _get_arg_names(fn):
        raise BlueprintSyntaxError(f'@view method cannot have arg named `ctx`: `{fn.__name__}()`')
    setattr(fn, NC_METHOD_TYPE_ATTR, NCMethodType.VIEW)
    return fn
