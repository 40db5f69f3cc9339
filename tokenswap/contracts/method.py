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

from collections.abc import Callable, Iterable
from inspect import Parameter, _empty as EMPTY, signature
from types import UnionType
from typing import Any, Union, get_args, get_origin, get_type_hints

from typing_extensions import Self, assert_never

from tokenswap.contracts.context import Context
from tokenswap.contracts.exception import NCInvalidArgument
from tokenswap.contracts.types import VERTEX_ID_SIZE, Address, Amount, VertexId
from tokenswap.contracts.utils import is_nc_public_method
from tokenswap.crypto.util import ADDRESS_SIZE


def _check_arg(name: str, arg_type: Any, value: Any) -> None:
    """Raise TypeError or ValueError when `value` does not fit `arg_type`."""
    if arg_type is Any:
        return

    origin = get_origin(arg_type)
    if origin is Union or origin is UnionType:
        errors = []
        for option in get_args(arg_type):
            try:
                _check_arg(name, option, value)
            except (TypeError, ValueError) as e:
                errors.append(str(e))
            else:
                return
        raise TypeError('; '.join(errors))

    if origin is tuple:
        item_types = get_args(arg_type)
        if not isinstance(value, tuple) or len(value) != len(item_types):
            raise TypeError(f'`{name}` expects a tuple of {len(item_types)} items')
        for item_type, item in zip(item_types, value):
            _check_arg(name, item_type, item)
        return

    if arg_type is None or arg_type is type(None):
        if value is not None:
            raise TypeError(f'`{name}` expects `None`, found `{type(value).__name__}`')
        return

    is_amount = arg_type is Amount
    id_size: int | None = None
    while hasattr(arg_type, '__supertype__'):
        if arg_type is Address:
            id_size = ADDRESS_SIZE
        elif arg_type is VertexId:
            id_size = VERTEX_ID_SIZE
        arg_type = arg_type.__supertype__

    # bool is a subclass of int
    if arg_type is int and isinstance(value, bool):
        raise TypeError(f'`{name}` expects `int`, found `bool`')
    if not isinstance(value, arg_type):
        raise TypeError(f'`{name}` expects `{arg_type.__name__}`, found `{type(value).__name__}`')
    if is_amount and value < 0:
        raise ValueError(f'`{name}` must not be negative, found {value}')
    if id_size is not None and len(value) != id_size:
        raise ValueError(f'`{name}` must have {id_size} bytes, found {len(value)}')


class Method:
    """ Abstracts the type signature of a blueprint method.

    It is used to check the arguments of a call before the method runs, both for calls from the outside and for
    calls between contracts.
    """
    name: str
    arg_names: tuple[str, ...]
    arg_types: tuple[Any, ...]

    def __init__(self, *, name: str, arg_names: Iterable[str], arg_types: Iterable[Any]) -> None:
        """Do not build directly, use `Method.from_callable`"""
        self.name = name
        self.arg_names = tuple(arg_names)
        self.arg_types = tuple(arg_types)

    @classmethod
    def from_callable(cls, method: Callable) -> Self:
        """Build a Method from an unbound blueprint method. Raises TypeError for unsupported signatures."""
        method_signature = signature(method)
        type_hints = get_type_hints(method)

        arg_names = []
        arg_types = []
        iter_params = iter(method_signature.parameters.values())

        try:
            self_param = next(iter_params)
        except StopIteration:
            raise TypeError('missing self argument')
        if self_param.name != 'self':
            raise TypeError('first argument should be self')

        if is_nc_public_method(method):
            try:
                ctx_param = next(iter_params)
            except StopIteration:
                raise TypeError('missing ctx argument')
            if type_hints.get(ctx_param.name) is not Context:
                raise TypeError('context argument must be annotated as `ctx: Context`')

        for param in iter_params:
            match param.kind:
                case Parameter.POSITIONAL_ONLY | Parameter.POSITIONAL_OR_KEYWORD:
                    pass
                case Parameter.VAR_POSITIONAL:
                    raise TypeError('variable *args arguments are not supported')
                case Parameter.KEYWORD_ONLY:
                    raise TypeError('keyword-only arguments are not supported')
                case Parameter.VAR_KEYWORD:
                    raise TypeError('variable **kwargs arguments are not supported')
                case _ as impossible_kind:
                    assert_never(impossible_kind)
            if param.default is not EMPTY:
                raise TypeError('default values are not supported')
            if param.name not in type_hints:
                raise TypeError(f'missing type annotation for argument `{param.name}`')
            arg_names.append(param.name)
            arg_types.append(type_hints[param.name])

        return cls(name=method.__name__, arg_names=arg_names, arg_types=arg_types)

    def bind_args(self, args: tuple[Any, ...] | list[Any], kwargs: dict[str, Any] | None = None) -> tuple[Any, ...]:
        """Merge positional and keyword arguments into a checked tuple in declaration order."""
        if len(args) > len(self.arg_names):
            raise NCInvalidArgument(f'{self.name}() got too many arguments')

        merged: dict[str, Any] = {}
        for index, arg in enumerate(args):
            merged[self.arg_names[index]] = arg

        kwargs = kwargs or {}
        for name, arg in kwargs.items():
            if name not in self.arg_names:
                raise NCInvalidArgument(f"{self.name}() got an unexpected keyword argument '{name}'")
            if name in merged:
                raise NCInvalidArgument(f"{self.name}() got multiple values for argument '{name}'")
            merged[name] = arg

        ordered_args = []
        for name, arg_type in zip(self.arg_names, self.arg_types):
            if name not in merged:
                raise NCInvalidArgument(f"{self.name}() missing required argument: '{name}'")
            value = merged[name]
            try:
                _check_arg(name, arg_type, value)
            except (TypeError, ValueError) as e:
                raise NCInvalidArgument(f'{self.name}(): {e}') from e
            ordered_args.append(value)

        return tuple(ordered_args)
