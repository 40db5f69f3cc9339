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
from typing import TYPE_CHECKING, Any, final

from tokenswap.contracts.blueprint_env import BlueprintEnvironment
from tokenswap.contracts.exception import BlueprintSyntaxError
from tokenswap.contracts.method import Method
from tokenswap.contracts.types import NC_INITIALIZE_METHOD, NC_METHOD_TYPE_ATTR, NCMethodType
from tokenswap.contracts.utils import is_nc_public_method, is_nc_view_method

if TYPE_CHECKING:
    from tokenswap.contracts.nc_exec_logs import NCLogger

FORBIDDEN_NAMES = {
    'syscall',
    'log',
}

NC_FIELDS_ATTR: str = '__fields'


class _BlueprintBase(type):
    """Metaclass for blueprints.

    Every annotated class attribute becomes a Field that reads and writes the contract storage.
    """

    def __new__(
        cls: type[_BlueprintBase],
        name: str,
        bases: tuple[type, ...],
        attrs: dict[str, Any],
        /,
        **kwargs: Any
    ) -> _BlueprintBase:
        from tokenswap.contracts.fields import make_field_for_type

        # Initialize only subclasses of Blueprint.
        parents = [b for b in bases if isinstance(b, _BlueprintBase)]
        if not parents:
            return super().__new__(cls, name, bases, attrs, **kwargs)

        cls._validate_initialize_method(attrs)

        # Instances cannot hold attributes of their own, all state goes through fields.
        attrs['__slots__'] = tuple()
        new_class = super().__new__(cls, name, bases, attrs, **kwargs)

        try:
            nc_fields = inspect.get_annotations(new_class, eval_str=True)
        except NameError as e:
            raise BlueprintSyntaxError(f'cannot resolve field type: {e}')

        for field_name, field_type in nc_fields.items():
            if field_name in FORBIDDEN_NAMES:
                raise BlueprintSyntaxError(f'field name is forbidden: `{field_name}`')

            if field_name.startswith('_'):
                raise BlueprintSyntaxError(f'field name cannot start with underscore: `{field_name}`')

            if field_name in attrs:
                raise BlueprintSyntaxError(f'fields with default values are not supported: `{field_name}`')

            try:
                field = make_field_for_type(field_name, field_type)
            except TypeError:
                raise BlueprintSyntaxError(f'unsupported field type: `{field_name}: {field_type}`')
            setattr(new_class, field_name, field)

        for attr_name, attr_value in attrs.items():
            if not (is_nc_public_method(attr_value) or is_nc_view_method(attr_value)):
                continue
            try:
                Method.from_callable(attr_value)
            except (TypeError, NameError) as e:
                raise BlueprintSyntaxError(f'invalid signature for `{attr_name}()`: {e}')

        setattr(new_class, NC_FIELDS_ATTR, nc_fields)
        return new_class

    @staticmethod
    def _validate_initialize_method(attrs: Any) -> None:
        if NC_INITIALIZE_METHOD not in attrs:
            raise BlueprintSyntaxError(f'blueprints require a method called `{NC_INITIALIZE_METHOD}`')

        method = attrs[NC_INITIALIZE_METHOD]
        method_type = getattr(method, NC_METHOD_TYPE_ATTR, None)

        if method_type is not NCMethodType.PUBLIC:
            raise BlueprintSyntaxError(f'`{NC_INITIALIZE_METHOD}` method must be annotated with @public')


class Blueprint(metaclass=_BlueprintBase):
    """Base class for all blueprints.

    Example:

        class MyBlueprint(Blueprint):
            owner: Address
            balances: dict[Address, Amount]

            @public
            def initialize(self, ctx: Context) -> None:
                self.owner = ctx.get_caller_address()
    """

    __slots__ = ('__env',)

    def __init__(self, env: BlueprintEnvironment) -> None:
        self.__env = env

    @final
    @property
    def syscall(self) -> BlueprintEnvironment:
        """Return the syscall provider for the current contract."""
        return self.__env

    @final
    @property
    def log(self) -> NCLogger:
        """Return the logger for the current contract."""
        return self.syscall.__log__
