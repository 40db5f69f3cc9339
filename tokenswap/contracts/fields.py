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

from typing import TYPE_CHECKING, Any, Generic, Iterator, TypeVar, get_args, get_origin

if TYPE_CHECKING:
    from tokenswap.contracts.blueprint import Blueprint
    from tokenswap.contracts.storage import NCContractStorage

T = TypeVar('T')
K = TypeVar('K')
V = TypeVar('V')

_SCALAR_TYPES: tuple[type, ...] = (int, str, bytes, bool)

_KEY_SEPARATOR: bytes = b':'


def _unwrap_new_type(type_: Any) -> Any:
    """Return the runtime type behind a chain of `NewType`s."""
    while hasattr(type_, '__supertype__'):
        type_ = type_.__supertype__
    return type_


def _check_value(name: str, type_: Any, value: Any) -> None:
    """Raise TypeError if `value` is not an instance of the field type."""
    origin = get_origin(type_)
    if origin is tuple:
        if not isinstance(value, tuple):
            raise TypeError(f'`{name}` expects a tuple, found `{type(value).__name__}`')
        for item_type, item in zip(get_args(type_), value):
            _check_value(name, _unwrap_new_type(item_type), item)
        return

    # bool is a subclass of int, but an int field must not silently store a bool
    if type_ is int and isinstance(value, bool):
        raise TypeError(f'`{name}` expects `int`, found `bool`')
    if not isinstance(value, type_):
        raise TypeError(f'`{name}` expects `{type_.__name__}`, found `{type(value).__name__}`')


def _encode_dict_key(key: Any) -> bytes:
    match key:
        case bool():
            return b'?' + (b'1' if key else b'0')
        case int():
            return b'i' + str(key).encode('ascii')
        case str():
            return b's' + key.encode('utf-8')
        case bytes():
            return b'b' + key
        case _:
            raise TypeError(f'unsupported dict key type: `{type(key).__name__}`')


def _get_storage(instance: Blueprint) -> NCContractStorage:
    return instance.syscall.__storage__


class Field(Generic[T]):
    """A blueprint attribute backed by the contract storage.

    `self.foo = 1` stores `1` under a key derived from the name `foo`. Reading a field that was never set raises
    AttributeError.
    """
    __slots__ = ('_name', '_key', '_type')

    def __init__(self, name: str, type_: Any) -> None:
        self._name = name
        self._key = name.encode('utf-8')
        self._type = type_

    def __get__(self, instance: Blueprint | None, owner: object | None = None) -> T:
        if instance is None:
            raise AttributeError('fields are only available on blueprint instances')
        try:
            return _get_storage(instance).get(self._key)
        except KeyError:
            raise AttributeError(f'attribute not initialized: `{self._name}`')

    def __set__(self, instance: Blueprint, value: T) -> None:
        _check_value(self._name, self._type, value)
        _get_storage(instance).put(self._key, value)

    def __delete__(self, instance: Blueprint) -> None:
        storage = _get_storage(instance)
        if not storage.has(self._key):
            raise AttributeError(f'attribute not initialized: `{self._name}`')
        storage.delete(self._key)


class DictField(Generic[K, V]):
    """A `dict[K, V]` blueprint attribute. Each item is stored under its own key.

    Assigning a dict replaces the given items. Items that are not assigned keep their values.
    """
    __slots__ = ('_name', '_prefix', '_key_type', '_value_type')

    def __init__(self, name: str, key_type: Any, value_type: Any) -> None:
        self._name = name
        self._prefix = name.encode('utf-8') + _KEY_SEPARATOR
        self._key_type = key_type
        self._value_type = value_type

    def __get__(self, instance: Blueprint | None, owner: object | None = None) -> DictStorageContainer[K, V]:
        if instance is None:
            raise AttributeError('fields are only available on blueprint instances')
        return DictStorageContainer(self, _get_storage(instance))

    def __set__(self, instance: Blueprint, value: dict[K, V]) -> None:
        if not isinstance(value, dict):
            raise TypeError(f'`{self._name}` expects a dict, found `{type(value).__name__}`')
        container = DictStorageContainer(self, _get_storage(instance))
        for k, v in value.items():
            container[k] = v


class DictStorageContainer(Generic[K, V]):
    """Mapping interface over the items of a `DictField`. It does not support iteration."""
    __slots__ = ('_field', '_storage')

    def __init__(self, field: DictField[K, V], storage: NCContractStorage) -> None:
        self._field = field
        self._storage = storage

    def _to_key(self, key: K) -> bytes:
        _check_value(self._field._name, self._field._key_type, key)
        return self._field._prefix + _encode_dict_key(key)

    def __getitem__(self, key: K) -> V:
        try:
            return self._storage.get(self._to_key(key))
        except KeyError:
            raise KeyError(key)

    def __setitem__(self, key: K, value: V) -> None:
        _check_value(self._field._name, self._field._value_type, value)
        self._storage.put(self._to_key(key), value)

    def __delitem__(self, key: K) -> None:
        internal_key = self._to_key(key)
        if not self._storage.has(internal_key):
            raise KeyError(key)
        self._storage.delete(internal_key)

    def __contains__(self, key: K) -> bool:
        return self._storage.has(self._to_key(key))

    def __iter__(self) -> Iterator[K]:
        raise TypeError('dict fields cannot be iterated')

    def get(self, key: K, default: V | None = None) -> V | None:
        return self._storage.get(self._to_key(key), default=default)


def make_field_for_type(name: str, type_: Any) -> Field | DictField:
    """Create the Field instance for an annotated blueprint attribute, or raise TypeError if unsupported."""
    origin = get_origin(type_)
    if origin is dict:
        key_type, value_type = (_unwrap_new_type(arg) for arg in get_args(type_))
        if key_type not in _SCALAR_TYPES or value_type not in _SCALAR_TYPES:
            raise TypeError(f'unsupported dict field type: {type_}')
        return DictField(name, key_type, value_type)

    if origin is tuple:
        args = get_args(type_)
        if not args or Ellipsis in args or any(_unwrap_new_type(arg) not in _SCALAR_TYPES for arg in args):
            raise TypeError(f'unsupported tuple field type: {type_}')
        return Field(name, type_)

    type_ = _unwrap_new_type(type_)
    if type_ not in _SCALAR_TYPES:
        raise TypeError(f'unsupported field type: {type_}')
    return Field(name, type_)
