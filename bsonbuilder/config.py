#  Copyright 2025 Hathor Labs
#
#  Licensed under the Apache License, Version 2.0 (the "License");
#  you may not use this file except in compliance with the License.
#  You may obtain a copy of the License at
#
#  http://www.apache.org/licenses/LICENSE-2.0
#
#  Unless required by applicable law or agreed to in writing, software
#  distributed under the License is distributed on an "AS IS" BASIS,
#  WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#  See the License for the specific language governing permissions and
#  limitations under the License.

"""
Named configuration entries stored as value trees.

`DocsMap` holds one value per config name and is what typed config lookups read from. `ConfigValue` is one entry
converted to a Python type and `ValueDict` is a typed mapping with a default entry: looking up a key that is not
present falls back to the default key.

>>> docs = DocsMap({'TIMEOUTS': Value.from_native({'__default__': 100, 'fast': 10})})
>>> def payload(value):
...     return value.as_scalar().payload
>>> timeouts = ValueDict.from_docs_map('TIMEOUTS', docs, payload, default_key='__default__')
>>> timeouts['fast'], timeouts['slow']
(10, 100)
>>> docs.requested_names()
['TIMEOUTS']
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from typing import Generic, Optional, TypeVar

from bsonbuilder.builder import build_bson
from bsonbuilder.conf import get_global_settings
from bsonbuilder.exception import NotFoundError
from bsonbuilder.value import Value

VT = TypeVar('VT')


class DocsMap:
    def __init__(self, docs: Optional[Mapping[str, Value]] = None) -> None:
        self._docs: dict[str, Value] = dict(docs or {})
        self._requested_names: set[str] = set()

    def get(self, name: str) -> Value:
        """Returns config item or raises NotFoundError if it's missing, every name asked for is recorded."""
        self._requested_names.add(name)
        try:
            return self._docs[name]
        except KeyError:
            raise NotFoundError(f"no config value for '{name}'") from None

    def set(self, name: str, value: Value) -> None:
        if not isinstance(value, Value):
            raise TypeError(f'config values must be Value, not {type(value).__name__}')
        self._docs[name] = value

    def size(self) -> int:
        return len(self._docs)

    def __len__(self) -> int:
        return len(self._docs)

    def __contains__(self, name: object) -> bool:
        return name in self._docs

    def names(self) -> list[str]:
        return sorted(self._docs)

    def merge_from_other(self, other: DocsMap) -> None:
        """Copy all entries from another map, they replace the entries with the same name."""
        self._docs.update(other._docs)

    def requested_names(self) -> list[str]:
        return sorted(self._requested_names)

    def to_bson(self, name: str) -> bytes:
        """Encode the named entry as a BSON document, it must be a document or an array."""
        return build_bson(self.get(name))


class ConfigValue(Generic[VT]):
    """A single config entry converted to a Python type when it's loaded."""

    def __init__(self, name: str, value: VT) -> None:
        self._name = name
        self._value = value

    @classmethod
    def from_docs_map(cls, name: str, docs_map: DocsMap, converter: Callable[[Value], VT]) -> ConfigValue[VT]:
        return cls(name, converter(docs_map.get(name)))

    @property
    def name(self) -> str:
        return self._name

    def get(self) -> VT:
        return self._value

    def __repr__(self) -> str:
        return f'ConfigValue({self._name!r}, {self._value!r})'


class ValueDict(Generic[VT]):
    def __init__(
        self,
        name: str = '',
        values: Optional[Mapping[str, VT]] = None,
        *,
        default_key: Optional[str] = None,
    ) -> None:
        if default_key is None:
            default_key = get_global_settings().VALUE_DICT_DEFAULT_KEY
        self._name = name
        self._values: dict[str, VT] = dict(values or {})
        self._default_key = default_key

    @classmethod
    def from_value(
        cls,
        name: str,
        value: Value,
        converter: Callable[[Value], VT],
        *,
        default_key: Optional[str] = None,
    ) -> ValueDict[VT]:
        """Convert each member of a document, missing members are left out."""
        values = {key: converter(member) for key, member in value.as_document().items() if not member.is_missing()}
        return cls(name, values, default_key=default_key)

    @classmethod
    def from_docs_map(
        cls,
        name: str,
        docs_map: DocsMap,
        converter: Callable[[Value], VT],
        *,
        default_key: Optional[str] = None,
    ) -> ValueDict[VT]:
        return cls.from_value(name, docs_map.get(name), converter, default_key=default_key)

    @property
    def name(self) -> str:
        return self._name

    def _not_found(self, key: str) -> NotFoundError:
        return NotFoundError(f"no value for '{key}'" + (f' in {self._name}' if self._name else ''))

    def has_value(self, key: str) -> bool:
        return key in self._values

    def has_default_value(self) -> bool:
        return self.has_value(self._default_key)

    def get_default_value(self) -> VT:
        try:
            return self._values[self._default_key]
        except KeyError:
            raise self._not_found(self._default_key) from None

    def __getitem__(self, key: Optional[str]) -> VT:
        if key is None:
            return self.get_default_value()
        if key in self._values:
            return self._values[key]
        if self._default_key in self._values:
            return self._values[self._default_key]
        raise self._not_found(key)

    def get(self, key: Optional[str]) -> VT:
        return self[key]

    def get_optional(self, key: str) -> Optional[VT]:
        if key in self._values:
            return self._values[key]
        return self._values.get(self._default_key)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)
