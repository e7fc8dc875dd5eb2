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
The value tree consumed by the BSON builder.

A `Value` is an immutable node that is either a container (document or array), a scalar, a null or a missing value.
Missing values are placeholders for "nothing here": builders skip them entirely instead of writing a null.

>>> value = Value.from_native({'a': 1, 'b': [True, MISSING, 'x']})
>>> value.kind
<ValueKind.DOCUMENT: 'document'>
>>> value['a'].as_scalar()
Scalar(kind=<ScalarKind.INT32: 'int32'>, payload=1)
>>> value.to_native()
{'a': 1, 'b': [True, 'x']}
"""

from __future__ import annotations

import decimal
from collections.abc import Iterable, Iterator, Mapping, Sequence
from datetime import datetime
from enum import Enum, unique
from types import MappingProxyType
from typing import Any, Final, NamedTuple, final

from typing_extensions import assert_never

from bsonbuilder.types import Binary, BinarySubtype, Decimal128, MaxKey, MinKey, ObjectId, Timestamp

INT32_MIN: Final[int] = -2**31
INT32_MAX: Final[int] = 2**31 - 1
INT64_MIN: Final[int] = -2**63
INT64_MAX: Final[int] = 2**63 - 1


@unique
class ValueKind(Enum):
    NULL = 'null'
    DOCUMENT = 'document'
    ARRAY = 'array'
    SCALAR = 'scalar'
    MISSING = 'missing'


@unique
class ScalarKind(Enum):
    BOOL = 'bool'
    INT32 = 'int32'
    INT64 = 'int64'
    # not a BSON type, it is checked to fit in an int64 when encoded
    UINT64 = 'uint64'
    DOUBLE = 'double'
    STRING = 'string'
    BINARY = 'binary'
    DATETIME = 'datetime'
    OBJECT_ID = 'object_id'
    DECIMAL128 = 'decimal128'
    MIN_KEY = 'min_key'
    MAX_KEY = 'max_key'
    TIMESTAMP = 'timestamp'


class Scalar(NamedTuple):
    kind: ScalarKind
    payload: Any


@final
class _MissingType:
    __slots__ = ()

    def __repr__(self) -> str:
        return 'MISSING'

    def __reduce__(self) -> str:
        return 'MISSING'


# Use MISSING in native objects given to `Value.from_native` to get a missing value.
MISSING: Final[_MissingType] = _MissingType()


@final
class Value:
    __slots__ = ('_kind', '_data')

    _kind: ValueKind
    _data: Any

    def __init__(self, kind: ValueKind, data: Any = None) -> None:
        """Use the classmethods instead, they check that the data matches the kind."""
        self._kind = kind
        self._data = data

    # constructors for each kind of node:

    @classmethod
    def null(cls) -> Value:
        return cls(ValueKind.NULL)

    @classmethod
    def missing(cls) -> Value:
        return cls(ValueKind.MISSING)

    @classmethod
    def document(cls, items: Mapping[str, Value] | Iterable[tuple[str, Value]] = ()) -> Value:
        """Create a document, the order of the items is preserved and keys must be unique."""
        pairs = items.items() if isinstance(items, Mapping) else items
        members: dict[str, Value] = {}
        for key, member in pairs:
            if not isinstance(key, str):
                raise TypeError(f'document keys must be str, not {type(key).__name__}')
            if not isinstance(member, Value):
                raise TypeError(f'document members must be Value, not {type(member).__name__}')
            if key in members:
                raise ValueError(f'duplicate key: {key!r}')
            members[key] = member
        return cls(ValueKind.DOCUMENT, MappingProxyType(members))

    @classmethod
    def array(cls, elements: Iterable[Value] = ()) -> Value:
        elements = tuple(elements)
        for element in elements:
            if not isinstance(element, Value):
                raise TypeError(f'array elements must be Value, not {type(element).__name__}')
        return cls(ValueKind.ARRAY, elements)

    @classmethod
    def _scalar(cls, kind: ScalarKind, payload: Any, expected: type | tuple[type, ...]) -> Value:
        if not isinstance(payload, expected):
            raise TypeError(f'{kind.value} payload cannot be {type(payload).__name__}')
        return cls(ValueKind.SCALAR, Scalar(kind, payload))

    @classmethod
    def boolean(cls, value: bool) -> Value:
        return cls._scalar(ScalarKind.BOOL, value, bool)

    @classmethod
    def int32(cls, value: int) -> Value:
        return cls._scalar(ScalarKind.INT32, value, int)

    @classmethod
    def int64(cls, value: int) -> Value:
        return cls._scalar(ScalarKind.INT64, value, int)

    @classmethod
    def uint64(cls, value: int) -> Value:
        return cls._scalar(ScalarKind.UINT64, value, int)

    @classmethod
    def double(cls, value: float) -> Value:
        return cls._scalar(ScalarKind.DOUBLE, value, float)

    @classmethod
    def string(cls, value: str | bytes) -> Value:
        """Create a string, raw bytes are accepted and are only checked to be UTF-8 when encoded."""
        return cls._scalar(ScalarKind.STRING, value, (str, bytes))

    @classmethod
    def binary(cls, data: bytes | Binary, subtype: int = BinarySubtype.GENERIC) -> Value:
        if not isinstance(data, Binary):
            data = Binary(bytes(data), subtype)
        return cls._scalar(ScalarKind.BINARY, data, Binary)

    @classmethod
    def date_time(cls, value: datetime) -> Value:
        return cls._scalar(ScalarKind.DATETIME, value, datetime)

    @classmethod
    def object_id(cls, value: ObjectId) -> Value:
        return cls._scalar(ScalarKind.OBJECT_ID, value, ObjectId)

    @classmethod
    def decimal128(cls, value: Decimal128 | decimal.Decimal | str) -> Value:
        if not isinstance(value, Decimal128):
            value = Decimal128(value)
        return cls._scalar(ScalarKind.DECIMAL128, value, Decimal128)

    @classmethod
    def min_key(cls) -> Value:
        return cls._scalar(ScalarKind.MIN_KEY, MinKey(), MinKey)

    @classmethod
    def max_key(cls) -> Value:
        return cls._scalar(ScalarKind.MAX_KEY, MaxKey(), MaxKey)

    @classmethod
    def timestamp(cls, value: Timestamp) -> Value:
        return cls._scalar(ScalarKind.TIMESTAMP, value, Timestamp)

    @classmethod
    def from_native(cls, obj: Any) -> Value:
        """Convert a Python object into a value tree.

        Mappings become documents, lists and tuples become arrays and `MISSING` becomes a missing value. An `int`
        becomes an int32 if it fits, else an int64 if it fits, else an uint64 (which fails to encode if it's too big
        for an int64).
        """
        match obj:
            case Value():
                return obj
            case _MissingType():
                return cls.missing()
            case None:
                return cls.null()
            case bool():
                return cls.boolean(obj)
            case int():
                if INT32_MIN <= obj <= INT32_MAX:
                    return cls.int32(obj)
                if INT64_MIN <= obj <= INT64_MAX:
                    return cls.int64(obj)
                return cls.uint64(obj)
            case float():
                return cls.double(obj)
            case str():
                return cls.string(obj)
            case bytes() | bytearray() | memoryview():
                return cls.binary(bytes(obj))
            case Binary():
                return cls.binary(obj)
            case datetime():
                return cls.date_time(obj)
            case ObjectId():
                return cls.object_id(obj)
            case Decimal128() | decimal.Decimal():
                return cls.decimal128(obj)
            case Timestamp():
                return cls.timestamp(obj)
            case MinKey():
                return cls.min_key()
            case MaxKey():
                return cls.max_key()
            case Mapping():
                return cls.document((key, cls.from_native(member)) for key, member in obj.items())
            case list() | tuple():
                return cls.array(cls.from_native(element) for element in obj)
            case _:
                raise TypeError(f'cannot convert {type(obj).__name__} to a value')

    # accessors:

    @property
    def kind(self) -> ValueKind:
        return self._kind

    def is_missing(self) -> bool:
        return self._kind is ValueKind.MISSING

    def is_null(self) -> bool:
        return self._kind is ValueKind.NULL

    def is_document(self) -> bool:
        return self._kind is ValueKind.DOCUMENT

    def is_array(self) -> bool:
        return self._kind is ValueKind.ARRAY

    def is_scalar(self) -> bool:
        return self._kind is ValueKind.SCALAR

    def as_document(self) -> Mapping[str, Value]:
        if self._kind is not ValueKind.DOCUMENT:
            raise TypeError(f'expected a document, got {self._kind.value}')
        return self._data

    def as_array(self) -> Sequence[Value]:
        if self._kind is not ValueKind.ARRAY:
            raise TypeError(f'expected an array, got {self._kind.value}')
        return self._data

    def as_scalar(self) -> Scalar:
        if self._kind is not ValueKind.SCALAR:
            raise TypeError(f'expected a scalar, got {self._kind.value}')
        return self._data

    def __len__(self) -> int:
        if self._kind is ValueKind.DOCUMENT or self._kind is ValueKind.ARRAY:
            return len(self._data)
        raise TypeError(f'{self._kind.value} has no length')

    def __iter__(self) -> Iterator[Any]:
        """Iterate over the keys of a document or the elements of an array."""
        if self._kind is ValueKind.DOCUMENT or self._kind is ValueKind.ARRAY:
            return iter(self._data)
        raise TypeError(f'{self._kind.value} is not iterable')

    def __getitem__(self, key: str | int) -> Value:
        if self._kind is ValueKind.DOCUMENT:
            if not isinstance(key, str):
                raise TypeError('document keys must be str')
            return self._data[key]
        if self._kind is ValueKind.ARRAY:
            if not isinstance(key, int):
                raise TypeError('array indexes must be int')
            return self._data[key]
        raise TypeError(f'{self._kind.value} is not subscriptable')

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        if self._kind is not other._kind:
            return False
        if self._kind is ValueKind.DOCUMENT:
            # order is part of a document's identity
            return list(self._data.items()) == list(other._data.items())
        return self._data == other._data

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        match self._kind:
            case ValueKind.NULL | ValueKind.MISSING:
                return f'Value.{self._kind.name.lower()}()'
            case ValueKind.DOCUMENT:
                return f'Value.document({dict(self._data)!r})'
            case ValueKind.ARRAY:
                return f'Value.array({list(self._data)!r})'
            case ValueKind.SCALAR:
                return f'Value({self._data.kind.value}, {self._data.payload!r})'
            case _:
                assert_never(self._kind)

    def to_native(self) -> Any:
        """Convert back to Python objects, the inverse of `from_native`.

        Missing members and elements are left out, generic binary data is returned as `bytes` and raw `bytes`
        strings are decoded.
        """
        match self._kind:
            case ValueKind.NULL:
                return None
            case ValueKind.MISSING:
                return MISSING
            case ValueKind.DOCUMENT:
                return {key: member.to_native() for key, member in self._data.items() if not member.is_missing()}
            case ValueKind.ARRAY:
                return [element.to_native() for element in self._data if not element.is_missing()]
            case ValueKind.SCALAR:
                return _scalar_to_native(self._data)
            case _:
                assert_never(self._kind)


def _scalar_to_native(scalar: Scalar) -> Any:
    match scalar.kind:
        case ScalarKind.STRING:
            payload = scalar.payload
            return payload.decode('utf-8') if isinstance(payload, bytes) else payload
        case ScalarKind.BINARY:
            binary = scalar.payload
            return binary.data if binary.subtype == BinarySubtype.GENERIC else binary
        case (
            ScalarKind.BOOL
            | ScalarKind.INT32
            | ScalarKind.INT64
            | ScalarKind.UINT64
            | ScalarKind.DOUBLE
            | ScalarKind.DATETIME
            | ScalarKind.OBJECT_ID
            | ScalarKind.DECIMAL128
            | ScalarKind.MIN_KEY
            | ScalarKind.MAX_KEY
            | ScalarKind.TIMESTAMP
        ):
            return scalar.payload
        case _:
            assert_never(scalar.kind)
