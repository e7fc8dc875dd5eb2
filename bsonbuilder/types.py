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
Types of the BSON values that have no direct Python builtin counterpart.

Each of these types has a fixed-size binary representation that is written as is by the encoder.
"""

from __future__ import annotations

import decimal
import itertools
import os
import random
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import IntEnum, unique
from typing import Any, Final

from bsonbuilder.exception import RangeError

UINT32_MAX: Final[int] = 2**32 - 1


@unique
class ElementType(IntEnum):
    """Tag byte that precedes each element of a BSON document."""
    DOUBLE = 0x01
    STRING = 0x02
    DOCUMENT = 0x03
    ARRAY = 0x04
    BINARY = 0x05
    OBJECT_ID = 0x07
    BOOL = 0x08
    DATETIME = 0x09
    NULL = 0x0A
    INT32 = 0x10
    TIMESTAMP = 0x11
    INT64 = 0x12
    DECIMAL128 = 0x13
    MIN_KEY = 0xFF
    MAX_KEY = 0x7F


@unique
class BinarySubtype(IntEnum):
    GENERIC = 0x00
    FUNCTION = 0x01
    BINARY_OLD = 0x02
    UUID_OLD = 0x03
    UUID = 0x04
    MD5 = 0x05
    ENCRYPTED = 0x06
    COLUMN = 0x07
    SENSITIVE = 0x08
    USER_DEFINED = 0x80


@dataclass(frozen=True, slots=True)
class Binary:
    """A byte sequence with a BSON binary subtype."""
    data: bytes
    subtype: int = BinarySubtype.GENERIC

    def __post_init__(self) -> None:
        if not isinstance(self.data, bytes):
            raise TypeError('expected bytes')
        if not 0 <= self.subtype <= 0xFF:
            raise ValueError('binary subtype must fit in one byte')


@dataclass(frozen=True, slots=True)
class Timestamp:
    """BSON internal timestamp, a pair of seconds since the epoch and an ordinal within that second."""
    time: int
    inc: int

    def __post_init__(self) -> None:
        if not 0 <= self.time <= UINT32_MAX:
            raise RangeError(f'timestamp time {self.time} does not fit in 32 bits')
        if not 0 <= self.inc <= UINT32_MAX:
            raise RangeError(f'timestamp increment {self.inc} does not fit in 32 bits')


class MinKey:
    """Sentinel that compares lower than any other BSON value."""

    __slots__ = ()

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, MinKey)

    def __hash__(self) -> int:
        return hash(MinKey)

    def __repr__(self) -> str:
        return 'MinKey()'


class MaxKey:
    """Sentinel that compares higher than any other BSON value."""

    __slots__ = ()

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, MaxKey)

    def __hash__(self) -> int:
        return hash(MaxKey)

    def __repr__(self) -> str:
        return 'MaxKey()'


_OID_SIZE: Final[int] = 12
_OID_RANDOM: Final[bytes] = os.urandom(5)
_oid_counter = itertools.count(random.randint(0, 0xFFFFFF))


class ObjectId:
    """12-byte identifier: 4-byte big-endian timestamp, 5 random bytes and a 3-byte big-endian counter.

    >>> oid = ObjectId('5f2b8f1e0000000000000001')
    >>> oid.binary.hex()
    '5f2b8f1e0000000000000001'
    >>> oid.generation_time.isoformat()
    '2020-08-06T05:03:26+00:00'
    """

    __slots__ = ('_binary',)

    def __init__(self, oid: bytes | str) -> None:
        if isinstance(oid, str):
            try:
                oid = bytes.fromhex(oid)
            except ValueError:
                raise ValueError(f'{oid!r} is not a valid ObjectId hex string') from None
        if not isinstance(oid, bytes) or len(oid) != _OID_SIZE:
            raise ValueError(f'ObjectId must have exactly {_OID_SIZE} bytes')
        self._binary = oid

    @classmethod
    def generate(cls) -> ObjectId:
        """Create a new ObjectId for the current time."""
        counter = next(_oid_counter) & 0xFFFFFF
        timestamp = int(time.time()) & UINT32_MAX
        return cls(timestamp.to_bytes(4, 'big') + _OID_RANDOM + counter.to_bytes(3, 'big'))

    @property
    def binary(self) -> bytes:
        return self._binary

    @property
    def generation_time(self) -> datetime:
        timestamp = int.from_bytes(self._binary[:4], 'big')
        return datetime.fromtimestamp(timestamp, tz=timezone.utc)

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, ObjectId) and self._binary == other._binary

    def __hash__(self) -> int:
        return hash(self._binary)

    def __str__(self) -> str:
        return self._binary.hex()

    def __repr__(self) -> str:
        return f'ObjectId({self._binary.hex()!r})'


# IEEE 754-2008 decimal128 using the binary integer decimal (BID) encoding
_DEC128_EXPONENT_BIAS: Final[int] = 6176
_DEC128_EXPONENT_MAX: Final[int] = 6144
_DEC128_EXPONENT_MIN: Final[int] = -6143
_DEC128_MAX_DIGITS: Final[int] = 34
_DEC128_SIGN: Final[int] = 0x8000000000000000
_DEC128_INF: Final[int] = 0x7800000000000000
_DEC128_NAN: Final[int] = 0x7C00000000000000
_DEC128_SNAN: Final[int] = 0x7E00000000000000
_DEC128_EXPONENT_MASK: Final[int] = 3 << 61
_DEC128_LOW_MASK: Final[int] = 0xFFFFFFFFFFFFFFFF

_DEC128_CONTEXT: Final[decimal.Context] = decimal.Context(
    prec=_DEC128_MAX_DIGITS,
    rounding=decimal.ROUND_HALF_EVEN,
    Emin=_DEC128_EXPONENT_MIN,
    Emax=_DEC128_EXPONENT_MAX,
    capitals=1,
    clamp=1,
    traps=[decimal.InvalidOperation, decimal.Overflow, decimal.Inexact],
)


class Decimal128:
    """128-bit decimal floating point, stored as its 16 byte little-endian BID representation.

    >>> Decimal128('1.5').bid.hex()
    '0f000000000000000000000000003e30'
    >>> str(Decimal128('-Infinity'))
    '-Infinity'
    >>> Decimal128(Decimal128('0.001').bid).to_decimal()
    Decimal('0.001')
    """

    __slots__ = ('_bid',)

    def __init__(self, value: str | bytes | decimal.Decimal) -> None:
        if isinstance(value, bytes):
            if len(value) != 16:
                raise ValueError('Decimal128 must have exactly 16 bytes')
            self._bid = value
        elif isinstance(value, (str, decimal.Decimal)):
            self._bid = self._encode(decimal.Decimal(value))
        else:
            raise TypeError(f'cannot create a Decimal128 from {type(value).__name__}')

    @classmethod
    def from_decimal(cls, value: decimal.Decimal) -> Decimal128:
        return cls(value)

    @staticmethod
    def _encode(value: decimal.Decimal) -> bytes:
        if not value.is_finite():
            if value.is_snan():
                high = _DEC128_SNAN
            elif value.is_nan():
                high = _DEC128_NAN
            else:
                high = _DEC128_INF
            if value.is_signed():
                high |= _DEC128_SIGN
            low = 0
        else:
            try:
                value = _DEC128_CONTEXT.create_decimal(value)
            except decimal.DecimalException as e:
                raise ValueError(f'{value} cannot be represented exactly as a Decimal128') from e
            sign, digits, exponent = value.as_tuple()
            assert isinstance(exponent, int)
            significand = int(''.join(map(str, digits)) or '0')
            biased_exponent = exponent + _DEC128_EXPONENT_BIAS
            # at most 34 digits, so the significand always fits in the low 113 bits
            high = (significand >> 64) | (biased_exponent << 49)
            low = significand & _DEC128_LOW_MASK
            if sign:
                high |= _DEC128_SIGN
        return low.to_bytes(8, 'little') + high.to_bytes(8, 'little')

    @property
    def bid(self) -> bytes:
        return self._bid

    def to_decimal(self) -> decimal.Decimal:
        low = int.from_bytes(self._bid[:8], 'little')
        high = int.from_bytes(self._bid[8:], 'little')
        sign = 1 if high & _DEC128_SIGN else 0

        if (high & _DEC128_SNAN) == _DEC128_SNAN:
            return decimal.Decimal((sign, (), 'N'))
        if (high & _DEC128_NAN) == _DEC128_NAN:
            return decimal.Decimal((sign, (), 'n'))
        if (high & _DEC128_INF) == _DEC128_INF:
            return decimal.Decimal((sign, (), 'F'))

        if (high & _DEC128_EXPONENT_MASK) == _DEC128_EXPONENT_MASK:
            # the significand would exceed 34 digits, these are non-canonical and read as zero
            exponent = ((high & 0x1FFFE00000000000) >> 47) - _DEC128_EXPONENT_BIAS
            return decimal.Decimal((sign, (0,), exponent))
        exponent = ((high & 0x7FFF800000000000) >> 49) - _DEC128_EXPONENT_BIAS
        significand = ((high & 0x1FFFFFFFFFFFF) << 64) | low
        if significand >= 10**_DEC128_MAX_DIGITS:
            significand = 0
        digits = tuple(int(digit) for digit in str(significand))
        return decimal.Decimal((sign, digits, exponent))

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, Decimal128) and self._bid == other._bid

    def __hash__(self) -> int:
        return hash(self._bid)

    def __str__(self) -> str:
        return str(self.to_decimal())

    def __repr__(self) -> str:
        return f'Decimal128({str(self)!r})'
