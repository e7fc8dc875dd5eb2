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
from datetime import datetime, timezone
from decimal import Decimal

import bson.decimal128
import pytest

from bsonbuilder.exception import RangeError
from bsonbuilder.types import Binary, Decimal128, MaxKey, MinKey, ObjectId, Timestamp


@pytest.mark.parametrize(
    'value',
    [
        '0',
        '-0',
        '1',
        '1.5',
        '-123.456',
        '0.001',
        '1E-6176',
        '1E+10',
        '9999999999999999999999999999999999',
        '1.000000000000000000000000000000000',
        'Infinity',
        '-Infinity',
        'NaN',
    ]
)
def test_decimal128_matches_pymongo(value: str) -> None:
    ours = Decimal128(value)
    assert ours.bid == bson.decimal128.Decimal128(value).bid
    assert Decimal128(ours.bid) == ours


@pytest.mark.parametrize('value', ['-123.456', '0.001', '1E+10', 'Infinity'])
def test_decimal128_to_decimal(value: str) -> None:
    assert Decimal128(value).to_decimal() == Decimal(value)


def test_decimal128_nan() -> None:
    assert Decimal128('NaN').to_decimal().is_nan()


@pytest.mark.parametrize('value', ['1E+7000', '12345678901234567890123456789012345'])
def test_decimal128_not_representable(value: str) -> None:
    with pytest.raises(ValueError):
        Decimal128(value)


def test_decimal128_invalid() -> None:
    with pytest.raises(ValueError):
        Decimal128(b'short')
    with pytest.raises(TypeError):
        Decimal128(1.5)  # type: ignore[arg-type]


def test_object_id() -> None:
    oid = ObjectId('5f2b8f1e0000000000000001')
    assert ObjectId(oid.binary) == oid
    assert str(oid) == '5f2b8f1e0000000000000001'
    assert oid.generation_time == datetime(2020, 8, 6, 5, 3, 26, tzinfo=timezone.utc)
    with pytest.raises(ValueError):
        ObjectId('xyz')
    with pytest.raises(ValueError):
        ObjectId(b'short')


def test_generated_object_ids_are_unique() -> None:
    first, second = ObjectId.generate(), ObjectId.generate()
    assert first != second
    assert first.binary[4:9] == second.binary[4:9]


def test_timestamp_range() -> None:
    Timestamp(time=2**32 - 1, inc=0)
    with pytest.raises(RangeError):
        Timestamp(time=2**32, inc=0)
    with pytest.raises(RangeError):
        Timestamp(time=0, inc=-1)


def test_binary_subtype_range() -> None:
    with pytest.raises(ValueError):
        Binary(b'', 256)
    with pytest.raises(TypeError):
        Binary(bytearray(), 0)  # type: ignore[arg-type]


def test_min_max_keys() -> None:
    assert MinKey() == MinKey()
    assert MaxKey() != MinKey()
    assert len({MinKey(), MinKey()}) == 1


@pytest.mark.parametrize('value', ['0.1', '-7E+3', '1234567890123456789012345678901234'])
def test_decimal128_from_decimal(value: str) -> None:
    ours = Decimal128.from_decimal(Decimal(value))
    assert ours == Decimal128(value)
    assert ours.bid == bson.decimal128.Decimal128(Decimal(value)).bid
    assert ours.to_decimal() == Decimal(value)


def test_object_id_invalid_hex_hides_the_parse_error() -> None:
    with pytest.raises(ValueError) as exc_info:
        ObjectId('zz' * 12)
    assert exc_info.value.__cause__ is None
    assert exc_info.value.__suppress_context__
