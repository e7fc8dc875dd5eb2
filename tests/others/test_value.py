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

import pytest

from bsonbuilder.types import Binary, BinarySubtype, Decimal128, ObjectId
from bsonbuilder.value import MISSING, INT32_MAX, INT64_MAX, Scalar, ScalarKind, Value, ValueKind


@pytest.mark.parametrize(
    ['native', 'kind'],
    [
        (True, ScalarKind.BOOL),
        (INT32_MAX, ScalarKind.INT32),
        (INT32_MAX + 1, ScalarKind.INT64),
        (INT64_MAX + 1, ScalarKind.UINT64),
        (1.0, ScalarKind.DOUBLE),
        ('x', ScalarKind.STRING),
        (b'x', ScalarKind.BINARY),
        (datetime.now(timezone.utc), ScalarKind.DATETIME),
        (ObjectId.generate(), ScalarKind.OBJECT_ID),
        (Decimal('1.1'), ScalarKind.DECIMAL128),
    ]
)
def test_from_native_scalars(native: object, kind: ScalarKind) -> None:
    value = Value.from_native(native)
    assert value.is_scalar()
    assert value.as_scalar().kind is kind


def test_from_native_containers() -> None:
    value = Value.from_native({'a': [None, MISSING], 'b': ()})
    assert value.is_document()
    assert value['a'].is_array()
    assert value['a'][0].is_null()
    assert value['a'][1].is_missing()
    assert len(value['b']) == 0
    assert list(value) == ['a', 'b']


def test_from_native_unsupported() -> None:
    with pytest.raises(TypeError):
        Value.from_native(object())
    with pytest.raises(TypeError):
        Value.from_native({1: 'x'})


def test_constructors_check_payload() -> None:
    with pytest.raises(TypeError):
        Value.double(1)
    with pytest.raises(TypeError):
        Value.string(1)
    with pytest.raises(TypeError):
        Value.array([1])
    with pytest.raises(TypeError):
        Value.document({'a': 1})


def test_duplicate_keys() -> None:
    with pytest.raises(ValueError):
        Value.document([('a', Value.null()), ('a', Value.null())])


def test_accessors_check_kind() -> None:
    with pytest.raises(TypeError):
        Value.null().as_document()
    with pytest.raises(TypeError):
        Value.document().as_array()
    with pytest.raises(TypeError):
        Value.array().as_scalar()
    with pytest.raises(TypeError):
        len(Value.int32(1))
    with pytest.raises(TypeError):
        Value.document()[0]


def test_document_equality_is_ordered() -> None:
    ab = Value.document([('a', Value.int32(1)), ('b', Value.int32(2))])
    ba = Value.document([('b', Value.int32(2)), ('a', Value.int32(1))])
    assert ab == Value.from_native({'a': 1, 'b': 2})
    assert ab != ba
    assert Value.int32(1) != Value.int64(1)
    assert Value.null() != Value.missing()


def test_values_are_not_hashable() -> None:
    with pytest.raises(TypeError):
        hash(Value.null())


def test_document_is_immutable() -> None:
    value = Value.document({'a': Value.null()})
    with pytest.raises(TypeError):
        value.as_document()['b'] = Value.null()  # type: ignore[index]


def test_repr() -> None:
    assert repr(Value.null()) == 'Value.null()'
    assert repr(Value.missing()) == 'Value.missing()'
    assert repr(Value.array([Value.boolean(True)])) == 'Value.array([Value(bool, True)])'


def test_to_native() -> None:
    native = {
        'bin': Binary(b'x', BinarySubtype.UUID),
        'raw': b'y',
        'dec': Decimal128('2.5'),
        'str': 'z',
    }
    value = Value.from_native({**native, 'gone': MISSING})
    assert value.to_native() == native
    assert Value.string(b'abc').to_native() == 'abc'
    assert Value.missing().to_native() is MISSING


def test_scalar_is_a_tuple() -> None:
    assert Value.int64(3).as_scalar() == Scalar(ScalarKind.INT64, 3)
    assert Value.int64(3).kind is ValueKind.SCALAR
