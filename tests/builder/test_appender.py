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

import pytest

from bsonbuilder.builder import DocumentRegion
from bsonbuilder.builder.appender import (
    append_binary,
    append_bson_document,
    append_int32,
    append_int64,
    append_scalar,
    append_string,
    append_uint64,
)
from bsonbuilder.exception import EncodingError, RangeError, StructuralError
from bsonbuilder.serialization import Serializer
from bsonbuilder.types import Binary
from bsonbuilder.value import Value


def _elements(append, *args, **kwargs) -> str:
    """Hex of the elements written by an appender, without the document framing."""
    root = DocumentRegion(Serializer.build_bytes_serializer())
    append(root, *args, **kwargs)
    root.close()
    return bytes(root.finalize())[4:-1].hex()


def test_int32_bounds() -> None:
    assert _elements(append_int32, 'a', 2**31 - 1) == '106100ffffff7f'
    assert _elements(append_int32, 'a', -2**31) == '10610000000080'
    with pytest.raises(RangeError):
        _elements(append_int32, 'a', 2**31)


def test_int64_bounds() -> None:
    assert _elements(append_int64, 'a', -1) == '126100ffffffffffffffff'
    with pytest.raises(RangeError):
        _elements(append_int64, 'a', -2**63 - 1)


def test_uint64_is_written_as_int64() -> None:
    assert _elements(append_uint64, 'a', 2**63 - 1) == '126100ffffffffffffff7f'
    with pytest.raises(RangeError, match="The value 9223372036854775808 of 'a' is too high for BSON"):
        _elements(append_uint64, 'a', 2**63)
    with pytest.raises(RangeError, match='is negative'):
        _elements(append_uint64, 'a', -1)


def test_invalid_string_writes_nothing() -> None:
    root = DocumentRegion(Serializer.build_bytes_serializer())
    with pytest.raises(EncodingError):
        append_string(root, 's', b'\x80')
    assert root.cur_pos() == 4


def test_binary() -> None:
    assert _elements(append_binary, 'b', b'\x01', subtype=0x80) == '05620001000000' + '8001'
    assert _elements(append_binary, 'b', bytearray(b'\x01'), subtype=0) == '05620001000000' + '0001'


def test_scalars_dispatch() -> None:
    value = Value.date_time(datetime(1970, 1, 1, 0, 0, 1, tzinfo=timezone.utc))
    assert _elements(append_scalar, 'd', value.as_scalar()) == '096400e803000000000000'
    value = Value.binary(Binary(b'', 0x05))
    assert _elements(append_scalar, 'b', value.as_scalar()) == '0562000000000005'
    assert _elements(append_scalar, 'm', Value.min_key().as_scalar()) == 'ff6d00'
    assert _elements(append_scalar, 'm', Value.max_key().as_scalar()) == '7f6d00'
    assert _elements(append_scalar, 'u', Value.uint64(5).as_scalar()) == '1275000500000000000000'


def test_bson_document_is_copied() -> None:
    assert _elements(append_bson_document, 'd', bytes.fromhex('0500000000')) == '0364000500000000'


@pytest.mark.parametrize('data', ['', '05000000', '0600000000', '0500000001'])
def test_bson_document_framing(data: str) -> None:
    with pytest.raises(StructuralError):
        _elements(append_bson_document, 'd', bytes.fromhex(data))
