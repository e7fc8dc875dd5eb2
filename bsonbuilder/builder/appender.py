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
Appenders write a single element into a document: the element tag, the key and the encoded value.

There is one function for each kind of value. Ranges and string encodings are checked here, at the moment of encoding,
so that a document is never written with a value that BSON cannot represent.
"""

from datetime import datetime

from typing_extensions import assert_never

from bsonbuilder.exception import RangeError, StructuralError
from bsonbuilder.serialization import Serializer
from bsonbuilder.serialization.encoding.binary import encode_binary
from bsonbuilder.serialization.encoding.bool import encode_bool
from bsonbuilder.serialization.encoding.cstring import encode_cstring
from bsonbuilder.serialization.encoding.fixed import encode_decimal128, encode_object_id, encode_timestamp
from bsonbuilder.serialization.encoding.float import encode_double
from bsonbuilder.serialization.encoding.int import encode_int
from bsonbuilder.serialization.encoding.utc_datetime import encode_datetime
from bsonbuilder.serialization.encoding.utf8 import encode_string, to_utf8
from bsonbuilder.serialization.types import Buffer
from bsonbuilder.types import Binary, Decimal128, ElementType, ObjectId, Timestamp
from bsonbuilder.value import INT32_MAX, INT32_MIN, INT64_MAX, INT64_MIN, Scalar, ScalarKind


def write_element_header(dest: Serializer, element_type: ElementType, key: str) -> None:
    dest.write_byte(element_type.value)
    encode_cstring(dest, key)


def append_null(dest: Serializer, key: str) -> None:
    write_element_header(dest, ElementType.NULL, key)


def append_bool(dest: Serializer, key: str, value: bool) -> None:
    write_element_header(dest, ElementType.BOOL, key)
    encode_bool(dest, value)


def append_int32(dest: Serializer, key: str, value: int) -> None:
    if not INT32_MIN <= value <= INT32_MAX:
        raise RangeError(f"The value {value} of '{key}' does not fit in an int32")
    write_element_header(dest, ElementType.INT32, key)
    encode_int(dest, value, length=4, signed=True)


def append_int64(dest: Serializer, key: str, value: int) -> None:
    if not INT64_MIN <= value <= INT64_MAX:
        raise RangeError(f"The value {value} of '{key}' does not fit in an int64")
    write_element_header(dest, ElementType.INT64, key)
    encode_int(dest, value, length=8, signed=True)


def append_uint64(dest: Serializer, key: str, value: int) -> None:
    """BSON has no unsigned 64-bit type, values are written as int64 and must fit in one."""
    if value < 0:
        raise RangeError(f"The value {value} of '{key}' is negative")
    if value > INT64_MAX:
        raise RangeError(f"The value {value} of '{key}' is too high for BSON")
    append_int64(dest, key, value)


def append_double(dest: Serializer, key: str, value: float) -> None:
    write_element_header(dest, ElementType.DOUBLE, key)
    encode_double(dest, value)


def append_string(dest: Serializer, key: str, value: str | bytes) -> None:
    data = to_utf8(value)
    write_element_header(dest, ElementType.STRING, key)
    encode_string(dest, data)


def append_datetime(dest: Serializer, key: str, value: datetime) -> None:
    write_element_header(dest, ElementType.DATETIME, key)
    encode_datetime(dest, value)


def append_binary(dest: Serializer, key: str, data: bytes, *, subtype: int) -> None:
    write_element_header(dest, ElementType.BINARY, key)
    encode_binary(dest, data, subtype=subtype)


def append_object_id(dest: Serializer, key: str, value: ObjectId) -> None:
    write_element_header(dest, ElementType.OBJECT_ID, key)
    encode_object_id(dest, value)


def append_decimal128(dest: Serializer, key: str, value: Decimal128) -> None:
    write_element_header(dest, ElementType.DECIMAL128, key)
    encode_decimal128(dest, value)


def append_min_key(dest: Serializer, key: str) -> None:
    write_element_header(dest, ElementType.MIN_KEY, key)


def append_max_key(dest: Serializer, key: str) -> None:
    write_element_header(dest, ElementType.MAX_KEY, key)


def append_timestamp(dest: Serializer, key: str, value: Timestamp) -> None:
    write_element_header(dest, ElementType.TIMESTAMP, key)
    encode_timestamp(dest, value)


def append_bson_document(dest: Serializer, key: str, data: Buffer) -> None:
    """Append a document that was already encoded, its bytes are copied as they are.

    Only the framing is checked: the size prefix must match and the last byte must be the terminator.
    """
    view = memoryview(data)
    if len(view) < 5:
        raise StructuralError('a BSON document has at least 5 bytes')
    size = int.from_bytes(view[:4], byteorder='little', signed=True)
    if size != len(view):
        raise StructuralError(f'BSON document size is {size} but {len(view)} bytes were given')
    if view[-1] != 0:
        raise StructuralError('BSON document is not terminated')
    write_element_header(dest, ElementType.DOCUMENT, key)
    dest.write_bytes(view)


def append_scalar(dest: Serializer, key: str, scalar: Scalar) -> None:
    payload = scalar.payload
    match scalar.kind:
        case ScalarKind.BOOL:
            append_bool(dest, key, payload)
        case ScalarKind.INT32:
            append_int32(dest, key, payload)
        case ScalarKind.INT64:
            append_int64(dest, key, payload)
        case ScalarKind.UINT64:
            append_uint64(dest, key, payload)
        case ScalarKind.DOUBLE:
            append_double(dest, key, payload)
        case ScalarKind.STRING:
            append_string(dest, key, payload)
        case ScalarKind.BINARY:
            assert isinstance(payload, Binary)
            append_binary(dest, key, payload.data, subtype=payload.subtype)
        case ScalarKind.DATETIME:
            append_datetime(dest, key, payload)
        case ScalarKind.OBJECT_ID:
            append_object_id(dest, key, payload)
        case ScalarKind.DECIMAL128:
            append_decimal128(dest, key, payload)
        case ScalarKind.MIN_KEY:
            append_min_key(dest, key)
        case ScalarKind.MAX_KEY:
            append_max_key(dest, key)
        case ScalarKind.TIMESTAMP:
            append_timestamp(dest, key, payload)
        case _:
            assert_never(scalar.kind)
