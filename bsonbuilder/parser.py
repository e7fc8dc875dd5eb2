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
Parses BSON documents back into value trees.

Every document is read from its own deserializer holding exactly the bytes given by its size prefix, so a nested
document that claims more (or fewer) bytes than it has is rejected instead of spilling into its parent.

>>> parse_bson(bytes.fromhex('0c0000001061000500000000'))
Value.document({'a': Value(int32, 5)})
"""

from typing_extensions import assert_never

from bsonbuilder.exception import ParseError
from bsonbuilder.serialization import BadDataError, Deserializer, SerializationError
from bsonbuilder.serialization.encoding.binary import decode_binary
from bsonbuilder.serialization.encoding.bool import decode_bool
from bsonbuilder.serialization.encoding.cstring import decode_cstring
from bsonbuilder.serialization.encoding.fixed import decode_decimal128, decode_object_id, decode_timestamp
from bsonbuilder.serialization.encoding.float import decode_double
from bsonbuilder.serialization.encoding.int import decode_int
from bsonbuilder.serialization.encoding.utc_datetime import decode_datetime
from bsonbuilder.serialization.encoding.utf8 import decode_string
from bsonbuilder.serialization.types import Buffer
from bsonbuilder.types import ElementType
from bsonbuilder.value import Value

_MIN_DOCUMENT_SIZE = 5

# nested documents and arrays deeper than this are rejected
MAX_NESTING_DEPTH = 100


def parse_bson(data: Buffer) -> Value:
    """Parse a complete BSON document, raises ParseError if the data is not exactly one valid document."""
    deserializer = Deserializer.build_bytes_deserializer(data)
    try:
        value = _decode_document(deserializer, is_array=False, depth=0)
        deserializer.finalize()
    except SerializationError as e:
        raise ParseError(f'invalid BSON document: {e}') from e
    return value


def _decode_document(deserializer: Deserializer, *, is_array: bool, depth: int) -> Value:
    if depth > MAX_NESTING_DEPTH:
        raise BadDataError(f'documents are nested deeper than {MAX_NESTING_DEPTH} levels')
    size = decode_int(deserializer, length=4, signed=True)
    if size < _MIN_DOCUMENT_SIZE:
        raise BadDataError(f'invalid document size: {size}')
    body = Deserializer.build_bytes_deserializer(deserializer.read_bytes(size - 4))
    members: dict[str, Value] = {}
    while True:
        tag = body.read_byte()
        if tag == 0x00:
            break
        key = decode_cstring(body)
        if key in members:
            raise BadDataError(f'duplicate key: {key!r}')
        members[key] = _decode_element(body, tag, depth=depth)
    body.finalize()
    if is_array:
        return Value.array(members.values())
    return Value.document(members)


def _decode_element(deserializer: Deserializer, tag: int, *, depth: int) -> Value:
    try:
        element_type = ElementType(tag)
    except ValueError:
        raise BadDataError(f'unsupported element type: 0x{tag:02x}')

    match element_type:
        case ElementType.DOUBLE:
            return Value.double(decode_double(deserializer))
        case ElementType.STRING:
            return Value.string(decode_string(deserializer))
        case ElementType.DOCUMENT:
            return _decode_document(deserializer, is_array=False, depth=depth + 1)
        case ElementType.ARRAY:
            return _decode_document(deserializer, is_array=True, depth=depth + 1)
        case ElementType.BINARY:
            data, subtype = decode_binary(deserializer)
            return Value.binary(data, subtype)
        case ElementType.OBJECT_ID:
            return Value.object_id(decode_object_id(deserializer))
        case ElementType.BOOL:
            return Value.boolean(decode_bool(deserializer))
        case ElementType.DATETIME:
            return Value.date_time(decode_datetime(deserializer))
        case ElementType.NULL:
            return Value.null()
        case ElementType.INT32:
            return Value.int32(decode_int(deserializer, length=4, signed=True))
        case ElementType.TIMESTAMP:
            return Value.timestamp(decode_timestamp(deserializer))
        case ElementType.INT64:
            return Value.int64(decode_int(deserializer, length=8, signed=True))
        case ElementType.DECIMAL128:
            return Value.decimal128(decode_decimal128(deserializer))
        case ElementType.MIN_KEY:
            return Value.min_key()
        case ElementType.MAX_KEY:
            return Value.max_key()
        case _:
            assert_never(element_type)
