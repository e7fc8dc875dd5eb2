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
This module implements the fixed-size BSON types: ObjectId (12 bytes), Decimal128 (16 bytes) and the internal
timestamp (8 bytes: a 32-bit increment followed by 32-bit seconds, both unsigned little-endian).

>>> se = Serializer.build_bytes_serializer()
>>> encode_object_id(se, ObjectId('5f2b8f1e0000000000000001'))
>>> encode_timestamp(se, Timestamp(time=1, inc=2))  # writes 02000000 01000000
>>> bytes(se.finalize()).hex()
'5f2b8f1e00000000000000010200000001000000'

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('5f2b8f1e00000000000000010200000001000000'))
>>> decode_object_id(de)
ObjectId('5f2b8f1e0000000000000001')
>>> decode_timestamp(de)
Timestamp(time=1, inc=2)
>>> de.finalize()
"""

from bsonbuilder.serialization import Deserializer, Serializer
from bsonbuilder.types import Decimal128, ObjectId, Timestamp

_TIMESTAMP_FORMAT = '<II'


def encode_object_id(serializer: Serializer, value: ObjectId) -> None:
    serializer.write_bytes(value.binary)


def decode_object_id(deserializer: Deserializer) -> ObjectId:
    return ObjectId(bytes(deserializer.read_bytes(12)))


def encode_decimal128(serializer: Serializer, value: Decimal128) -> None:
    serializer.write_bytes(value.bid)


def decode_decimal128(deserializer: Deserializer) -> Decimal128:
    return Decimal128(bytes(deserializer.read_bytes(16)))


def encode_timestamp(serializer: Serializer, value: Timestamp) -> None:
    serializer.write_struct((value.inc, value.time), _TIMESTAMP_FORMAT)


def decode_timestamp(deserializer: Deserializer) -> Timestamp:
    inc, time = deserializer.read_struct(_TIMESTAMP_FORMAT)
    return Timestamp(time=time, inc=inc)
