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

r"""
This module implements BSON binary data: a length prefix, a subtype byte and the raw bytes.

The length prefix is a signed 32-bit little-endian integer that counts only the raw bytes. The deprecated subtype 0x02
(old binary) nests a second length prefix inside the data, so its outer length counts those 4 extra bytes.

>>> se = Serializer.build_bytes_serializer()
>>> encode_binary(se, b'test', subtype=0x00)  # writes 04000000 00 74657374
>>> encode_binary(se, b'\x01\x02', subtype=0x80)  # writes 02000000 80 0102
>>> bytes(se.finalize()).hex()
'04000000007465737402000000800102'

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('04000000007465737402000000800102'))
>>> decode_binary(de)
(b'test', 0)
>>> decode_binary(de)
(b'\x01\x02', 128)
>>> de.finalize()

>>> se = Serializer.build_bytes_serializer()
>>> encode_binary(se, b'abc', subtype=0x02)  # writes 07000000 02 03000000 616263
>>> bytes(se.finalize()).hex()
'070000000203000000616263'
"""

from bsonbuilder.serialization import BadDataError, Deserializer, Serializer

from .int import decode_int, encode_int

_OLD_BINARY_SUBTYPE = 0x02
_INNER_SIZE_LENGTH = 4


def encode_binary(serializer: Serializer, data: bytes, *, subtype: int) -> None:
    """ Encodes a byte sequence with its subtype.

    This modules's docstring has more details and examples.
    """
    data_view = memoryview(data)
    if subtype == _OLD_BINARY_SUBTYPE:
        encode_int(serializer, len(data_view) + _INNER_SIZE_LENGTH, length=4, signed=True)
        serializer.write_byte(subtype)
        encode_int(serializer, len(data_view), length=4, signed=True)
    else:
        encode_int(serializer, len(data_view), length=4, signed=True)
        serializer.write_byte(subtype)
    serializer.write_bytes(data_view)


def decode_binary(deserializer: Deserializer) -> tuple[bytes, int]:
    """ Decodes a byte sequence, returns it together with its subtype.

    This modules's docstring has more details and examples.
    """
    size = decode_int(deserializer, length=4, signed=True)
    if size < 0:
        raise BadDataError(f'invalid binary length: {size}')
    subtype = deserializer.read_byte()
    if subtype == _OLD_BINARY_SUBTYPE:
        inner_size = decode_int(deserializer, length=4, signed=True)
        if inner_size != size - _INNER_SIZE_LENGTH:
            raise BadDataError(f'invalid old binary length: {inner_size} inside {size}')
        size = inner_size
    data = bytes(deserializer.read_bytes(size))
    return data, subtype
