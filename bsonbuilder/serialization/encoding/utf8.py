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
This module implements BSON string encoding: a length prefix, the UTF-8 bytes and a NUL terminator.

The length prefix is a signed 32-bit little-endian integer that counts the terminator. Strings can be given as `str`
or as raw `bytes`, in both cases the bytes written must be valid UTF-8, which is checked before anything is written.

>>> se = Serializer.build_bytes_serializer()
>>> encode_string(se, 'foo')  # writes 04000000 666f6f 00
>>> encode_string(se, 'héllo')  # writes 07000000 68c3a96c6c6f 00
>>> bytes(se.finalize()).hex()
'04000000666f6f000700000068c3a96c6c6f00'

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('04000000666f6f000700000068c3a96c6c6f00'))
>>> decode_string(de)
'foo'
>>> decode_string(de)
'héllo'
>>> de.finalize()

>>> try:
...     encode_string(Serializer.build_bytes_serializer(), b'\x80')
... except EncodingError as e:
...     print(*e.args)
BSON strings must be valid UTF-8
"""

from bsonbuilder.exception import EncodingError
from bsonbuilder.serialization import BadDataError, Deserializer, Serializer

from .int import decode_int, encode_int


def to_utf8(value: str | bytes) -> bytes:
    """ Get the UTF-8 bytes of a string, raw bytes are only validated.

    Python strings can hold lone surrogates, which cannot be encoded and are rejected too.
    """
    try:
        if isinstance(value, str):
            return value.encode('utf-8')
        data = bytes(value)
        data.decode('utf-8')
        return data
    except UnicodeError as e:
        raise EncodingError('BSON strings must be valid UTF-8') from e


def encode_string(serializer: Serializer, value: str | bytes) -> None:
    """ Encodes a string with a length prefix and a NUL terminator.

    This modules's docstring has more details and examples.
    """
    data = to_utf8(value)
    encode_int(serializer, len(data) + 1, length=4, signed=True)
    serializer.write_bytes(data)
    serializer.write_byte(0x00)


def decode_string(deserializer: Deserializer) -> str:
    """ Decodes a string with a length prefix and a NUL terminator.

    This modules's docstring has more details and examples.
    """
    size = decode_int(deserializer, length=4, signed=True)
    if size < 1:
        raise BadDataError(f'invalid string length: {size}')
    data = bytes(deserializer.read_bytes(size))
    if data[-1] != 0:
        raise BadDataError('string is not NUL-terminated')
    try:
        return data[:-1].decode('utf-8')
    except UnicodeDecodeError as e:
        raise BadDataError('string is not valid UTF-8') from e
