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
This module implements NUL-terminated strings, which is how BSON encodes the keys of a document.

There is no length prefix, so a key cannot contain a NUL byte.

>>> se = Serializer.build_bytes_serializer()
>>> encode_cstring(se, 'foo')  # writes 666f6f00
>>> encode_cstring(se, '0')  # writes 3000
>>> bytes(se.finalize()).hex()
'666f6f003000'

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('666f6f003000'))
>>> decode_cstring(de)
'foo'
>>> decode_cstring(de)
'0'
>>> de.finalize()

>>> try:
...     encode_cstring(Serializer.build_bytes_serializer(), 'a\x00b')
... except EncodingError as e:
...     print(*e.args)
'a\x00b' contains a NUL byte, which is not allowed in keys
"""

from bsonbuilder.exception import EncodingError
from bsonbuilder.serialization import BadDataError, Deserializer, Serializer

from .utf8 import to_utf8


def encode_cstring(serializer: Serializer, value: str) -> None:
    """ Encodes a string as UTF-8 followed by a NUL terminator.
    """
    data = to_utf8(value)
    if b'\x00' in data:
        raise EncodingError(f'{value!r} contains a NUL byte, which is not allowed in keys')
    serializer.write_bytes(data)
    serializer.write_byte(0x00)


def decode_cstring(deserializer: Deserializer) -> str:
    """ Decodes a NUL-terminated UTF-8 string.
    """
    data = bytearray()
    while True:
        byte = deserializer.read_byte()
        if byte == 0:
            break
        data.append(byte)
    try:
        return data.decode('utf-8')
    except UnicodeDecodeError as e:
        raise BadDataError('key is not valid UTF-8') from e
