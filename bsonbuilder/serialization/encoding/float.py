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
This module implements encoding of a float as an IEEE-754 binary64 in little-endian byte order.

>>> se = Serializer.build_bytes_serializer()
>>> encode_double(se, 1.0)  # writes 000000000000f03f
>>> encode_double(se, -2.5)  # writes 00000000000004c0
>>> bytes(se.finalize()).hex()
'000000000000f03f00000000000004c0'

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('000000000000f03f00000000000004c0'))
>>> decode_double(de)
1.0
>>> decode_double(de)
-2.5
>>> de.finalize()
"""

from bsonbuilder.serialization import Deserializer, Serializer

_DOUBLE_FORMAT = '<d'


def encode_double(serializer: Serializer, value: float) -> None:
    serializer.write_struct((value,), _DOUBLE_FORMAT)


def decode_double(deserializer: Deserializer) -> float:
    value, = deserializer.read_struct(_DOUBLE_FORMAT)
    return value
