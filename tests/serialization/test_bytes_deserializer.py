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
import pytest

from bsonbuilder.serialization import Deserializer, OutOfDataError, SerializationError


def test_reads_consume() -> None:
    de = Deserializer.build_bytes_deserializer(b'\x01\x02\x03\x00')
    assert de.read_byte() == 1
    assert de.read_struct('<H') == (3 * 256 + 2,)
    assert bytes(de.read_bytes(1)) == b'\x00'
    assert de.is_empty()
    de.finalize()


def test_out_of_data() -> None:
    de = Deserializer.build_bytes_deserializer(b'ab')
    with pytest.raises(OutOfDataError):
        de.read_bytes(3)
    with pytest.raises(SerializationError):
        de.read_bytes(-1)
    de.read_bytes(2)
    with pytest.raises(OutOfDataError):
        de.read_byte()


def test_trailing_data() -> None:
    de = Deserializer.build_bytes_deserializer(b'ab')
    de.read_byte()
    with pytest.raises(SerializationError, match='trailing data'):
        de.finalize()
