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
import copy

import pytest

from bsonbuilder.serialization import Serializer
from bsonbuilder.serialization.bytes_serializer import BytesSerializer


def test_write_and_finalize() -> None:
    se = Serializer.build_bytes_serializer()
    se.write_byte(0x01)
    se.write_bytes(b'\x02\x03')
    se.write_struct((4,), '<I')
    assert se.cur_pos() == 7
    assert se.finalize() == b'\x01\x02\x03\x04\x00\x00\x00'


def test_write_byte_out_of_range() -> None:
    se = BytesSerializer()
    with pytest.raises(ValueError):
        se.write_byte(256)


def test_patch_bytes_keeps_size() -> None:
    se = BytesSerializer()
    se.write_bytes(bytes(4))
    se.write_bytes(b'ab')
    se.patch_bytes(0, (6).to_bytes(4, 'little'))
    assert se.cur_pos() == 6
    assert se.finalize() == b'\x06\x00\x00\x00ab'


@pytest.mark.parametrize('pos', [-1, 3, 10])
def test_patch_bytes_outside_written_data(pos: int) -> None:
    se = BytesSerializer()
    se.write_bytes(b'abcd')
    with pytest.raises(IndexError):
        se.patch_bytes(pos, b'xy')


def test_copy_is_independent() -> None:
    se = BytesSerializer()
    se.write_bytes(b'abc')
    other = copy.copy(se)
    other.write_bytes(b'def')
    se.write_byte(0x00)
    assert other.finalize() == b'abcdef'
    assert se.finalize() == b'abc\x00'


def test_cannot_reuse_after_finalize() -> None:
    se = BytesSerializer()
    se.write_bytes(b'abc')
    se.finalize()
    with pytest.raises(AttributeError):
        se.write_byte(0x00)
