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

from __future__ import annotations

from typing_extensions import override

from .serializer import Serializer
from .types import Buffer


class BytesSerializer(Serializer):
    """Simple implementation of Serializer to write to memory.

    Every write is appended to a single bytearray, which is what makes it possible to patch bytes that were already
    written (see `Serializer.patch_bytes`).

    >>> se = BytesSerializer()
    >>> se.write_bytes(b'\\x00\\x00test')
    >>> se.patch_bytes(0, b'\\x04\\x00')
    >>> se.cur_pos()
    6
    >>> bytes(se.finalize())
    b'\\x04\\x00test'
    """

    def __init__(self) -> None:
        self._buffer = bytearray()

    def __copy__(self) -> BytesSerializer:
        other = BytesSerializer()
        other._buffer = bytearray(self._buffer)
        return other

    @override
    def finalize(self) -> bytes:
        result = bytes(self._buffer)
        del self._buffer
        return result

    @override
    def cur_pos(self) -> int:
        return len(self._buffer)

    @override
    def write_byte(self, data: int) -> None:
        # bytearray.append checks for correct range
        self._buffer.append(data)

    @override
    def write_bytes(self, data: Buffer) -> None:
        self._buffer += data

    @override
    def patch_bytes(self, pos: int, data: Buffer) -> None:
        part = memoryview(data)
        end = pos + len(part)
        if pos < 0 or end > len(self._buffer):
            raise IndexError('cannot patch outside of the written data')
        self._buffer[pos:end] = part
