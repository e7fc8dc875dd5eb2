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

from typing import TypeVar

from typing_extensions import override

from bsonbuilder.serialization.exceptions import SerializationError
from bsonbuilder.serialization.serializer import Serializer

from ..types import Buffer
from .generic_adapter import GenericSerializerAdapter

S = TypeVar('S', bound=Serializer)


class MaxBytesExceededError(SerializationError):
    """ This error is raised when the adapted serializer reached its maximum bytes write.

    After this exception is raised the adapted serializer cannot be used anymore. Handlers of this exception are
    expected to either: bubble up the exception (or an equivalent exception), or return an error. Handlers should not
    try to write again on the same serializer.
    """
    pass


class MaxBytesSerializer(GenericSerializerAdapter[S]):
    """Limits the total number of bytes written to the inner serializer.

    The limit is checked before each write, so the inner serializer never holds more than `max_bytes` bytes written
    through this adapter. Patching is not counted because it does not change the size.

    >>> from bsonbuilder.serialization import Serializer
    >>> se = Serializer.build_bytes_serializer().with_max_bytes(4)
    >>> se.write_bytes(b'abc')
    >>> se.bytes_left()
    1
    >>> try:
    ...     se.write_bytes(b'de')
    ... except MaxBytesExceededError:
    ...     print('exceeded')
    exceeded
    """

    def __init__(self, serializer: S, max_bytes: int) -> None:
        super().__init__(serializer)
        self._bytes_left = max_bytes

    def bytes_left(self) -> int:
        return self._bytes_left

    def _check_update_exceeds(self, write_size: int) -> None:
        self._bytes_left -= write_size
        if self._bytes_left < 0:
            raise MaxBytesExceededError

    @override
    def write_byte(self, data: int) -> None:
        self._check_update_exceeds(1)
        super().write_byte(data)

    @override
    def write_bytes(self, data: Buffer) -> None:
        data_view = memoryview(data)
        self._check_update_exceeds(len(data_view))
        super().write_bytes(data_view)
