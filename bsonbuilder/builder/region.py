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
Regions bracket a document that is being written into a serializer.

A document is framed as `[size: int32][elements...][0x00]`, the size is only known after the elements are written, so
a placeholder is written when a region is opened and it is patched when the region is closed. Nested documents and
arrays are regions opened on their parent region, under a key:

>>> from bsonbuilder.builder.appender import append_int32
>>> from bsonbuilder.serialization import Serializer
>>> root = DocumentRegion(Serializer.build_bytes_serializer())
>>> with SubarrayRegion(root, 'a') as array:
...     append_int32(array, array.indexer.get_key(), 1)
...     array.indexer.advance()
>>> root.close()
>>> bytes(root.finalize()).hex()
'140000000461000c000000103000010000000000'

Regions form a stack: while a nested region is open its parent refuses writes, and a closed region refuses any write.
Used as context managers, regions are closed when the block ends normally and abandoned when it ends with an error, an
abandoned region is not terminated and the whole output must be discarded.
"""

from __future__ import annotations

from types import TracebackType
from typing import ClassVar, Optional, Union

from typing_extensions import override

from bsonbuilder.builder.appender import write_element_header
from bsonbuilder.builder.array_indexer import ArrayIndexer
from bsonbuilder.exception import StructuralError
from bsonbuilder.serialization import Serializer
from bsonbuilder.serialization.adapters import GenericSerializerAdapter
from bsonbuilder.serialization.types import Buffer
from bsonbuilder.types import ElementType

_SIZE_PLACEHOLDER = bytes(4)
_TERMINATOR = 0x00


class DocumentRegion(GenericSerializerAdapter[Serializer]):
    """A document being written, it starts at the current position of the given serializer.

    With `start` the region resumes a document that was already opened at that position, nothing is written.
    """

    def __init__(
        self,
        serializer: Serializer,
        *,
        parent: Optional[DocumentRegion] = None,
        start: Optional[int] = None,
    ) -> None:
        super().__init__(serializer)
        self._parent = parent
        self._child: Optional[DocumentRegion] = None
        self._closed = False
        if parent is not None:
            parent._open_child(self)
        if start is None:
            self._start = serializer.cur_pos()
            serializer.write_bytes(_SIZE_PLACEHOLDER)
        else:
            self._start = start

    @property
    def start(self) -> int:
        return self._start

    def is_closed(self) -> bool:
        return self._closed

    def _open_child(self, child: DocumentRegion) -> None:
        self._check_writable()
        self._child = child

    def _release_child(self, child: DocumentRegion) -> None:
        assert self._child is child
        self._child = None

    def _check_writable(self) -> None:
        if self._closed:
            raise StructuralError('cannot write to a document that was already closed')
        if self._child is not None:
            raise StructuralError('cannot write to a document while a nested document is open')

    @override
    def write_byte(self, data: int) -> None:
        self._check_writable()
        super().write_byte(data)

    @override
    def write_bytes(self, data: Buffer) -> None:
        self._check_writable()
        super().write_bytes(data)

    @override
    def patch_bytes(self, pos: int, data: Buffer) -> None:
        self._check_writable()
        if pos < self._start + len(_SIZE_PLACEHOLDER):
            raise StructuralError('cannot patch outside of the document')
        super().patch_bytes(pos, data)

    @override
    def finalize(self) -> Buffer:
        if self._parent is not None:
            raise StructuralError('only the top-level document can be finalized')
        if not self._closed:
            raise StructuralError('cannot finalize a document that is still open')
        return super().finalize()

    def close(self) -> None:
        """Terminate the document and patch its size, closing twice has no effect."""
        if self._closed:
            return
        self._check_writable()
        self.inner.write_byte(_TERMINATOR)
        size = self.inner.cur_pos() - self._start
        self.inner.patch_bytes(self._start, size.to_bytes(4, byteorder='little', signed=True))
        self._detach()

    def abandon(self) -> None:
        """Stop writing without terminating the document, what was written so far is not a valid document."""
        if self._closed:
            return
        self._detach()

    def _detach(self) -> None:
        self._closed = True
        if self._parent is not None:
            self._parent._release_child(self)

    @override
    def __exit__(
        self,
        exc_type: Union[type[BaseException], None],
        exc_value: Union[BaseException, None],
        traceback: Union[TracebackType, None],
    ) -> None:
        if exc_type is None:
            self.close()
        else:
            self.abandon()


class SubdocumentRegion(DocumentRegion):
    """A document nested in another one under `key`."""

    element_type: ClassVar[ElementType] = ElementType.DOCUMENT

    def __init__(self, parent: DocumentRegion, key: str) -> None:
        write_element_header(parent, self.element_type, key)
        super().__init__(parent.inner, parent=parent)


class SubarrayRegion(SubdocumentRegion):
    """An array nested in a document under `key`, the keys of its elements come from its own indexer."""

    element_type = ElementType.ARRAY

    def __init__(self, parent: DocumentRegion, key: str) -> None:
        super().__init__(parent, key)
        self.indexer = ArrayIndexer()
