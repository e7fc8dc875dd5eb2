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

import copy
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Optional

from structlog import get_logger
from typing_extensions import Self, assert_never

from bsonbuilder.builder.appender import (
    append_binary,
    append_bool,
    append_bson_document,
    append_datetime,
    append_decimal128,
    append_double,
    append_int32,
    append_int64,
    append_max_key,
    append_min_key,
    append_null,
    append_object_id,
    append_scalar,
    append_string,
    append_timestamp,
    append_uint64,
)
from bsonbuilder.builder.array_indexer import ArrayIndexer
from bsonbuilder.builder.region import DocumentRegion, SubarrayRegion, SubdocumentRegion
from bsonbuilder.conf import BsonSettings, get_global_settings
from bsonbuilder.exception import DocumentTooLargeError, MissingValueError, StructuralError
from bsonbuilder.serialization import Serializer
from bsonbuilder.serialization.adapters import MaxBytesExceededError
from bsonbuilder.serialization.bytes_serializer import BytesSerializer
from bsonbuilder.serialization.types import Buffer
from bsonbuilder.types import Decimal128, ObjectId, Timestamp
from bsonbuilder.value import Value, ValueKind

logger = get_logger()


class BsonBuilder:
    """Builds a BSON document.

    A builder either re-encodes a value tree given to the constructor, or starts with an empty document that is filled
    with the `append_*` methods, or both. Every append method returns the builder itself so calls can be chained:

        data = BsonBuilder().append_int32('a', 1).append_string('b', 'x').extract()
        assert data.hex() == '150000001061000100000002620002000000780000'

    The result is extracted once with `extract()`, after that, or after any error, the builder cannot be used anymore.
    """

    def __init__(self, value: Optional[Value] = None, *, settings: Optional[BsonSettings] = None) -> None:
        self.log = logger.new()
        self._settings = settings or get_global_settings()
        self._buffer = BytesSerializer()
        self._root: Optional[DocumentRegion] = DocumentRegion(self._limited(self._buffer))
        self._error: Optional[str] = None
        if value is not None:
            with self._building('') as root:
                _append_root(root, value)

    def _limited(self, buffer: BytesSerializer) -> Serializer:
        return buffer.with_max_bytes(self._settings.MAX_DOCUMENT_SIZE - buffer.cur_pos())

    @property
    def settings(self) -> BsonSettings:
        return self._settings

    def _get_root(self) -> DocumentRegion:
        if self._root is None:
            if self._error is not None:
                raise StructuralError(f'builder was abandoned after an error: {self._error}')
            raise StructuralError('the document was already extracted from this builder')
        return self._root

    @contextmanager
    def _building(self, key: str) -> Iterator[DocumentRegion]:
        """Any error while building aborts the build, the builder is left unusable."""
        root = self._get_root()
        try:
            yield root
        except MaxBytesExceededError as e:
            self._abort(key, e)
            raise DocumentTooLargeError(
                f'document exceeds the maximum size of {self._settings.MAX_DOCUMENT_SIZE} bytes'
            ) from e
        except Exception as e:
            self._abort(key, e)
            raise

    def _abort(self, key: str, error: Exception) -> None:
        self.log.debug('document build aborted', key=key, error=type(error).__name__)
        assert self._root is not None
        self._root.abandon()
        self._root = None
        self._error = type(error).__name__

    def copy(self) -> Self:
        """Copy a builder that is still building, the copy is independent from the original."""
        root = self._get_root()
        other = object.__new__(type(self))
        other.log = logger.new()
        other._settings = self._settings
        other._buffer = copy.copy(self._buffer)
        other._root = DocumentRegion(other._limited(other._buffer), start=root.start)
        other._error = None
        return other

    def __copy__(self) -> Self:
        return self.copy()

    def __deepcopy__(self, memo: dict[int, Any]) -> Self:
        return self.copy()

    def extract(self) -> bytes:
        """Finish the document and return it, the builder cannot be used after this."""
        with self._building('') as root:
            root.close()
            data = bytes(root.finalize())
        self._root = None
        self.log.debug('document built', size=len(data))
        return data

    def append(self, key: str, value: Any) -> Self:
        """Append a Python object, it's converted with `Value.from_native`."""
        with self._building(key) as root:
            _append_explicit(root, key, Value.from_native(value))
        return self

    def append_value(self, key: str, value: Value) -> Self:
        """Append a value that was built or parsed before, missing values cannot be appended."""
        with self._building(key) as root:
            _append_explicit(root, key, value)
        return self

    def append_document(self, key: str, value: Value | Mapping[str, Any]) -> Self:
        with self._building(key) as root:
            if not isinstance(value, Value):
                value = Value.from_native(value)
            if not value.is_document():
                raise StructuralError(f"expected a document for '{key}', got {value.kind.value}")
            _append_value(root, key, value)
        return self

    def append_array(self, key: str, value: Value | Sequence[Any]) -> Self:
        with self._building(key) as root:
            if not isinstance(value, Value):
                value = Value.from_native(list(value))
            if not value.is_array():
                raise StructuralError(f"expected an array for '{key}', got {value.kind.value}")
            _append_value(root, key, value)
        return self

    def append_bson(self, key: str, data: Buffer) -> Self:
        """Append a document that was already encoded, for example the result of another builder."""
        with self._building(key) as root:
            append_bson_document(root, key, data)
        return self

    def append_null(self, key: str) -> Self:
        with self._building(key) as root:
            append_null(root, key)
        return self

    def append_bool(self, key: str, value: bool) -> Self:
        with self._building(key) as root:
            append_bool(root, key, value)
        return self

    def append_int32(self, key: str, value: int) -> Self:
        with self._building(key) as root:
            append_int32(root, key, value)
        return self

    def append_int64(self, key: str, value: int) -> Self:
        with self._building(key) as root:
            append_int64(root, key, value)
        return self

    def append_uint64(self, key: str, value: int) -> Self:
        with self._building(key) as root:
            append_uint64(root, key, value)
        return self

    def append_double(self, key: str, value: float) -> Self:
        with self._building(key) as root:
            append_double(root, key, value)
        return self

    def append_string(self, key: str, value: str | bytes) -> Self:
        with self._building(key) as root:
            append_string(root, key, value)
        return self

    def append_datetime(self, key: str, value: datetime) -> Self:
        with self._building(key) as root:
            append_datetime(root, key, value)
        return self

    def append_binary(self, key: str, data: bytes, *, subtype: Optional[int] = None) -> Self:
        if subtype is None:
            subtype = self._settings.DEFAULT_BINARY_SUBTYPE
        with self._building(key) as root:
            append_binary(root, key, data, subtype=subtype)
        return self

    def append_object_id(self, key: str, value: ObjectId) -> Self:
        with self._building(key) as root:
            append_object_id(root, key, value)
        return self

    def append_decimal128(self, key: str, value: Decimal128) -> Self:
        with self._building(key) as root:
            append_decimal128(root, key, value)
        return self

    def append_min_key(self, key: str) -> Self:
        with self._building(key) as root:
            append_min_key(root, key)
        return self

    def append_max_key(self, key: str) -> Self:
        with self._building(key) as root:
            append_max_key(root, key)
        return self

    def append_timestamp(self, key: str, value: Timestamp) -> Self:
        with self._building(key) as root:
            append_timestamp(root, key, value)
        return self


def build_bson(value: Value | Mapping[str, Any] | Sequence[Any], *, settings: Optional[BsonSettings] = None) -> bytes:
    """Build a BSON document from a value tree or from Python objects, see `Value.from_native`."""
    if not isinstance(value, Value):
        value = Value.from_native(value)
    return BsonBuilder(value, settings=settings).extract()


def _append_root(root: DocumentRegion, value: Value) -> None:
    match value.kind:
        case ValueKind.DOCUMENT:
            _append_members(root, value)
        case ValueKind.ARRAY:
            _append_elements(root, value, ArrayIndexer())
        case ValueKind.MISSING:
            raise MissingValueError('attempt to build a document from a missing value')
        case ValueKind.NULL | ValueKind.SCALAR:
            raise StructuralError('attempt to build a document from a primitive type')
        case _:
            assert_never(value.kind)


def _append_explicit(dest: DocumentRegion, key: str, value: Value) -> None:
    # missing members are skipped while walking a tree, but appending one explicitly is an error
    if value.is_missing():
        raise MissingValueError(f"the value of '{key}' is missing")
    _append_value(dest, key, value)


def _append_value(dest: DocumentRegion, key: str, value: Value) -> None:
    match value.kind:
        case ValueKind.MISSING:
            pass
        case ValueKind.NULL:
            append_null(dest, key)
        case ValueKind.SCALAR:
            append_scalar(dest, key, value.as_scalar())
        case ValueKind.DOCUMENT:
            with SubdocumentRegion(dest, key) as subdocument:
                _append_members(subdocument, value)
        case ValueKind.ARRAY:
            with SubarrayRegion(dest, key) as subarray:
                _append_elements(subarray, value, subarray.indexer)
        case _:
            assert_never(value.kind)


def _append_members(dest: DocumentRegion, value: Value) -> None:
    for key, member in value.as_document().items():
        _append_value(dest, key, member)


def _append_elements(dest: DocumentRegion, value: Value, indexer: ArrayIndexer) -> None:
    # missing elements are skipped before taking an index, so the keys never have gaps
    for element in value.as_array():
        if element.is_missing():
            continue
        _append_value(dest, indexer.get_key(), element)
        indexer.advance()
