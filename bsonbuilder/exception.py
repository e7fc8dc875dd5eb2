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


class BsonError(Exception):
    """Base class for exceptions in bsonbuilder."""
    pass


class StructuralError(BsonError):
    """Raised when building would produce a malformed document.

    For example: building a document from a scalar, writing to a document while a nested one is open or using a
    builder after its result was extracted.
    """
    pass


class MissingValueError(BsonError):
    """Raised when a missing value is explicitly appended or built."""
    pass


class RangeError(BsonError, ValueError):
    """Raised when a value does not fit in the BSON type it must be encoded as."""
    pass


class DocumentTooLargeError(RangeError):
    pass


class EncodingError(BsonError, ValueError):
    """Raised when a string or key cannot be encoded, BSON requires valid UTF-8."""
    pass


class NotFoundError(BsonError, KeyError):
    """Raised when a named config entry or a dict key does not exist."""
    pass


class ParseError(BsonError, ValueError):
    """Raised when a byte sequence is not a valid BSON document."""
    pass
