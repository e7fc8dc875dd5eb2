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

from pathlib import Path
from typing import Union

from pydantic import Field
from typing_extensions import Self

from bsonbuilder.utils.pydantic import BaseModel
from bsonbuilder.utils.yaml import dict_from_extended_yaml

# BSON documents start with their size as a signed 32-bit integer
BSON_MAX_DOCUMENT_SIZE = 2**31 - 1

# The smallest document: the 4-byte size and the terminator
BSON_MIN_DOCUMENT_SIZE = 5


class BsonSettings(BaseModel):
    # Builders fail when a document would exceed this size in bytes
    MAX_DOCUMENT_SIZE: int = Field(default=BSON_MAX_DOCUMENT_SIZE, ge=BSON_MIN_DOCUMENT_SIZE, le=BSON_MAX_DOCUMENT_SIZE)

    # Subtype used for binary data appended without an explicit subtype, 0x00 is the generic subtype
    DEFAULT_BINARY_SUBTYPE: int = Field(default=0x00, ge=0x00, le=0xFF)

    # Key of the entry that ValueDict falls back to when a key is not found
    VALUE_DICT_DEFAULT_KEY: str = '__default__'

    @classmethod
    def from_yaml(cls, *, filepath: Union[Path, str]) -> Self:
        """Takes a filepath to a yaml file and returns a validated BsonSettings instance."""
        settings_dict = dict_from_extended_yaml(filepath=filepath)
        return cls.model_validate(settings_dict)
