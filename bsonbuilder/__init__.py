# Copyright 2025 Hathor Labs
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Encoder of in-memory value trees into BSON documents.

The main entry points are:

- `bsonbuilder.value.Value`: the value tree (documents, arrays and scalars);
- `bsonbuilder.builder.BsonBuilder`: builds a BSON document from a value tree or incrementally;
- `bsonbuilder.parser.parse_bson`: parses a BSON document back into a value tree.

This module is imported by `setup.py`, so it must not import anything outside the standard library.
"""

__version__ = '0.1.0'
