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


class ArrayIndexer:
    """Generates the keys of array elements.

    BSON arrays are documents whose keys are the decimal indexes of the elements: "0", "1", "2", ... Each array being
    written has its own indexer, it is advanced only after an element is written.

    >>> indexer = ArrayIndexer()
    >>> indexer.get_key()
    '0'
    >>> indexer.advance()
    >>> indexer.advance()
    >>> indexer.get_key()
    '2'
    """

    __slots__ = ('_index',)

    def __init__(self) -> None:
        self._index = 0

    def get_key(self) -> str:
        return str(self._index)

    def advance(self) -> None:
        self._index += 1
