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
import bson
import pytest

from bsonbuilder.config import ConfigValue, DocsMap, ValueDict
from bsonbuilder.exception import NotFoundError, StructuralError
from bsonbuilder.value import MISSING, Value


def _payload(value: Value) -> object:
    return value.as_scalar().payload


def test_docs_map_get_and_set() -> None:
    docs = DocsMap()
    docs.set('A', Value.from_native({'x': 1}))
    assert docs.get('A') == Value.from_native({'x': 1})
    assert docs.size() == len(docs) == 1
    assert 'A' in docs
    with pytest.raises(TypeError):
        docs.set('B', {'x': 1})  # type: ignore[arg-type]


def test_docs_map_not_found_records_name() -> None:
    docs = DocsMap({'A': Value.null()})
    with pytest.raises(NotFoundError):
        docs.get('B')
    with pytest.raises(KeyError):
        docs.get('C')
    docs.get('A')
    assert docs.requested_names() == ['A', 'B', 'C']


def test_docs_map_merge() -> None:
    docs = DocsMap({'A': Value.int32(1), 'B': Value.int32(2)})
    docs.merge_from_other(DocsMap({'B': Value.int32(3), 'C': Value.int32(4)}))
    assert docs.names() == ['A', 'B', 'C']
    assert docs.get('B') == Value.int32(3)


def test_docs_map_to_bson() -> None:
    docs = DocsMap({'A': Value.from_native({'x': [1, 2]}), 'S': Value.string('x')})
    assert docs.to_bson('A') == bson.encode({'x': [1, 2]})
    with pytest.raises(StructuralError):
        docs.to_bson('S')


def test_value_dict_default() -> None:
    values = ValueDict('limits', {'__default__': 1, 'big': 10})
    assert values['big'] == 10
    assert values['other'] == 1
    assert values[None] == 1
    assert values.get('big') == 10
    assert values.get_optional('other') == 1
    assert values.has_value('big')
    assert not values.has_value('other')
    assert values.has_default_value()
    assert values.get_default_value() == 1
    assert sorted(values) == ['__default__', 'big']
    assert len(values) == 2
    assert values.name == 'limits'


def test_value_dict_without_default() -> None:
    values = ValueDict('limits', {'big': 10})
    assert not values.has_default_value()
    assert values.get_optional('other') is None
    with pytest.raises(NotFoundError, match="'other' in limits"):
        values['other']
    with pytest.raises(NotFoundError):
        values.get_default_value()


def test_value_dict_custom_default_key() -> None:
    values = ValueDict('', {'*': 'x'}, default_key='*')
    assert values['anything'] == 'x'


def test_value_dict_from_value_skips_missing() -> None:
    value = Value.from_native({'a': 1, 'b': MISSING})
    values = ValueDict.from_value('test', value, _payload)
    assert values.has_value('a')
    assert not values.has_value('b')
    with pytest.raises(TypeError):
        ValueDict.from_value('test', Value.array(), _payload)


def test_value_dict_from_docs_map() -> None:
    docs = DocsMap({'TIMEOUTS': Value.from_native({'__default__': 5, 'slow': 50})})
    timeouts = ValueDict.from_docs_map('TIMEOUTS', docs, _payload)
    assert timeouts['slow'] == 50
    assert timeouts['fast'] == 5
    with pytest.raises(NotFoundError):
        ValueDict.from_docs_map('OTHER', docs, _payload)


def test_config_value_from_docs_map() -> None:
    docs = DocsMap({'LIMIT': Value.int32(42), 'HOSTS': Value.from_native(['a', 'b'])})
    limit = ConfigValue.from_docs_map('LIMIT', docs, _payload)
    assert limit.get() == 42
    assert limit.name == 'LIMIT'
    hosts = ConfigValue.from_docs_map('HOSTS', docs, lambda value: [_payload(host) for host in value.as_array()])
    assert hosts.get() == ['a', 'b']
    assert repr(limit) == "ConfigValue('LIMIT', 42)"
    assert docs.requested_names() == ['HOSTS', 'LIMIT']
    with pytest.raises(NotFoundError):
        ConfigValue.from_docs_map('OTHER', docs, _payload)
