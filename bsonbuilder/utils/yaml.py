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

import os
from pathlib import Path
from typing import Any, Union

import yaml

_EXTENDS_KEY = 'extends'


def dict_from_yaml(*, filepath: Union[Path, str]) -> dict[str, Any]:
    """Takes a filepath to a yaml file and returns a dictionary with its contents."""
    if not os.path.isfile(filepath):
        raise ValueError(f"'{filepath}' is not a file")

    with open(filepath, 'r') as file:
        contents = yaml.safe_load(file)

    if contents is None:
        return {}
    if not isinstance(contents, dict):
        raise ValueError(f"'{filepath}' cannot be parsed as a dictionary")
    return contents


def dict_from_extended_yaml(*, filepath: Union[Path, str], _seen: frozenset[Path] = frozenset()) -> dict[str, Any]:
    """
    Takes a filepath to a yaml file and returns a dictionary with its contents.

    A file can name another one in its 'extends' key, relative to its own directory. The base file is loaded first
    (it can extend another one too) and the contents of the extending file are merged on top of it.

    Note: the 'extends' key is reserved and will not be present in the returned dictionary.
    """
    path = Path(filepath).resolve()
    if path in _seen:
        raise ValueError(f"'{filepath}' is extended in a cycle")

    contents = dict_from_yaml(filepath=path)
    base_file = contents.pop(_EXTENDS_KEY, None)
    if not base_file:
        return contents

    base = dict_from_extended_yaml(filepath=path.parent / str(base_file), _seen=_seen | {path})
    _deep_merge(base, contents)
    return base


def _deep_merge(first: dict[str, Any], second: dict[str, Any]) -> None:
    """
    Recursively merges two dicts, altering the first one in place.

    >>> dict1 = dict(a=1, b=dict(c=2, d=3), e=dict(f=4))
    >>> _deep_merge(dict1, dict(b=dict(d=5, e=6), e=7))
    >>> dict1 == dict(a=1, b=dict(c=2, d=5, e=6), e=7)
    True
    """
    for key, value in second.items():
        if isinstance(first.get(key), dict) and isinstance(value, dict):
            _deep_merge(first[key], value)
        else:
            first[key] = value
