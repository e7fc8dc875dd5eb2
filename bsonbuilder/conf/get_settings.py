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
from typing import NamedTuple, Optional

from structlog import get_logger

from bsonbuilder.conf.settings import BsonSettings

logger = get_logger()

CONFIG_YAML_ENV_VAR = 'BSONBUILDER_CONFIG_YAML'


class _SettingsMetadata(NamedTuple):
    source: Optional[str]
    settings: BsonSettings


_settings_singleton: Optional[_SettingsMetadata] = None


def get_global_settings() -> BsonSettings:
    """
    Returns the global settings.

    They are loaded from the yaml filepath in the 'BSONBUILDER_CONFIG_YAML' env var, when it's not set the defaults
    of `BsonSettings` are used. Settings are loaded once, asking for them again after the env var changed is an error.
    """
    settings_yaml_filepath = os.environ.get(CONFIG_YAML_ENV_VAR)
    return _load_settings_singleton(settings_yaml_filepath)


def get_settings_source() -> Optional[str]:
    """ Returns the path of the YAML file that was loaded, or None if the defaults were used.

    XXX: Will raise an assertion error if get_global_settings() wasn't used before.
    """
    assert _settings_singleton is not None, 'get_global_settings() not called before'
    return _settings_singleton.source


def _load_settings_singleton(source: Optional[str]) -> BsonSettings:
    global _settings_singleton

    if _settings_singleton is not None:
        if _settings_singleton.source != source:
            raise ValueError('loading config twice with a different file')
        return _settings_singleton.settings

    if source is None:
        settings = BsonSettings()
    else:
        settings = BsonSettings.from_yaml(filepath=source)
    logger.info('settings loaded', source=source or 'defaults')

    _settings_singleton = _SettingsMetadata(source=source, settings=settings)
    return settings
