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

from collections.abc import Iterator

import pytest

from bsonbuilder.conf import get_settings


@pytest.fixture(autouse=True)
def reset_global_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Every test starts without global settings loaded and without a config file in the environment."""
    monkeypatch.delenv(get_settings.CONFIG_YAML_ENV_VAR, raising=False)
    monkeypatch.setattr(get_settings, '_settings_singleton', None)
    yield
