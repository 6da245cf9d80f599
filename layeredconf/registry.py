# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Config engine registry for layeredconf.

The host application picks its configuration engine explicitly at
startup. Engines are registered under a name; ``create_config`` builds a
new instance of the named engine with the keyword arguments given.

Registered by default:

- file: FileConfig (externalized directories + bundle, YAML/JSON)

Example:
    Plugging in a custom engine:
        ```python
        from layeredconf.registry import create_config, register_config

        class DatabaseConfig:
            def __init__(self, dsn: str) -> None:
                ...
            # get_string, get_stream, get_map, get_map_no_cache,
            # get_object and clear as in layeredconf.config.Config

        register_config("database", DatabaseConfig)
        config = create_config("database", dsn="postgresql://...")
        ```
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from layeredconf.config import Config, FileConfig
from layeredconf.exceptions import ConfigError

DEFAULT_ENGINE = "file"

_CONFIG_REGISTRY: dict[str, Callable[..., Config]] = {}


def register_config(name: str, factory: Callable[..., Config]) -> None:
    """Register a config engine by name.

    Registering the same name twice overwrites the previous registration.

    Args:
        name: Engine name used with create_config().
        factory: Class or callable returning an object implementing the
            Config protocol.
    """
    _CONFIG_REGISTRY[name] = factory


def available_configs() -> list[str]:
    """Return the registered engine names in registration order."""
    return list(_CONFIG_REGISTRY)


def create_config(name: str = DEFAULT_ENGINE, **kwargs: Any) -> Config:
    """Build a new config engine by name.

    Args:
        name: Registered engine name. Case-sensitive.
        **kwargs: Passed to the engine factory.

    Returns:
        A new engine instance.

    Raises:
        ConfigError: If the name is not registered. The message lists the
            available engines.
    """
    if name not in _CONFIG_REGISTRY:
        available = ", ".join(_CONFIG_REGISTRY)
        raise ConfigError(
            f"Unknown config engine: {name!r}. Available: {available or '(none)'}"
        )
    return _CONFIG_REGISTRY[name](**kwargs)


register_config(DEFAULT_ENGINE, FileConfig)
