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

"""Overlay provider protocol and typed object mapping.

The resolver hands every freshly parsed config to an overlay provider,
which applies externally managed values on top of what the file says.
Providers are supplied by the host application; the engine only relies on
the three methods below.

Exemption:
    ``is_exclusion_config_file(name)`` is consulted before any merge. For an
    exempt name the map is returned exactly as parsed and a typed object is
    built straight from the parsed values.

Design Philosophy:
    - Providers are Protocol classes (structural subtyping, not inheritance)
    - ``merge_map`` mutates in place, ``merge_object`` returns a new object
    - Typed objects are plain dataclasses or any keyword-argument callable

Example:
    Implementing a provider:
        ```python
        from typing import Any

        class VaultOverlay:
            def merge_map(self, config: dict[str, Any]) -> None:
                config.update(fetch_secrets())

            def merge_object(self, config: dict[str, Any], shape: type) -> Any:
                self.merge_map(config)
                return materialize(config, shape)

            def is_exclusion_config_file(self, name: str) -> bool:
                return name == "vault"
        ```
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import fields, is_dataclass
from typing import Any, Protocol, TypeVar

from layeredconf.exceptions import ConfigError

T = TypeVar("T")

# -------------------------------
# Provider Protocol
# -------------------------------


class OverlayProvider(Protocol):
    """Protocol for collaborators that overlay managed values."""

    def merge_map(self, config: dict[str, Any]) -> None:
        """Overlay managed values onto config, in place.

        Args:
            config: Freshly parsed config mapping. Owned by the resolver
                and not shared with any other caller yet.
        """
        ...

    def merge_object(self, config: dict[str, Any], shape: type[T]) -> T:
        """Overlay managed values and build a typed object.

        Args:
            config: Freshly parsed config mapping.
            shape: Target type, typically a dataclass.

        Returns:
            An instance of shape with the merged values applied.
        """
        ...

    def is_exclusion_config_file(self, name: str) -> bool:
        """Return True if config name must never receive managed values."""
        ...


# -------------------------------
# Object mapping
# -------------------------------


def materialize(data: Any, shape: type[T]) -> T:
    """Build an instance of shape from a parsed config mapping.

    Dataclasses are checked field by field so a typo in a config file is
    reported by name instead of as a bare TypeError. Any other shape is
    called with the mapping as keyword arguments.

    Args:
        data: Parsed config value. Must be a mapping with string keys.
        shape: Target type.

    Returns:
        The constructed object.

    Raises:
        ConfigError: If data is not a mapping, holds keys the shape does not
            accept, or lacks required ones.

    Example:
        ```python
        @dataclass
        class Server:
            host: str
            port: int = 8080

        materialize({"host": "localhost"}, Server)  # Server(host='localhost', port=8080)
        ```
    """
    name = getattr(shape, "__name__", repr(shape))
    if not isinstance(data, Mapping):
        raise ConfigError(f"Cannot build {name} from {type(data).__name__}: expected a mapping")

    if is_dataclass(shape):
        accepted = {f.name for f in fields(shape) if f.init}
        unknown = sorted(str(k) for k in data if k not in accepted)
        if unknown:
            raise ConfigError(f"Unknown field(s) for {name}: {', '.join(unknown)}")

    try:
        return shape(**data)
    except TypeError as err:
        raise ConfigError(f"Cannot build {name} from config: {err}") from err
