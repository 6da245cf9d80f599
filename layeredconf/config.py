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

"""Public configuration API for layeredconf.

This module defines the Config protocol consumed by host applications and
FileConfig, the file-based engine that implements it.

Resolution Flow
---------------
1. Cache lookup (keyed by result kind, config name and path hint)
2. On a miss, extension fallback: name.yml -> name.yaml -> name.json
3. Each candidate is searched in externalized dirs -> bundle -> bundle/config
4. The first file found is parsed and overlaid with managed values
5. The result is stored in the cache and returned

Lifecycle
---------
A FileConfig is constructed once by the host at startup and passed to the
code that needs configuration. Tests construct independent instances.
There is no hidden module-level instance.

Example:
    Basic usage:
        ```python
        from dataclasses import dataclass
        from pathlib import Path
        from layeredconf import FileConfig

        @dataclass
        class ServerConfig:
            host: str = "0.0.0.0"
            port: int = 8080

        config = FileConfig(bundle=Path(__file__).parent / "resources")
        server = config.get_object("server", ServerConfig) or ServerConfig()
        raw = config.get_map("client")   # dict, or None if there is no client.yml
        ```

Note:
    Values returned by the cached getters are shared by every caller in the
    same cache generation. Treat them as read-only, or use
    get_map_no_cache() to obtain a private copy.
"""

from __future__ import annotations

from collections.abc import Sequence
from importlib.resources.abc import Traversable
from typing import IO, Any, Protocol, TypeVar

from layeredconf.cache import ValueCache
from layeredconf.locator import SourceLocator
from layeredconf.logging import Logger
from layeredconf.overlay import OverlayProvider
from layeredconf.resolver import ExtensionResolver

T = TypeVar("T")


class Config(Protocol):
    """Protocol for configuration engines."""

    def get_string(self, filename: str, path: str = "") -> str | None:
        """Return the cached raw content of filename (extension included)."""
        ...

    def get_stream(self, filename: str, path: str = "") -> IO[bytes] | None:
        """Open filename without caching. The caller must close the stream."""
        ...

    def get_map(self, name: str, path: str = "") -> dict[str, Any] | None:
        """Return the cached mapping for config name."""
        ...

    def get_map_no_cache(self, name: str, path: str = "") -> dict[str, Any] | None:
        """Resolve config name as a mapping, bypassing the cache."""
        ...

    def get_object(self, name: str, shape: type[T], path: str = "") -> T | None:
        """Return the cached typed object for config name."""
        ...

    def clear(self) -> None:
        """Drop every cached value."""
        ...


class FileConfig:
    """File-based configuration engine.

    Attributes:
        locator: Source lookup across externalized dirs and the bundle.
        resolver: Extension fallback and overlay.
        cache: Shared value cache.
    """

    def __init__(
        self,
        config_dirs: Sequence[str] | None = None,
        bundle: str | Traversable | None = None,
        overlay: OverlayProvider | None = None,
        cache: ValueCache | None = None,
        logger: Logger | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            config_dirs: Externalized directories in priority order.
                Defaults to LAYEREDCONF_CONFIG_DIR as read at import time.
            bundle: Directory, Traversable or package name holding the
                configs shipped with the application.
            overlay: Provider for managed values. Defaults to NoOverlay.
            cache: Value cache. Defaults to a fresh ValueCache.
            logger: Logger for diagnostics. Defaults to the global logger.
        """
        self.locator = SourceLocator(config_dirs, bundle, logger=logger)
        self.resolver = ExtensionResolver(self.locator, overlay, logger=logger)
        self.cache = cache if cache is not None else ValueCache(logger=logger)

    def get_string(self, filename: str, path: str = "") -> str | None:
        return self.cache.get_or_compute(
            ("string", filename, path),
            lambda: self.resolver.resolve_as_string(filename, path),
        )

    def get_stream(self, filename: str, path: str = "") -> IO[bytes] | None:
        return self.locator.locate(filename, path)

    def get_map(self, name: str, path: str = "") -> dict[str, Any] | None:
        return self.cache.get_or_compute(
            ("map", name, path),
            lambda: self.resolver.resolve_as_map(name, path),
        )

    def get_map_no_cache(self, name: str, path: str = "") -> dict[str, Any] | None:
        return self.resolver.resolve_as_map(name, path)

    def get_object(self, name: str, shape: type[T], path: str = "") -> T | None:
        return self.cache.get_or_compute(
            ("object", name, shape, path),
            lambda: self.resolver.resolve_as_object(name, shape, path),
        )

    def clear(self) -> None:
        self.cache.clear()
