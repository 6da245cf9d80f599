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

"""Built-in overlay providers.

NoOverlay
    Identity provider. Configs are returned exactly as parsed. This is the
    provider a FileConfig uses when the host supplies none.

StaticOverlay
    Applies one fixed mapping of managed values to every config that is
    not on its exclusion list.

Merge Behavior
--------------
Managed values are deep-merged with "overlay wins" semantics:
  - **Dicts**: Recursively merged (keys from the overlay override the file)
  - **Lists**: Completely replaced (NOT appended/extended)
  - **Scalars**: Overwritten (strings, numbers, booleans)

Example:
    ```python
    from layeredconf import FileConfig
    from layeredconf.overlay import StaticOverlay

    overlay = StaticOverlay({"db": {"password": "s3cret"}}, exclusions=["logging"])
    config = FileConfig(overlay=overlay)
    ```

The exclusion list can also be read from a config of its own:

    ```python
    boot = FileConfig()
    overlay = StaticOverlay.from_config(managed, boot.get_map("values"))
    ```
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import copy
from typing import Any, TypeVar

from layeredconf.exceptions import ConfigError
from layeredconf.logging import Logger, get_global_logger, sanitize
from layeredconf.overlay.base import materialize

T = TypeVar("T")

EXCLUSION_LIST_KEY = "exclusionConfigFileList"


# -------------------------------
# Merge logic
# -------------------------------


def deep_merge(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge two mappings with "overlay wins".

    Rules:
      - dict + dict -> deep merge
      - list + list -> overlay REPLACES base (not concatenated)
      - everything else -> overlay overwrites base

    This function does not mutate inputs; returns a new dict. Values taken
    from overlay are copied so the result never aliases it.
    """
    result: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if k in result and isinstance(result[k], Mapping) and isinstance(v, Mapping):
            result[k] = deep_merge(result[k], v)
        else:
            # Replace lists and scalars entirely
            result[k] = copy.deepcopy(v)
    return result


def load_exclusions(config: Mapping[str, Any] | None) -> frozenset[str]:
    """Read the exempt config names from a parsed config.

    The names live under ``exclusionConfigFileList`` as a list of strings.

    Raises:
        ConfigError: If the value is present but not a list of strings.
    """
    if not config:
        return frozenset()
    names = config.get(EXCLUSION_LIST_KEY) or []
    if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
        raise ConfigError(f"{EXCLUSION_LIST_KEY} must be a list of config names")
    return frozenset(names)


# -------------------------------
# Providers
# -------------------------------


class NoOverlay:
    """Provider that leaves every config untouched."""

    def merge_map(self, config: dict[str, Any]) -> None:
        pass

    def merge_object(self, config: dict[str, Any], shape: type[T]) -> T:
        return materialize(config, shape)

    def is_exclusion_config_file(self, name: str) -> bool:
        return False


class StaticOverlay:
    """Overlay a fixed set of managed values onto every non-exempt config.

    Attributes:
        values: Managed values applied on top of each parsed config.
        exclusions: Config names that never receive managed values.
    """

    def __init__(
        self,
        values: Mapping[str, Any],
        exclusions: Iterable[str] = (),
        logger: Logger | None = None,
    ) -> None:
        self.values: dict[str, Any] = copy.deepcopy(dict(values))
        self.exclusions: frozenset[str] = frozenset(exclusions)
        self._logger = logger

    @classmethod
    def from_config(
        cls,
        values: Mapping[str, Any],
        config: Mapping[str, Any] | None,
        logger: Logger | None = None,
    ) -> StaticOverlay:
        """Build an overlay whose exclusions come from a parsed config.

        Args:
            values: Managed values applied on top of each parsed config.
            config: Parsed config holding ``exclusionConfigFileList``, or
                None when that config does not exist.
            logger: Logger for merge diagnostics.

        Raises:
            ConfigError: If the exclusion list is not a list of strings.
        """
        return cls(values, exclusions=load_exclusions(config), logger=logger)

    @property
    def logger(self) -> Logger:
        return self._logger if self._logger is not None else get_global_logger()

    def merge_map(self, config: dict[str, Any]) -> None:
        merged = deep_merge(config, self.values)
        config.clear()
        config.update(merged)
        self.logger.debug(
            "OVERLAY",
            f"Applied {len(self.values)} managed key(s): "
            f"{sanitize(', '.join(map(str, self.values)))}",
        )

    def merge_object(self, config: dict[str, Any], shape: type[T]) -> T:
        self.merge_map(config)
        return materialize(config, shape)

    def is_exclusion_config_file(self, name: str) -> bool:
        return name in self.exclusions
