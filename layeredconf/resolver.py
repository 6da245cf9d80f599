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

"""Extension fallback and overlay for named configs.

A config name has no extension. The resolver tries ``name.yml``, then
``name.yaml``, then ``name.json`` through the SourceLocator and parses the
first one found. Lower-priority extensions are never consulted once a
file is found, even when it turns out to be malformed: a broken file is
reported, not hidden behind an older copy in another format.

After parsing, the overlay provider applies managed values unless it
reports the name as exempt.

Error Handling:
    - No file for any extension: None (caller uses defaults)
    - Parse failure of the found file: MalformedContentError
    - Read failure of the found file: logged, next extension is tried
"""

from __future__ import annotations

from typing import IO, Any, TypeVar

from layeredconf.exceptions import MalformedContentError
from layeredconf.formats import CONFIG_EXTENSIONS, convert_stream_to_string, parse_mapping
from layeredconf.locator import SourceLocator
from layeredconf.logging import Logger, get_global_logger, sanitize
from layeredconf.overlay import NoOverlay, OverlayProvider, materialize

T = TypeVar("T")


def _describe(stream: IO[bytes], filename: str) -> str:
    return sanitize(getattr(stream, "name", filename))


class ExtensionResolver:
    """Resolves config names to parsed, overlaid values.

    Attributes:
        locator: Source lookup used for every candidate file.
        overlay: Provider for managed values.
    """

    def __init__(
        self,
        locator: SourceLocator,
        overlay: OverlayProvider | None = None,
        logger: Logger | None = None,
    ) -> None:
        self.locator = locator
        self.overlay: OverlayProvider = overlay if overlay is not None else NoOverlay()
        self._logger = logger

    @property
    def logger(self) -> Logger:
        return self._logger if self._logger is not None else get_global_logger()

    def resolve_as_map(self, name: str, path: str = "") -> dict[str, Any] | None:
        """Load config name as a mapping.

        Returns:
            The parsed mapping with managed values applied, or None if no
            file exists for any extension.

        Raises:
            MalformedContentError: If the first file found does not parse.
        """
        for extension in CONFIG_EXTENSIONS:
            config = self._load_mapping(name + extension, path)
            if config is None:
                continue
            if self.overlay.is_exclusion_config_file(name):
                self.logger.debug("OVERLAY", f"Skipping merge for exempt config {sanitize(name)}")
            else:
                self.overlay.merge_map(config)
            return config
        return None

    def resolve_as_object(self, name: str, shape: type[T], path: str = "") -> T | None:
        """Load config name as an instance of shape.

        Exempt configs are built straight from the parsed file; all others
        go through the provider's merge_object.

        Raises:
            MalformedContentError: If the first file found does not parse.
            ConfigError: If the values do not fit shape.
        """
        for extension in CONFIG_EXTENSIONS:
            config = self._load_mapping(name + extension, path)
            if config is None:
                continue
            if self.overlay.is_exclusion_config_file(name):
                self.logger.debug("OVERLAY", f"Skipping merge for exempt config {sanitize(name)}")
                return materialize(config, shape)
            return self.overlay.merge_object(config, shape)
        return None

    def resolve_as_string(self, filename: str, path: str = "") -> str | None:
        """Load the raw content of filename (extension included).

        No extension fallback and no overlay are applied.

        Raises:
            MalformedContentError: If the file is not valid UTF-8.
        """
        stream = self.locator.locate(filename, path)
        if stream is None:
            return None
        with stream:
            try:
                return convert_stream_to_string(stream)
            except UnicodeDecodeError as err:
                source = _describe(stream, filename)
                self.logger.warning("CONFIG", f"Config file is not valid UTF-8: {source}")
                raise MalformedContentError(
                    f"Config file is not valid UTF-8: {source}", source=source
                ) from err
            except OSError as err:
                self.logger.warning(
                    "CONFIG",
                    f"Unable to read {_describe(stream, filename)}: {sanitize(err)}",
                )
                return None

    def _load_mapping(self, filename: str, path: str) -> dict[str, Any] | None:
        stream = self.locator.locate(filename, path)
        if stream is None:
            return None
        with stream:
            try:
                return parse_mapping(stream, filename)
            except MalformedContentError as err:
                err.source = _describe(stream, filename)
                self.logger.warning("CONFIG", f"{err} ({err.source})")
                raise
            except OSError as err:
                self.logger.warning(
                    "CONFIG",
                    f"Unable to read {_describe(stream, filename)}: {sanitize(err)}",
                )
                return None
