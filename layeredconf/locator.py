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

"""Source lookup across externalized directories and the application bundle.

A config file is looked up in three tiers, first match wins:

Search Tiers
------------
1. **Externalized directories** (LAYEREDCONF_CONFIG_DIR, in order)
   - Each directory is joined with the path hint, if any
   - An absolute path hint replaces the directory and is searched once
   - The first directory holding the file wins; later ones are not searched
   - An empty entry is bundle-relative: with a relative hint it opens
     ``<bundle>/<hint>/<filename>``, without one it defers to tiers 2 and 3.
     The process working directory is never searched

2. **Bundle root** (``<bundle>/<filename>``)
   - The bundle is a directory or an importable package's resources

3. **Bundle config folder** (``<bundle>/config/<filename>``)
   - Conventional location for defaults shipped with the application

A file that is absent from a tier is a normal negative result and never
raises. An I/O failure while opening (permission denied, a directory in
place of the file) is logged as a warning and the tier is skipped.

Example:
    ```python
    from pathlib import Path
    from layeredconf.locator import SourceLocator

    locator = SourceLocator(["/etc/app", "/opt/app/cfg"], bundle=Path("resources"))
    stream = locator.locate("server.yml")
    if stream is not None:
        with stream:
            data = stream.read()
    ```
"""

from __future__ import annotations

from collections.abc import Sequence
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path, PurePath
from typing import IO

from layeredconf.formats import CONFIG_EXT_YAML, CONFIG_EXT_YML
from layeredconf.logging import Logger, get_global_logger, sanitize
from layeredconf.settings import EXTERNALIZED_CONFIG_DIRS

BUNDLE_CONFIG_FOLDER = "config"


def is_absolute_hint(path: str) -> bool:
    """Return True if a path hint must bypass the externalized directories."""
    return path.startswith("/") or PurePath(path).is_absolute()


def _resolve_bundle(bundle: str | Traversable | None) -> Traversable | None:
    """Turn a package name into its resource root; pass anything else through."""
    if isinstance(bundle, str):
        return resources.files(bundle)
    return bundle


class SourceLocator:
    """Opens config files from the first tier that holds them.

    Attributes:
        config_dirs: Externalized directories in search order.
        bundle: Root of the bundled resources, or None to disable the
            bundle tiers.
    """

    def __init__(
        self,
        config_dirs: Sequence[str] | None = None,
        bundle: str | Traversable | None = None,
        logger: Logger | None = None,
    ) -> None:
        """Initialize the locator.

        Args:
            config_dirs: Externalized directories. Defaults to the list read
                from LAYEREDCONF_CONFIG_DIR at import time.
            bundle: A directory Path, any importlib.resources Traversable,
                or the name of an importable package whose resources hold
                the bundled configs.
            logger: Logger for tier diagnostics. Defaults to the global
                logger at call time.
        """
        self.config_dirs: tuple[str, ...] = (
            EXTERNALIZED_CONFIG_DIRS if config_dirs is None else tuple(config_dirs)
        )
        self.bundle = _resolve_bundle(bundle)
        self._logger = logger

    @property
    def logger(self) -> Logger:
        return self._logger if self._logger is not None else get_global_logger()

    def candidate_dir(self, path: str, index: int) -> Path:
        """Directory searched for externalized directory number index."""
        if is_absolute_hint(path):
            return Path(path)
        return Path(self.config_dirs[index]) / path

    def locate(self, filename: str, path: str = "") -> IO[bytes] | None:
        """Open filename from the highest-priority tier that holds it.

        Args:
            filename: File name including its extension.
            path: Optional path hint. Empty uses the externalized
                directories as-is, a relative hint is appended to each of
                them, an absolute hint is searched on its own. Empty
                directory entries resolve inside the bundle.

        Returns:
            An open binary stream owned by the caller, or None if no tier
            holds the file.
        """
        logger = self.logger
        absolute = is_absolute_hint(path)

        # An absolute hint names one directory, not one per entry
        indices = range(1) if absolute else range(len(self.config_dirs))
        for index in indices:
            if not absolute and not self.config_dirs[index]:
                stream = self._open_bundle_relative(filename, path)
                if stream is not None:
                    return stream
                continue
            directory = self.candidate_dir(path, index)
            stream = self._open_file(directory / filename)
            if stream is not None:
                logger.verbose(
                    "CONFIG",
                    f"Config loaded from externalized folder for "
                    f"{sanitize(filename)} in {sanitize(directory)}",
                )
                return stream
            logger.verbose(
                "CONFIG",
                f"Unable to load config from externalized folder for "
                f"{sanitize(filename)} in {sanitize(directory)}",
            )

        logger.verbose(
            "CONFIG",
            f"Trying to load config from bundle directory for file {sanitize(filename)}",
        )
        stream = self._open_resource(filename)
        if stream is not None:
            logger.verbose("CONFIG", f"Config loaded from bundle for {sanitize(filename)}")
            return stream

        stream = self._open_resource(f"{BUNDLE_CONFIG_FOLDER}/{filename}")
        if stream is not None:
            logger.verbose(
                "CONFIG", f"Config loaded from default folder for {sanitize(filename)}"
            )
            return stream

        self._log_not_found(filename)
        return None

    # -------------------------------
    # Tier helpers
    # -------------------------------

    def _open_bundle_relative(self, filename: str, path: str) -> IO[bytes] | None:
        # Without a hint the bundle tiers below already cover this entry
        if not path:
            return None
        relative = f"{path.strip('/')}/{filename}"
        stream = self._open_resource(relative)
        if stream is not None:
            self.logger.verbose(
                "CONFIG", f"Config loaded from bundle for {sanitize(relative)}"
            )
            return stream
        self.logger.verbose(
            "CONFIG", f"Unable to load config from bundle for {sanitize(relative)}"
        )
        return None

    def _open_file(self, candidate: Path) -> IO[bytes] | None:
        try:
            return candidate.open("rb")
        except FileNotFoundError:
            return None
        except OSError as err:
            self.logger.warning(
                "CONFIG",
                f"Unable to open {sanitize(candidate)}: {sanitize(err.strerror or err)}",
            )
            return None

    def _open_resource(self, relative: str) -> IO[bytes] | None:
        if self.bundle is None:
            return None
        resource = self.bundle
        for part in relative.split("/"):
            resource = resource / part
        if not resource.is_file():
            return None
        try:
            return resource.open("rb")
        except OSError as err:
            self.logger.warning(
                "CONFIG",
                f"Unable to open bundled {sanitize(relative)}: "
                f"{sanitize(err.strerror or err)}",
            )
            return None

    def _log_not_found(self, filename: str) -> None:
        name = sanitize(filename)
        if filename.endswith(CONFIG_EXT_YML):
            self.logger.verbose(
                "CONFIG",
                f"Unable to load config {name}. "
                f"Looking for the same file name with extension yaml...",
            )
        elif filename.endswith(CONFIG_EXT_YAML):
            self.logger.verbose(
                "CONFIG",
                f"Unable to load config {name}. "
                f"Looking for the same file name with extension json...",
            )
        else:
            stem = sanitize(filename.split(".", 1)[0])
            self.logger.verbose(
                "CONFIG",
                f"Unable to load config '{stem}' with extension yml, yaml and json "
                f"from external config, application config and module config. "
                f"Please ignore this message if you are sure that your "
                f"application is not using this config file.",
            )
