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

"""Exception hierarchy for layeredconf.

This module defines the exceptions raised by the configuration engine.
A config that cannot be found is NOT an error: lookups return None so
callers can fall back to defaults. Exceptions are reserved for:

- ConfigError: The engine itself is misused or misconfigured (unknown
    engine name, a typed shape that does not fit the parsed values)
- MalformedContentError: A config file was found but could not be parsed

All exceptions inherit from LayeredConfError, allowing users to catch all
layeredconf errors with a single except clause if needed.

Example:
    Catching a broken config file:
        ```python
        from layeredconf import FileConfig
        from layeredconf.exceptions import MalformedContentError

        config = FileConfig()
        try:
            server = config.get_map("server")
        except MalformedContentError as e:
            print(f"Fix {e.source}: {e}")
        ```
"""

from __future__ import annotations

__all__ = [
    "LayeredConfError",
    "ConfigError",
    "MalformedContentError",
]


class LayeredConfError(Exception):
    """Base exception for all layeredconf errors."""

    pass


class ConfigError(LayeredConfError):
    """Raised for configuration-related errors.

    This exception is raised when there are problems with:

    - Engine selection (unknown engine name in the registry)
    - Typed object mapping (unknown or missing fields for the target shape)
    - Invalid overlay or exclusion settings
    """

    pass


class MalformedContentError(ConfigError):
    """Raised when a located config file fails to parse.

    The winning source is reported as-is; the resolver never falls back to
    a lower-priority extension to hide an authoring mistake.

    Attributes:
        source: Sanitized description of the offending file.
    """

    def __init__(self, message: str, source: str) -> None:
        super().__init__(message)
        self.source = source

    def __reduce__(self):
        return (type(self), (*self.args, self.source), self.__dict__)
