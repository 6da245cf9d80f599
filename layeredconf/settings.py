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

"""Process-wide configuration input for layeredconf.

The only input the engine reads from its environment is the list of
externalized configuration directories. It is a single colon-separated
value, read once when this module is imported:

    LAYEREDCONF_CONFIG_DIR=/etc/app:/opt/app/cfg

Entries are searched in order. An empty entry is allowed and is
resolved inside the application bundle. When the variable is unset the list holds a
single empty entry.
"""

from __future__ import annotations

from collections.abc import Mapping
import os

CONFIG_DIR_ENV_VAR = "LAYEREDCONF_CONFIG_DIR"


def parse_config_dirs(value: str | None) -> tuple[str, ...]:
    """Split a colon-separated directory list.

    Args:
        value: Raw value of the environment variable, or None if unset.

    Returns:
        The directories in search order, each stripped of surrounding
        whitespace. Empty entries are kept as "".

    Example:
        ```python
        parse_config_dirs("/etc/app: /opt/app/cfg")  # ('/etc/app', '/opt/app/cfg')
        parse_config_dirs(None)                      # ('',)
        ```
    """
    return tuple(entry.strip() for entry in (value or "").split(":"))


def config_dirs_from_env(environ: Mapping[str, str] | None = None) -> tuple[str, ...]:
    """Read the externalized directory list from the environment."""
    env = os.environ if environ is None else environ
    return parse_config_dirs(env.get(CONFIG_DIR_ENV_VAR))


# Immutable for the lifetime of the process
EXTERNALIZED_CONFIG_DIRS: tuple[str, ...] = config_dirs_from_env()
