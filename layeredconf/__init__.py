"""
layeredconf - layered configuration lookup with daily caching

A small library that resolves a logical config name (``server``) into a
parsed value, searching externalized directories before the configs
bundled with the application, and caching the result in memory until the
next midnight.

layeredconf provides:
  - Ordered lookup: externalized dirs -> bundle root -> bundle config/ folder
  - Extension fallback: .yml -> .yaml -> .json
  - Results as raw text, a dict, or a typed object (dataclass)
  - Overlay of externally managed values, with per-config opt-out
  - Thread-safe cache with single-flight loading and daily expiry

Quick Start
-----------
Point the engine at your deployment's config directories:

    $ export LAYEREDCONF_CONFIG_DIR=/etc/myapp:/opt/myapp/cfg

Then, at application startup:

    from layeredconf import FileConfig

    config = FileConfig(bundle="myapp.resources")
    server = config.get_map("server")

Package Structure
-----------------
config : module
    Config protocol and the FileConfig engine.
locator : module
    Source lookup across tiers.
resolver : module
    Extension fallback and overlay.
cache : module
    Value cache with daily expiry.
overlay : package
    Managed-value providers and typed object mapping.
registry : module
    Named engine factories.

Project Information
-------------------
License: Apache-2.0
"""

__version__ = "0.1.0"
__license__ = "Apache-2.0"
__description__ = "Layered configuration lookup with daily caching"

from layeredconf.cache import ValueCache
from layeredconf.config import Config, FileConfig
from layeredconf.exceptions import ConfigError, LayeredConfError, MalformedContentError
from layeredconf.formats import (
    CONFIG_EXTENSIONS,
    convert_stream_to_string,
    convert_string_to_stream,
)
from layeredconf.locator import SourceLocator
from layeredconf.overlay import NoOverlay, OverlayProvider, StaticOverlay
from layeredconf.registry import create_config, register_config
from layeredconf.resolver import ExtensionResolver

__all__ = [
    "__version__",
    "__license__",
    "__description__",
    "Config",
    "FileConfig",
    "ValueCache",
    "SourceLocator",
    "ExtensionResolver",
    "OverlayProvider",
    "NoOverlay",
    "StaticOverlay",
    "create_config",
    "register_config",
    "CONFIG_EXTENSIONS",
    "convert_stream_to_string",
    "convert_string_to_stream",
    "LayeredConfError",
    "ConfigError",
    "MalformedContentError",
]
