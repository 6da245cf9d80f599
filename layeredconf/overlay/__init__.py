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

"""Overlay of externally managed values onto parsed configs.

Public API:

- OverlayProvider: Protocol the resolver calls after parsing a config
- NoOverlay: Identity provider (the default)
- StaticOverlay: Applies a fixed mapping of managed values
- materialize: Build a typed object from a parsed mapping
- deep_merge / load_exclusions: Helpers for writing providers
"""

from .base import OverlayProvider, materialize
from .static import NoOverlay, StaticOverlay, deep_merge, load_exclusions

__all__ = [
    "OverlayProvider",
    "NoOverlay",
    "StaticOverlay",
    "materialize",
    "deep_merge",
    "load_exclusions",
]
