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

"""Config file formats and stream helpers.

Supported Extensions (in priority order):
    1. ``.yml``  - YAML, short form
    2. ``.yaml`` - YAML, long form
    3. ``.json`` - JSON

The order is fixed for the lifetime of the process. YAML is parsed with
PyYAML's ``safe_load``; JSON with the standard library parser.

Parsing Rules:
    - An empty document is an empty mapping
    - A syntax error raises MalformedContentError (chained with "from err")
    - A top-level value that is not a mapping raises MalformedContentError
"""

from __future__ import annotations

import io
import json
from typing import IO, Any

import yaml

from layeredconf.exceptions import MalformedContentError
from layeredconf.logging import sanitize

CONFIG_EXT_YML = ".yml"
CONFIG_EXT_YAML = ".yaml"
CONFIG_EXT_JSON = ".json"

CONFIG_EXTENSIONS: tuple[str, ...] = (CONFIG_EXT_YML, CONFIG_EXT_YAML, CONFIG_EXT_JSON)


def parse_document(stream: IO[bytes], filename: str) -> Any:
    """Parse a config stream according to the extension of filename.

    Args:
        stream: Open binary stream positioned at the start of the file.
        filename: File name used to pick the parser and to report errors.

    Returns:
        The parsed document, or None for an empty document.

    Raises:
        MalformedContentError: If the content is not valid for its format.
        OSError: If reading the stream fails.
    """
    if filename.endswith(CONFIG_EXT_JSON):
        raw = stream.read()
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as err:
            raise MalformedContentError(
                f"Error decoding JSON as UTF-8: {sanitize(filename)}",
                source=sanitize(filename),
            ) from err
        if not text.strip():
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as err:
            raise MalformedContentError(
                f"Error parsing JSON: {sanitize(filename)}: line {err.lineno}, "
                f"column {err.colno}: {err.msg}",
                source=sanitize(filename),
            ) from err

    try:
        return yaml.safe_load(stream)
    except yaml.YAMLError as err:
        detail = ""
        mark = getattr(err, "problem_mark", None)
        if mark is not None:
            detail = f": line {mark.line + 1}, column {mark.column + 1}"
        raise MalformedContentError(
            f"Error parsing YAML: {sanitize(filename)}{detail}",
            source=sanitize(filename),
        ) from err


def parse_mapping(stream: IO[bytes], filename: str) -> dict[str, Any]:
    """Parse a config stream that must hold a mapping at the top level.

    Returns:
        The parsed mapping. An empty document yields an empty dict.

    Raises:
        MalformedContentError: On syntax errors or a non-mapping document.
    """
    data = parse_document(stream, filename)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise MalformedContentError(
            f"Top-level value must be a mapping, got {type(data).__name__}: "
            f"{sanitize(filename)}",
            source=sanitize(filename),
        )
    return data


def convert_stream_to_string(stream: IO[bytes]) -> str:
    """Read a whole binary stream as UTF-8 text."""
    return stream.read().decode("utf-8")


def convert_string_to_stream(text: str) -> IO[bytes]:
    """Wrap text in an in-memory binary stream."""
    return io.BytesIO(text.encode("utf-8"))
