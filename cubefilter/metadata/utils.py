"""Reading metadata documents from JSON files."""

import json
from pathlib import Path
from typing import Any

from ..errors import ArgumentError, ModelError

__all__ = ["read_metadata"]


def read_metadata(source) -> dict[str, Any]:
    """Read a metadata document from `source`, a path or an open file-like
    object with JSON content. The engine object (``api``) can not be stored
    in JSON and has to be attached by the caller.

    Raises `ArgumentError` if the file does not exist and `ModelError` if it
    does not contain a JSON object."""

    if hasattr(source, "read"):
        content = source.read()
        name = getattr(source, "name", "<stream>")
    else:
        path = Path(source)
        if not path.is_file():
            raise ArgumentError(f"Metadata file '{path}' does not exist")
        content = path.read_text(encoding="utf-8")
        name = str(path)

    try:
        document = json.loads(content)
    except ValueError as e:
        raise ModelError(f"Unable to parse metadata file '{name}': {e}") from e

    if not isinstance(document, dict):
        raise ModelError(f"Metadata file '{name}' does not contain a JSON object")

    return document
