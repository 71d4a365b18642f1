"""Read collection files from disk for the command line front end.

JSON and YAML documents go through format detection; ``.env`` and ``.csv``
files are variable tables picked by extension.
"""

import json
from pathlib import Path

import yaml

from ..errors import MalformedCollectionError
from .base import UnifiedCollection
from .detect import parse_collection
from .variables import parse_csv, parse_env

YAML_SUFFIXES = (".yaml", ".yml")


def load_document(file_path: Path) -> object:
    """Decode a JSON or YAML file into plain Python data."""
    text = file_path.read_text(encoding="utf-8")
    try:
        if file_path.suffix.lower() in YAML_SUFFIXES:
            return yaml.safe_load(text)
        return json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise MalformedCollectionError(f"Cannot decode {file_path.name}: {exc}") from exc


def load_collection(file_path: Path, fmt: str = "auto") -> UnifiedCollection:
    """Load a collection file, choosing the parser by extension and content."""
    suffix = file_path.suffix.lower()
    if suffix == ".env":
        return parse_env(file_path.read_text(encoding="utf-8"))
    if suffix == ".csv":
        return parse_csv(file_path.read_text(encoding="utf-8"))
    return parse_collection(load_document(file_path), fmt)
