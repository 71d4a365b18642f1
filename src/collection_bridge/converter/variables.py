"""Variable-only targets: .env text, CSV tables and flat JSON objects."""

import re

from ..parser.base import UnifiedCollection
from ..parser.variables import variables_to_csv

# Values containing any of these are written double-quoted.
_NEEDS_QUOTES = re.compile(r"""[\s"']""")
_ENV_ESCAPES = str.maketrans({"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r"})


def _env_value(value: str) -> str:
    if not _NEEDS_QUOTES.search(value):
        return value
    return '"' + value.translate(_ENV_ESCAPES) + '"'


def to_env(collection: UnifiedCollection) -> str:
    """One KEY=VALUE line per enabled variable, with # description comments.

    Quoted values escape backslashes, double quotes and line breaks, so
    every variable stays on one line.
    """
    lines = []
    for v in collection.variables:
        if not v.enabled:
            continue
        if v.description:
            lines.append(f"# {v.description}")
        lines.append(f"{v.key}={_env_value(v.value)}")
    return "\n".join(lines)


def to_csv(collection: UnifiedCollection) -> str:
    return variables_to_csv(collection.variables)


def to_json_variables(collection: UnifiedCollection) -> dict[str, str]:
    """Flat key -> value map of enabled variables; secrets are not marked."""
    return {v.key: v.value for v in collection.variables if v.enabled}
