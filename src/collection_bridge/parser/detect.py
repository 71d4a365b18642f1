"""Auto-detect collection formats and dispatch to the matching parser."""

import logging
from typing import Callable

from ..errors import FormatDetectionError
from .base import SOURCE_FORMATS, UnifiedCollection
from .insomnia import parse_insomnia
from .postman import is_postman_environment, parse_postman
from .thunderclient import parse_thunderclient
from .variables import parse_generic_json

logger = logging.getLogger(__name__)


def _is_postman(data: dict) -> bool:
    info = data.get("info")
    if isinstance(info, dict):
        schema = info.get("schema")
        if isinstance(schema, str) and "postman" in schema:
            return True
        if "_postman_id" in info:
            return True
    return is_postman_environment(data)


def _is_insomnia(data: dict) -> bool:
    return data.get("_type") == "export" and isinstance(data.get("resources"), list)


def _is_thunderclient(data: dict) -> bool:
    return "colName" in data and isinstance(data.get("requests"), list)


FINGERPRINTS: dict[str, Callable[[dict], bool]] = {
    "postman": _is_postman,
    "insomnia": _is_insomnia,
    "thunderclient": _is_thunderclient,
}

PARSERS: dict[str, Callable[[dict], UnifiedCollection]] = {
    "postman": parse_postman,
    "insomnia": parse_insomnia,
    "thunderclient": parse_thunderclient,
}


def detect_format(data: object) -> str:
    """Detect the vendor format of a decoded collection document.

    Returns: 'postman', 'insomnia' or 'thunderclient'.
    """
    if not isinstance(data, dict):
        raise FormatDetectionError("Collection document must be a JSON object")

    matches = [fmt for fmt, probe in FINGERPRINTS.items() if probe(data)]
    if not matches:
        raise FormatDetectionError("Unrecognized collection format")
    if len(matches) > 1:
        raise FormatDetectionError(f"Ambiguous collection format: looks like {' and '.join(matches)}")
    return matches[0]


def parse_collection(data: object, fmt: str | None = None) -> UnifiedCollection:
    """Parse a decoded document into a UnifiedCollection.

    ``fmt`` skips detection: one of the vendor formats, or 'json' for a flat
    key -> value variable object.
    """
    if fmt == "json":
        return parse_generic_json(data)

    if fmt is None or fmt == "auto":
        fmt = detect_format(data)
        logger.info("Detected %s collection", fmt)
    elif fmt not in SOURCE_FORMATS:
        raise FormatDetectionError(f"Unsupported source format: {fmt}")
    elif not isinstance(data, dict):
        raise FormatDetectionError("Collection document must be a JSON object")

    return PARSERS[fmt](data)
