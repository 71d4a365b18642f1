"""Convert a UnifiedCollection into a serialized target document."""

import json
import logging
from typing import Callable

from ..errors import UnsupportedTargetFormatError
from ..parser.base import TARGET_FORMATS, UnifiedCollection
from .insomnia import to_insomnia
from .postman import to_postman
from .thunderclient import to_thunderclient
from .variables import to_csv, to_env, to_json_variables

logger = logging.getLogger(__name__)

JSON_INDENT = 2

# Targets that serialize to JSON; env and csv return text directly.
JSON_BUILDERS: dict[str, Callable[[UnifiedCollection], dict]] = {
    "postman": to_postman,
    "insomnia": to_insomnia,
    "thunderclient": to_thunderclient,
    "json": to_json_variables,
}

TEXT_BUILDERS: dict[str, Callable[[UnifiedCollection], str]] = {
    "env": to_env,
    "csv": to_csv,
}


def convert(collection: UnifiedCollection, target_format: str, indent: int = JSON_INDENT) -> str:
    """Serialize ``collection`` as ``target_format``.

    The input is never modified; two calls differ only in generated ids.
    """
    if target_format not in TARGET_FORMATS:
        raise UnsupportedTargetFormatError(target_format)

    logger.info("Converting '%s' (%s) to %s", collection.name, collection.source_format, target_format)
    if target_format in TEXT_BUILDERS:
        return TEXT_BUILDERS[target_format](collection)
    document = JSON_BUILDERS[target_format](collection)
    return json.dumps(document, indent=indent, ensure_ascii=False)
