"""Helpers shared by the vendor emitters."""

import logging

from ..parser.base import UnifiedCollection
from ..translator import script_family, translate

logger = logging.getLogger(__name__)


def compact(data: dict) -> dict:
    """Drop keys whose value is None so absent fields are not emitted."""
    return {key: value for key, value in data.items() if value is not None}


def emit_script(collection: UnifiedCollection, script: str | None, target: str) -> str | None:
    """Return ``script`` in the target's dialect, or None when there is no hook."""
    if script is None:
        return None
    source = script_family(collection.source_format)
    dialect = script_family(target)
    if source != dialect:
        logger.debug("Translating script %s -> %s", source, dialect)
    return translate(script, source, dialect)
