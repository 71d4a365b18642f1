"""Helpers shared by the vendor parsers."""

import json

from pydantic import ValidationError

from ..errors import MalformedCollectionError
from .base import CollectionHeader


def is_json_text(text: str | None) -> bool:
    """Return True when ``text`` is a JSON object or array."""
    if not text or not isinstance(text, str):
        return False
    stripped = text.strip()
    if not stripped.startswith(("{", "[")):
        return False
    try:
        json.loads(stripped)
    except ValueError:
        return False
    return True


def normalize_json_content_type(headers: list[CollectionHeader], body: str | None) -> list[CollectionHeader]:
    """Make sure a JSON body is announced as application/json.

    A missing Content-Type header is appended; a text/plain one is rewritten.
    """
    if not is_json_text(body):
        return headers

    for index, header in enumerate(headers):
        if header.key.lower() != "content-type":
            continue
        media_type = header.value.lower().split(";")[0].strip()
        if media_type == "text/plain":
            updated = list(headers)
            updated[index] = header.model_copy(update={"value": "application/json"})
            return updated
        return headers

    return [*headers, CollectionHeader(key="Content-Type", value="application/json", enabled=True)]


def text_or_none(value: object) -> str | None:
    """Return a vendor text field as a string, or None when absent or not text."""
    if isinstance(value, str):
        return value
    return None


def stringify(value: object) -> str:
    """Render a vendor scalar as variable text."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value)


def as_list(value: object) -> list:
    """Return ``value`` when it is a list, else an empty list."""
    return value if isinstance(value, list) else []


def malformed(fmt: str, exc: ValidationError) -> MalformedCollectionError:
    """Wrap a model validation failure into a MalformedCollectionError."""
    messages = []
    for error in exc.errors():
        loc = " -> ".join(str(part) for part in error["loc"])
        messages.append(f"{loc}: {error['msg']}")
    return MalformedCollectionError(f"Invalid {fmt} collection: " + "; ".join(messages))
