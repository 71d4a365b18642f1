"""Unified data models for parsed API collections.

All parsers (Postman, Insomnia, Thunder Client, raw variable files) convert
their input into these models, and every converter reads them back out.
Scripts are stored in the dialect of ``source_format``; they are only
translated when a converter emits a different target.
"""

import uuid
from typing import Literal

from pydantic import BaseModel, field_validator

SourceFormat = Literal["postman", "insomnia", "thunderclient", "raw"]
TargetFormat = Literal["postman", "insomnia", "thunderclient", "env", "csv", "json"]
VariableType = Literal["default", "secret"]
CollectionKind = Literal["collection", "environment"]

SOURCE_FORMATS: tuple[str, ...] = ("postman", "insomnia", "thunderclient")
TARGET_FORMATS: tuple[str, ...] = ("postman", "insomnia", "thunderclient", "env", "csv", "json")


def new_id() -> str:
    """Return a short random identifier for model entities."""
    return uuid.uuid4().hex[:12]


def variable_type(raw: object) -> VariableType:
    """Map a vendor variable type onto the two types the model knows."""
    return "secret" if raw == "secret" else "default"


class ScriptHooks(BaseModel):
    """Pre-request and test hooks shared by collections, folders and requests.

    A hook is either absent or a non-empty string; blank scripts collapse to None.
    """

    pre_request_script: str | None = None
    test_script: str | None = None

    @field_validator("pre_request_script", "test_script")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value


class CollectionHeader(BaseModel):
    """A single request header. Disabled headers are kept for re-emission."""

    key: str
    value: str = ""
    enabled: bool = True


class CollectionRequest(ScriptHooks):
    """A single HTTP request with its optional hook scripts."""

    id: str
    name: str
    method: str = "GET"  # GET / POST / PUT / DELETE / PATCH / HEAD / OPTIONS
    url: str = ""
    description: str | None = None
    headers: list[CollectionHeader] = []
    body: str | None = None  # raw body text


class CollectionFolder(ScriptHooks):
    """A folder owning requests and nested folders."""

    id: str
    name: str
    description: str | None = None
    requests: list[CollectionRequest] = []
    folders: list["CollectionFolder"] = []


CollectionFolder.model_rebuild()


class CollectionVariable(BaseModel):
    """A collection-level variable."""

    id: str
    key: str
    value: str = ""
    type: VariableType = "default"
    description: str | None = None
    enabled: bool = True


class UnifiedCollection(ScriptHooks):
    """The format-agnostic representation of one imported collection."""

    id: str
    name: str
    description: str | None = None
    version: str = "1.0"
    kind: CollectionKind = "collection"
    source_format: SourceFormat
    variables: list[CollectionVariable] = []
    requests: list[CollectionRequest] = []
    folders: list[CollectionFolder] = []
