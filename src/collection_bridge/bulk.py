"""
Bulk operations on a UnifiedCollection: search, find/replace and variable editing.

Every mutating operation works on a deep copy and returns it; the caller's
collection is never modified.
"""

import json
import logging
import re
from typing import Literal

from pydantic import BaseModel

from .errors import MalformedCollectionError
from .parser.base import CollectionFolder, CollectionRequest, CollectionVariable, UnifiedCollection
from .parser.variables import read_csv_variables, read_json_variables, variables_to_csv

logger = logging.getLogger(__name__)

SearchScope = Literal["variables", "requests", "all"]
VariableFileFormat = Literal["json", "csv"]

BODY_PREVIEW_LENGTH = 100


class SearchResult(BaseModel):
    """One matching field occurrence."""

    type: Literal["variable", "url", "header", "body"]
    path: str  # Folder / Subfolder / RequestName
    field: str
    value: str
    match: str


class ReplaceOptions(BaseModel):
    find: str
    replace: str = ""
    scope: SearchScope = "all"
    case_sensitive: bool = False
    regex: bool = False


class ReplaceResult(BaseModel):
    collection: UnifiedCollection
    count: int


def _in_scope(scope: str, part: str) -> bool:
    return scope == "all" or scope == part


def find(
    collection: UnifiedCollection,
    term: str,
    scope: SearchScope = "all",
    case_sensitive: bool = False,
) -> list[SearchResult]:
    """Search variables and/or requests for ``term``.

    Request results carry a folder-qualified path such as
    ``"Auth / Tokens / Refresh"``.
    """
    if not term:
        return []
    needle = term if case_sensitive else term.lower()

    def matches(text: str | None) -> bool:
        if not text:
            return False
        return needle in (text if case_sensitive else text.lower())

    results: list[SearchResult] = []

    if _in_scope(scope, "variables"):
        for v in collection.variables:
            path = f"Variables / {v.key}"
            if matches(v.key):
                results.append(SearchResult(type="variable", path=path, field="key", value=v.key, match=term))
            if matches(v.value):
                results.append(SearchResult(type="variable", path=path, field="value", value=v.value, match=term))

    if _in_scope(scope, "requests"):

        def search_requests(requests: list[CollectionRequest], parents: list[str]) -> None:
            for r in requests:
                path = " / ".join([*parents, r.name])
                if matches(r.url):
                    results.append(SearchResult(type="url", path=path, field="url", value=r.url, match=term))
                for h in r.headers:
                    if matches(h.key) or matches(h.value):
                        results.append(
                            SearchResult(type="header", path=path, field=f"header.{h.key}", value=h.value, match=term)
                        )
                if matches(r.body):
                    results.append(
                        SearchResult(
                            type="body",
                            path=path,
                            field="body",
                            value=r.body[:BODY_PREVIEW_LENGTH],
                            match=term,
                        )
                    )

        def search_folders(folders: list[CollectionFolder], parents: list[str]) -> None:
            for f in folders:
                search_requests(f.requests, [*parents, f.name])
                search_folders(f.folders, [*parents, f.name])

        search_requests(collection.requests, [])
        search_folders(collection.folders, [])

    return results


def replace(collection: UnifiedCollection, options: ReplaceOptions) -> ReplaceResult:
    """Substitute every match of ``options.find`` in a copy of the collection.

    Regex mode compiles ``find`` as a Python pattern; an invalid pattern
    raises ``re.error``. Plain mode matches the text literally.
    """
    updated = collection.model_copy(deep=True)
    if not options.find:
        return ReplaceResult(collection=updated, count=0)

    flags = 0 if options.case_sensitive else re.IGNORECASE
    if options.regex:
        pattern = re.compile(options.find, flags)
        replacement: object = options.replace
    else:
        pattern = re.compile(re.escape(options.find), flags)
        replacement = lambda _match: options.replace  # noqa: E731

    count = 0

    def sub(text: str) -> str:
        nonlocal count
        result, n = pattern.subn(replacement, text)  # type: ignore[arg-type]
        count += n
        return result

    def sub_optional(text: str | None) -> str | None:
        return sub(text) if text else text

    if _in_scope(options.scope, "variables"):
        for v in updated.variables:
            v.key = sub(v.key)
            v.value = sub(v.value)
            v.description = sub_optional(v.description)

    if _in_scope(options.scope, "requests"):

        def replace_in_requests(requests: list[CollectionRequest]) -> None:
            for r in requests:
                r.url = sub(r.url)
                r.name = sub(r.name)
                r.description = sub_optional(r.description)
                for h in r.headers:
                    h.key = sub(h.key)
                    h.value = sub(h.value)
                r.body = sub_optional(r.body)

        def replace_in_folders(folders: list[CollectionFolder]) -> None:
            for f in folders:
                f.name = sub(f.name)
                f.description = sub_optional(f.description)
                replace_in_requests(f.requests)
                replace_in_folders(f.folders)

        replace_in_requests(updated.requests)
        replace_in_folders(updated.folders)

    logger.info("Replaced %d occurrence(s) of %r", count, options.find)
    return ReplaceResult(collection=updated, count=count)


def bulk_edit_variables(collection: UnifiedCollection, updates: list[dict]) -> UnifiedCollection:
    """Apply partial updates keyed by variable id; unknown ids are ignored."""
    updated = collection.model_copy(deep=True)
    by_id = {update.get("id"): update for update in updates if update.get("id") is not None}

    variables = []
    for v in updated.variables:
        update = by_id.get(v.id)
        if update is not None:
            v = CollectionVariable.model_validate({**v.model_dump(), **update, "id": v.id})
        variables.append(v)
    updated.variables = variables
    return updated


def export_variables(collection: UnifiedCollection, fmt: VariableFileFormat) -> str:
    """Serialize the variable list as CSV or as a JSON array."""
    if fmt == "csv":
        return variables_to_csv(collection.variables)
    if fmt == "json":
        return json.dumps(
            [v.model_dump(exclude={"id"}, exclude_none=True) for v in collection.variables],
            indent=2,
            ensure_ascii=False,
        )
    raise ValueError(f"Unsupported variable format: {fmt}")


def import_variables(collection: UnifiedCollection, content: str, fmt: VariableFileFormat) -> UnifiedCollection:
    """Append variables read from CSV or JSON text to a copy of the collection.

    Imported variables always get fresh ids.
    """
    if fmt == "csv":
        imported = read_csv_variables(content)
    elif fmt == "json":
        try:
            imported = read_json_variables(json.loads(content))
        except json.JSONDecodeError as exc:
            raise MalformedCollectionError(f"Invalid variable JSON: {exc}") from exc
    else:
        raise ValueError(f"Unsupported variable format: {fmt}")

    updated = collection.model_copy(deep=True)
    updated.variables.extend(imported)
    return updated
