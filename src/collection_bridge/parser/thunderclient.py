"""Thunder Client collection parser.

Folders come either with their requests embedded, or as a flat list linked
to requests (and to parent folders) through ``containerId``.
"""

import logging

from pydantic import ValidationError

from ..translator import to_internal
from ..tree import build_tree
from .base import CollectionFolder, CollectionHeader, CollectionRequest, UnifiedCollection, new_id
from .common import as_list, malformed, normalize_json_content_type, stringify, text_or_none

logger = logging.getLogger(__name__)


def parse_thunderclient(data: dict) -> UnifiedCollection:
    """Parse a Thunder Client collection into a UnifiedCollection."""
    folders, requests = _flatten_embedded(
        [f for f in as_list(data.get("folders")) if isinstance(f, dict)],
        [r for r in as_list(data.get("requests")) if isinstance(r, dict)],
    )
    try:
        root_folders, root_requests = build_tree(
            folders,
            requests,
            make_folder=_make_folder,
            make_request=_make_request,
            parent_key="containerId",
            order_key="sortNum",
        )
        return UnifiedCollection(
            id=text_or_none(data.get("_id")) or new_id(),
            name=text_or_none(data.get("colName")) or "Thunder Client Collection",
            source_format="thunderclient",
            folders=root_folders,
            requests=root_requests,
        )
    except ValidationError as exc:
        raise malformed("thunderclient", exc) from exc


def _flatten_embedded(folders: list[dict], requests: list[dict]) -> tuple[list[dict], list[dict]]:
    """Move requests embedded in folders into the flat request list."""
    flat_folders = []
    flat_requests = list(requests)
    for folder in folders:
        embedded = [r for r in as_list(folder.get("requests")) if isinstance(r, dict)]
        if embedded:
            folder = {**folder, "_id": folder.get("_id") or new_id()}
            flat_requests.extend({**r, "containerId": folder["_id"]} for r in embedded)
        flat_folders.append(folder)
    return flat_folders, flat_requests


def _make_folder(
    record: dict,
    requests: list[CollectionRequest],
    folders: list[CollectionFolder],
) -> CollectionFolder:
    return CollectionFolder(
        id=new_id(),
        name=text_or_none(record.get("name")) or "Folder",
        requests=requests,
        folders=folders,
    )


def _make_request(record: dict) -> CollectionRequest:
    body = record.get("body")
    body_text = text_or_none(body.get("raw")) if isinstance(body, dict) else None
    headers = [
        CollectionHeader(
            key=stringify(h.get("name")),
            value=stringify(h.get("value")),
            enabled=h.get("active", True) is not False and not h.get("isDisabled", False),
        )
        for h in as_list(record.get("headers"))
        if isinstance(h, dict)
    ]
    return CollectionRequest(
        id=new_id(),
        name=text_or_none(record.get("name")) or "Request",
        method=(text_or_none(record.get("method")) or "GET").upper(),
        url=text_or_none(record.get("url")) or "",
        description=text_or_none(record.get("description")) or None,
        headers=normalize_json_content_type(headers, body_text),
        body=body_text,
        test_script=to_internal(_join_tests(record.get("tests")), "thunderclient"),
    )


def _join_tests(tests: object) -> str | None:
    """Join script entries of a tests array; structured assertions are dropped."""
    scripts = []
    for entry in as_list(tests):
        if isinstance(entry, str):
            scripts.append(entry)
        else:
            logger.debug("Dropping structured Thunder Client test %r", entry)
    return "\n".join(scripts) if scripts else None
