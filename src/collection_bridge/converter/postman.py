"""Postman Collection v2.1 emitter."""

import uuid

from ..parser.base import CollectionFolder, CollectionRequest, UnifiedCollection
from .common import compact, emit_script

POSTMAN_SCHEMA = "https://schema.getpostman.com/json/collection/v2.1.0/collection.json"


def to_postman(collection: UnifiedCollection) -> dict:
    """Build a Postman collection, or a Postman environment for environment imports."""
    if collection.kind == "environment":
        return to_postman_environment(collection)

    return compact({
        "info": compact({
            "_postman_id": str(uuid.uuid4()),
            "name": collection.name,
            "description": collection.description,
            "schema": POSTMAN_SCHEMA,
        }),
        "item": _items(collection, collection.folders, collection.requests),
        "event": _events(collection, collection.pre_request_script, collection.test_script),
        "variable": [
            compact({
                "key": v.key,
                "value": v.value,
                "type": v.type,
                "enabled": v.enabled,
                "description": v.description,
            })
            for v in collection.variables
        ],
    })


def to_postman_environment(collection: UnifiedCollection) -> dict:
    return {
        "id": str(uuid.uuid4()),
        "name": collection.name,
        "values": [
            compact({
                "key": v.key,
                "value": v.value,
                "type": v.type,
                "enabled": v.enabled,
                "description": v.description,
            })
            for v in collection.variables
        ],
        "_postman_variable_scope": "environment",
    }


def _items(
    collection: UnifiedCollection,
    folders: list[CollectionFolder],
    requests: list[CollectionRequest],
) -> list[dict]:
    items = [_request_item(collection, r) for r in requests]
    for folder in folders:
        items.append(compact({
            "name": folder.name,
            "description": folder.description,
            "item": _items(collection, folder.folders, folder.requests),
            "event": _events(collection, folder.pre_request_script, folder.test_script),
        }))
    return items


def _request_item(collection: UnifiedCollection, request: CollectionRequest) -> dict:
    return compact({
        "name": request.name,
        "request": compact({
            "method": request.method,
            "header": [
                {"key": h.key, "value": h.value, "disabled": not h.enabled}
                for h in request.headers
            ],
            "url": {"raw": request.url},
            "body": {"mode": "raw", "raw": request.body} if request.body is not None else None,
        }),
        "description": request.description,
        "event": _events(collection, request.pre_request_script, request.test_script),
    })


def _events(collection: UnifiedCollection, pre_request: str | None, test: str | None) -> list[dict] | None:
    """Build the event list; returns None when there are no hooks."""
    events = []
    for listen, script in (("prerequest", pre_request), ("test", test)):
        text = emit_script(collection, script, "postman")
        if text is not None:
            events.append({
                "listen": listen,
                "script": {"type": "text/javascript", "exec": text.split("\n")},
            })
    return events or None
