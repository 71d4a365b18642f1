"""Thunder Client collection emitter.

The target shape has one flat ``requests`` array, so the folder hierarchy
is lost on this path. Only request test scripts are carried over.
"""

import uuid

from ..parser.base import CollectionFolder, CollectionRequest, UnifiedCollection
from .common import compact, emit_script

SORT_STEP = 10000


def _walk(folders: list[CollectionFolder], requests: list[CollectionRequest]) -> list[CollectionRequest]:
    flat = list(requests)
    for folder in folders:
        flat.extend(_walk(folder.folders, folder.requests))
    return flat


def to_thunderclient(collection: UnifiedCollection) -> dict:
    """Build a Thunder Client collection with every request at the top level."""
    collection_id = str(uuid.uuid4())
    requests = []
    for index, request in enumerate(_walk(collection.folders, collection.requests), start=1):
        tests = emit_script(collection, request.test_script, "thunderclient")
        requests.append(compact({
            "_id": str(uuid.uuid4()),
            "colId": collection_id,
            "containerId": "",
            "name": request.name,
            "url": request.url,
            "method": request.method,
            "sortNum": index * SORT_STEP,
            "headers": [
                {"name": h.key, "value": h.value, "active": h.enabled}
                for h in request.headers
            ],
            "body": {"type": "raw", "raw": request.body} if request.body is not None else None,
            "description": request.description,
            "tests": [tests] if tests is not None else None,
        }))

    return {
        "_id": collection_id,
        "colName": collection.name,
        "requests": requests,
    }
