"""Insomnia export (v4) emitter.

The unified tree is flattened with ``tree.flatten_tree``; every resource
gets a fresh id prefixed by its kind, and siblings an ascending metaSortKey.
"""

import uuid
from collections import defaultdict

from ..parser.base import CollectionFolder, UnifiedCollection
from ..tree import flatten_tree
from .common import compact, emit_script

EXPORT_FORMAT = 4
EXPORT_SOURCE = "collection-bridge"

ID_PREFIXES = {
    "workspace": "wrk",
    "environment": "env",
    "folder": "fld",
    "request": "req",
}


def make_resource_id(kind: str) -> str:
    return f"{ID_PREFIXES[kind]}_{uuid.uuid4().hex}"


def to_insomnia(collection: UnifiedCollection) -> dict:
    """Build an Insomnia export bundle with a synthetic workspace root."""
    workspace_id = make_resource_id("workspace")
    resources: list[dict] = [
        compact({
            "_id": workspace_id,
            "_type": "workspace",
            "name": collection.name,
            "description": collection.description,
            "scope": "collection",
            "preRequestScript": emit_script(collection, collection.pre_request_script, "insomnia"),
            "afterResponseScript": emit_script(collection, collection.test_script, "insomnia"),
        })
    ]

    if collection.variables:
        resources.append({
            "_id": make_resource_id("environment"),
            "_type": "environment",
            "name": "Base Environment",
            "data": {v.key: v.value for v in collection.variables if v.enabled},
            "parentId": workspace_id,
        })

    sort_keys: dict[str, int] = defaultdict(int)
    for entry in flatten_tree(collection.folders, collection.requests, workspace_id, make_resource_id):
        sort_keys[entry.parent_id] += 1
        node = entry.node
        common = {
            "_id": entry.id,
            "parentId": entry.parent_id,
            "name": node.name,
            "description": node.description,
            "metaSortKey": sort_keys[entry.parent_id],
            "preRequestScript": emit_script(collection, node.pre_request_script, "insomnia"),
            "afterResponseScript": emit_script(collection, node.test_script, "insomnia"),
        }
        if isinstance(node, CollectionFolder):
            resources.append(compact({**common, "_type": "request_group"}))
        else:
            resources.append(compact({
                **common,
                "_type": "request",
                "method": node.method,
                "url": node.url,
                "headers": [
                    {"name": h.key, "value": h.value, "disabled": not h.enabled}
                    for h in node.headers
                ],
                "body": {"text": node.body} if node.body is not None else None,
            }))

    return {
        "_type": "export",
        "__export_format": EXPORT_FORMAT,
        "__export_source": EXPORT_SOURCE,
        "resources": resources,
    }
