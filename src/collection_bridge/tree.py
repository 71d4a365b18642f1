"""
Folder tree transforms between flat vendor resource lists and the unified tree.

Provides functions for:
- Building a nested folder/request tree from parent-linked flat records
- Flattening the unified tree back into parent-linked entries with fresh ids
"""

import logging
from collections import defaultdict
from typing import Any, Callable, NamedTuple, Optional

from .parser.base import CollectionFolder, CollectionRequest

logger = logging.getLogger(__name__)

MakeFolder = Callable[[dict, list[CollectionRequest], list[CollectionFolder]], CollectionFolder]
MakeRequest = Callable[[dict], CollectionRequest]


class FlatEntry(NamedTuple):
    """One node of a flattened tree, linked to its container by id."""

    id: str
    parent_id: str
    node: CollectionFolder | CollectionRequest


def _ordered(records: list[dict], order_key: str | None) -> list[dict]:
    # Only reorder when every sibling carries a numeric sort key.
    if order_key and records and all(
        isinstance(r.get(order_key), (int, float)) and not isinstance(r.get(order_key), bool)
        for r in records
    ):
        return sorted(records, key=lambda r: r[order_key])
    return records


def build_tree(
    folders: list[dict],
    requests: list[dict],
    make_folder: MakeFolder,
    make_request: MakeRequest,
    id_key: str = "_id",
    parent_key: str = "parentId",
    order_key: str | None = None,
) -> tuple[list[CollectionFolder], list[CollectionRequest]]:
    """
    Build a nested folder tree from flat lists of folder and request records.

    Records whose parent is not one of the given folders (the workspace,
    an empty value, or an unknown id) attach to the root. Folders caught in
    a parent cycle never reach the root and are dropped.

    Args:
        folders: Raw folder records, each with an id and a parent reference.
        requests: Raw request records with a parent reference.
        make_folder: Builds a CollectionFolder from a raw record and its children.
        make_request: Builds a CollectionRequest from a raw record.

    Returns:
        The root-level folders and root-level requests, in sibling order.
    """
    known = {f.get(id_key) for f in folders if f.get(id_key) is not None}

    def parent_of(record: dict) -> Optional[Any]:
        parent = record.get(parent_key)
        return parent if parent in known else None

    children_map: dict[Optional[Any], list[dict]] = defaultdict(list)
    for folder in folders:
        children_map[parent_of(folder)].append(folder)

    request_map: dict[Optional[Any], list[dict]] = defaultdict(list)
    for request in requests:
        request_map[parent_of(request)].append(request)

    visited: set[Any] = set()

    def _build_subtree(parent_id: Optional[Any]) -> tuple[list[CollectionFolder], list[CollectionRequest]]:
        built_folders = []
        for folder in _ordered(children_map.get(parent_id, []), order_key):
            folder_id = folder.get(id_key)
            if folder_id is not None:
                if folder_id in visited:
                    logger.warning("Skipped folder %r: its id %r is already in use", folder.get("name"), folder_id)
                    continue
                visited.add(folder_id)
                sub_folders, sub_requests = _build_subtree(folder_id)
            else:
                sub_folders, sub_requests = [], []
            built_folders.append(make_folder(folder, sub_requests, sub_folders))
        built_requests = [make_request(r) for r in _ordered(request_map.get(parent_id, []), order_key)]
        return built_folders, built_requests

    root_folders, root_requests = _build_subtree(None)

    unreachable = len(known - visited)
    if unreachable:
        logger.warning("Dropped %d folder(s) unreachable from the collection root", unreachable)
    return root_folders, root_requests


def flatten_tree(
    folders: list[CollectionFolder],
    requests: list[CollectionRequest],
    root_id: str,
    make_id: Callable[[str], str],
) -> list[FlatEntry]:
    """
    Flatten the unified tree into parent-linked entries.

    Each container emits its requests first, then each folder followed by
    that folder's own contents. ``make_id`` receives ``"folder"`` or
    ``"request"`` and returns a fresh identifier; a folder's children are
    linked to the folder's generated id.
    """
    entries: list[FlatEntry] = []

    def _walk(folders: list[CollectionFolder], requests: list[CollectionRequest], parent_id: str) -> None:
        for request in requests:
            entries.append(FlatEntry(make_id("request"), parent_id, request))
        for folder in folders:
            folder_id = make_id("folder")
            entries.append(FlatEntry(folder_id, parent_id, folder))
            _walk(folder.folders, folder.requests, folder_id)

    _walk(folders, requests, root_id)
    return entries
