"""Insomnia export (v4) parser.

Insomnia exports a flat ``resources`` list tied together by ``parentId``.
The folder tree is rebuilt with ``tree.build_tree``.
"""

import logging

from pydantic import ValidationError

from ..translator import to_internal
from ..tree import build_tree
from .base import (
    CollectionFolder,
    CollectionHeader,
    CollectionRequest,
    CollectionVariable,
    UnifiedCollection,
    new_id,
)
from .common import as_list, malformed, normalize_json_content_type, stringify, text_or_none

logger = logging.getLogger(__name__)

KNOWN_TYPES = {"workspace", "environment", "request_group", "request"}


def parse_insomnia(data: dict) -> UnifiedCollection:
    """Parse an Insomnia export bundle into a UnifiedCollection."""
    resources = [r for r in as_list(data.get("resources")) if isinstance(r, dict)]
    by_type: dict[str, list[dict]] = {t: [] for t in KNOWN_TYPES}
    for resource in resources:
        kind = resource.get("_type")
        if kind in by_type:
            by_type[kind].append(resource)
        else:
            logger.debug("Dropping Insomnia resource of type %r", kind)

    workspace = by_type["workspace"][0] if by_type["workspace"] else {}
    environments = by_type["environment"]
    requests = by_type["request"]

    try:
        folders, root_requests = build_tree(
            by_type["request_group"],
            requests,
            make_folder=_make_folder,
            make_request=_make_request,
            order_key="metaSortKey",
        )
        return UnifiedCollection(
            id=text_or_none(workspace.get("_id")) or new_id(),
            name=text_or_none(workspace.get("name")) or "Insomnia Collection",
            description=text_or_none(workspace.get("description")) or None,
            kind="environment" if environments and not requests else "collection",
            source_format="insomnia",
            variables=_parse_environments(environments),
            folders=folders,
            requests=root_requests,
            pre_request_script=to_internal(text_or_none(workspace.get("preRequestScript")), "insomnia"),
            test_script=to_internal(text_or_none(workspace.get("afterResponseScript")), "insomnia"),
        )
    except ValidationError as exc:
        raise malformed("insomnia", exc) from exc


def _parse_environments(environments: list[dict]) -> list[CollectionVariable]:
    """Merge the data maps of every environment into one variable list."""
    variables = []
    for env in environments:
        data = env.get("data")
        if not isinstance(data, dict):
            continue
        for key, value in data.items():
            variables.append(CollectionVariable(id=new_id(), key=str(key), value=stringify(value)))
    return variables


def _make_folder(
    resource: dict,
    requests: list[CollectionRequest],
    folders: list[CollectionFolder],
) -> CollectionFolder:
    return CollectionFolder(
        id=new_id(),
        name=text_or_none(resource.get("name")) or "Folder",
        description=text_or_none(resource.get("description")) or None,
        requests=requests,
        folders=folders,
        pre_request_script=to_internal(text_or_none(resource.get("preRequestScript")), "insomnia"),
        test_script=to_internal(text_or_none(resource.get("afterResponseScript")), "insomnia"),
    )


def _make_request(resource: dict) -> CollectionRequest:
    body = resource.get("body")
    body_text = text_or_none(body.get("text")) if isinstance(body, dict) else None
    headers = [
        CollectionHeader(
            key=stringify(h.get("name")),
            value=stringify(h.get("value")),
            enabled=not h.get("disabled", False),
        )
        for h in as_list(resource.get("headers"))
        if isinstance(h, dict)
    ]
    return CollectionRequest(
        id=new_id(),
        name=text_or_none(resource.get("name")) or "Request",
        method=(text_or_none(resource.get("method")) or "GET").upper(),
        url=text_or_none(resource.get("url")) or "",
        description=text_or_none(resource.get("description")) or None,
        headers=normalize_json_content_type(headers, body_text),
        body=body_text,
        pre_request_script=to_internal(text_or_none(resource.get("preRequestScript")), "insomnia"),
        test_script=to_internal(text_or_none(resource.get("afterResponseScript")), "insomnia"),
    )
