"""Postman Collection v2.1 parser.

Parses Postman collection and environment exports into UnifiedCollection.
"""

import logging

from pydantic import ValidationError

from ..errors import MalformedCollectionError
from ..translator import to_internal
from .base import (
    CollectionFolder,
    CollectionHeader,
    CollectionRequest,
    CollectionVariable,
    UnifiedCollection,
    new_id,
    variable_type,
)
from .common import as_list, malformed, normalize_json_content_type, stringify, text_or_none

logger = logging.getLogger(__name__)


def is_postman_environment(data: dict) -> bool:
    return "_postman_variable_scope" in data or (isinstance(data.get("values"), list) and "name" in data)


def parse_postman(data: dict) -> UnifiedCollection:
    """Parse a Postman collection or environment document."""
    try:
        if is_postman_environment(data):
            return _parse_environment(data)
        return _parse_collection(data)
    except ValidationError as exc:
        raise malformed("postman", exc) from exc


def _parse_environment(data: dict) -> UnifiedCollection:
    return UnifiedCollection(
        id=text_or_none(data.get("id")) or new_id(),
        name=text_or_none(data.get("name")) or "Postman Environment",
        kind="environment",
        source_format="postman",
        variables=_parse_variables(data.get("values")),
    )


def _parse_collection(data: dict) -> UnifiedCollection:
    info = data.get("info")
    if not isinstance(info, dict):
        raise MalformedCollectionError("Postman collection has no info block")
    items = data.get("item")
    if not isinstance(items, list):
        raise MalformedCollectionError("Postman collection has no item list")

    folders, requests = _parse_items(items, path=[])
    pre_request, test = _parse_events(data.get("event"))

    return UnifiedCollection(
        id=text_or_none(info.get("_postman_id")) or new_id(),
        name=text_or_none(info.get("name")) or "Postman Collection",
        description=_description(info.get("description")),
        source_format="postman",
        variables=_parse_variables(data.get("variable")),
        folders=folders,
        requests=requests,
        pre_request_script=pre_request,
        test_script=test,
    )


def _parse_items(items: list, path: list[str]) -> tuple[list[CollectionFolder], list[CollectionRequest]]:
    """Recursively parse items (folders hold a nested item list)."""
    folders: list[CollectionFolder] = []
    requests: list[CollectionRequest] = []
    for item in items:
        if not isinstance(item, dict):
            raise MalformedCollectionError(f"Postman item under '{' / '.join(path) or 'root'}' is not an object")
        name = text_or_none(item.get("name")) or ""
        if isinstance(item.get("item"), list):
            sub_folders, sub_requests = _parse_items(item["item"], [*path, name])
            pre_request, test = _parse_events(item.get("event"))
            folders.append(
                CollectionFolder(
                    id=new_id(),
                    name=name,
                    description=_description(item.get("description")),
                    folders=sub_folders,
                    requests=sub_requests,
                    pre_request_script=pre_request,
                    test_script=test,
                )
            )
        elif isinstance(item.get("request"), (dict, str)):
            requests.append(_parse_request(item, name))
        else:
            location = " / ".join([*path, name])
            raise MalformedCollectionError(f"Postman item '{location}' has neither request nor item list")
    return folders, requests


def _parse_request(item: dict, name: str) -> CollectionRequest:
    req = item["request"]
    if isinstance(req, str):
        # Shorthand form: the request is just a URL
        req = {"method": "GET", "url": req}

    body = _parse_body(req.get("body"))
    headers = [
        CollectionHeader(
            key=stringify(h.get("key")),
            value=stringify(h.get("value")),
            enabled=h.get("enabled", True) is not False and not h.get("disabled", False),
        )
        for h in as_list(req.get("header"))
        if isinstance(h, dict)
    ]
    pre_request, test = _parse_events(item.get("event"))

    return CollectionRequest(
        id=new_id(),
        name=name,
        method=(text_or_none(req.get("method")) or "GET").upper(),
        url=_url_to_string(req.get("url")),
        description=_description(item.get("description")) or _description(req.get("description")),
        headers=normalize_json_content_type(headers, body),
        body=body,
        pre_request_script=pre_request,
        test_script=test,
    )


def _parse_events(events: object) -> tuple[str | None, str | None]:
    """Return the (prerequest, test) scripts of an event list."""
    scripts: dict[str, str | None] = {"prerequest": None, "test": None}
    for event in as_list(events):
        if not isinstance(event, dict) or event.get("listen") not in scripts:
            continue
        if scripts[event["listen"]] is not None:
            continue
        script = event.get("script") or {}
        exec_lines = script.get("exec") if isinstance(script, dict) else None
        if isinstance(exec_lines, str):
            text = exec_lines
        else:
            text = "\n".join(stringify(line) for line in as_list(exec_lines))
        scripts[event["listen"]] = to_internal(text, "postman")
    return scripts["prerequest"], scripts["test"]


def _parse_variables(variables: object) -> list[CollectionVariable]:
    return [
        CollectionVariable(
            id=new_id(),
            key=stringify(v.get("key")),
            value=stringify(v.get("value")),
            type=variable_type(v.get("type")),
            description=_description(v.get("description")),
            enabled=v.get("enabled", True) is not False and not v.get("disabled", False),
        )
        for v in as_list(variables)
        if isinstance(v, dict)
    ]


def _parse_body(body: object) -> str | None:
    if not isinstance(body, dict):
        return None
    if body.get("mode", "raw") != "raw":
        logger.debug("Dropping Postman body in mode %r", body.get("mode"))
        return None
    return text_or_none(body.get("raw"))


def _description(value: object) -> str | None:
    if isinstance(value, dict):
        value = value.get("content")
    return text_or_none(value) or None


def _url_to_string(url: object) -> str:
    """Flatten a Postman url (string or object) into its raw text."""
    if isinstance(url, str):
        return url
    if not isinstance(url, dict):
        return ""
    if isinstance(url.get("raw"), str):
        return url["raw"]

    host = url.get("host", "")
    if isinstance(host, list):
        host = ".".join(stringify(part) for part in host)
    path = url.get("path", "")
    if isinstance(path, list):
        path = "/".join(stringify(part) for part in path)
    text = stringify(host)
    if path:
        text = f"{text}/{str(path).lstrip('/')}"
    if url.get("protocol"):
        text = f"{url['protocol']}://{text}"
    query = [
        f"{stringify(q.get('key'))}={stringify(q.get('value'))}"
        for q in as_list(url.get("query"))
        if isinstance(q, dict) and not q.get("disabled", False)
    ]
    if query:
        text = f"{text}?{'&'.join(query)}"
    return text
