"""Postman Collection v2.1 codec.

Converts between the internal Collection model and Postman's exported JSON.
Import is tolerant: missing or wrongly typed fields decode to empty values
rather than failing. Only a payload that is not JSON at all, or whose top
level is not an object, is rejected.
"""

import json
import logging
from typing import Any, Literal

from pydantic import BaseModel

from api_workbench.errors import DecodeError
from api_workbench.model.base import Collection, HttpMethod, Request

SCHEMA_URL = "https://schema.getpostman.com/json/collection/v2.1.0/collection.json"

logger = logging.getLogger(__name__)


class PostmanUrl(BaseModel):
    """The two URL encodings Postman uses, resolved once at decode time."""

    kind: Literal["string", "object", "unknown"]
    raw: str = ""

    @classmethod
    def decode(cls, value: Any) -> "PostmanUrl":
        if isinstance(value, str):
            return cls(kind="string", raw=value)
        if isinstance(value, dict) and isinstance(value.get("raw"), str):
            return cls(kind="object", raw=value["raw"])
        return cls(kind="unknown")


def export_collection(collection: Collection) -> dict:
    """Build the Postman v2.1 JSON object for a collection."""
    return {
        "info": {"name": collection.name, "schema": SCHEMA_URL},
        "item": [_export_request(r) for r in collection.requests],
    }


def dump_collection(collection: Collection) -> str:
    """Export a collection as indented JSON text, ready to write to a file."""
    return json.dumps(export_collection(collection), indent=2, ensure_ascii=False)


def import_collection(payload: str | bytes) -> Collection:
    """Parse Postman v2.1 JSON text into a Collection.

    Folders are flattened depth-first. Duplicate header keys keep the last
    value.
    """
    try:
        doc = json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodeError(f"Invalid JSON: {e}") from e
    if not isinstance(doc, dict):
        raise DecodeError("Invalid JSON: expected a Postman collection object")

    info = _as_dict(doc.get("info"))
    requests: list[Request] = []
    _import_items(_as_list(doc.get("item")), requests)
    return Collection(name=_as_str(info.get("name")), requests=requests)


def _export_request(request: Request) -> dict:
    return {
        "name": request.name,
        "request": {
            "method": request.method.value,
            "header": [{"key": k, "value": v} for k, v in request.headers.items()],
            "url": request.url,
            "body": {"mode": "raw", "raw": request.body},
        },
    }


def _import_items(items: list, requests: list[Request]) -> None:
    """Recursively collect requests (supports folders)."""
    for item in items:
        item = _as_dict(item)
        if isinstance(item.get("item"), list):
            _import_items(item["item"], requests)
        else:
            requests.append(_import_request(item))


def _import_request(item: dict) -> Request:
    req = _as_dict(item.get("request"))
    name = _as_str(item.get("name"))

    headers: dict[str, str] = {}
    for h in _as_list(req.get("header")):
        h = _as_dict(h)
        headers[_as_str(h.get("key"))] = _as_str(h.get("value"))

    url = PostmanUrl.decode(req.get("url"))
    if url.kind == "unknown" and req.get("url") is not None:
        logger.warning("Request %r has an unrecognised url shape; using empty url", name)

    return Request(
        name=name,
        method=_decode_method(req.get("method"), name),
        url=url.raw,
        headers=headers,
        body=_as_str(_as_dict(req.get("body")).get("raw")),
    )


def _decode_method(value: Any, name: str) -> HttpMethod:
    method = _as_str(value).upper()
    try:
        return HttpMethod(method)
    except ValueError:
        if method:
            logger.warning("Request %r uses unsupported method %s; using GET", name, method)
        return HttpMethod.GET


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""
