"""Data models for requests, collections and workspaces.

These are the shapes persisted in the store file and produced by the
Postman codec. Field names match the store document keys.
"""

from enum import Enum

from pydantic import BaseModel, field_validator

from .headers import flatten_headers, format_headers, parse_headers


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


BODYLESS_METHODS = {HttpMethod.GET, HttpMethod.DELETE, HttpMethod.HEAD, HttpMethod.OPTIONS}


class Request(BaseModel):
    """A saved request. Identified by name only; names may repeat."""

    name: str = ""
    method: HttpMethod = HttpMethod.GET
    url: str = ""
    headers: dict[str, str] = {}  # flattened: repeated keys joined with ", "
    body: str = ""

    @field_validator("headers", mode="before")
    @classmethod
    def _null_headers(cls, value):
        return {} if value is None else value


class Collection(BaseModel):
    name: str = ""
    requests: list[Request] = []

    @field_validator("requests", mode="before")
    @classmethod
    def _null_requests(cls, value):
        return [] if value is None else value


class Workspace(BaseModel):
    name: str = ""
    collections: list[Collection] = []

    @field_validator("collections", mode="before")
    @classmethod
    def _null_collections(cls, value):
        return [] if value is None else value


class RequestDraft(BaseModel):
    """The request being edited, before it is sent or saved.

    Headers stay as free text so repeated keys survive editing; they are
    parsed on demand and only flattened when a ``Request`` is built.
    """

    method: HttpMethod = HttpMethod.GET
    url: str = ""
    headers_text: str = ""
    body: str = ""

    @property
    def headers(self) -> list[tuple[str, str]]:
        return parse_headers(self.headers_text)

    def to_request(self, name: str | None = None) -> Request:
        return Request(
            name=self.url if name is None else name,
            method=self.method,
            url=self.url,
            headers=flatten_headers(self.headers),
            body=self.body,
        )

    @classmethod
    def from_request(cls, request: Request) -> "RequestDraft":
        return cls(
            method=request.method,
            url=request.url,
            headers_text=format_headers(request.headers),
            body=request.body,
        )
