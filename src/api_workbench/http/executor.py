"""Request executor — sends a composed request and measures the exchange."""

import json
import logging
import re
import time
from collections.abc import Iterable
from enum import Enum
from http.cookiejar import DefaultCookiePolicy

import requests
from pydantic import BaseModel

from api_workbench.errors import ReadError, RequestBuildError, TransportError
from api_workbench.model.base import BODYLESS_METHODS, HttpMethod
from api_workbench.model.headers import flatten_headers

logger = logging.getLogger(__name__)

_BUILD_ERRORS = (
    requests.exceptions.InvalidSchema,
    requests.exceptions.InvalidURL,
    requests.exceptions.MissingSchema,
)

# a string literal, a bare literal (number, true, false, null) or punctuation
_JSON_TOKEN = re.compile(r'"(?:[^"\\]|\\.)*"|[^\s{}\[\],:"]+|[{}\[\],:]')


class StatusClass(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    NEUTRAL = "neutral"


def classify_status(status_code: int) -> StatusClass:
    """2xx is success, 400 and above is error, anything else is neutral."""
    if 200 <= status_code < 300:
        return StatusClass.SUCCESS
    if status_code >= 400:
        return StatusClass.ERROR
    return StatusClass.NEUTRAL


def status_label(status_code: int) -> str:
    status_class = classify_status(status_code)
    if status_class is StatusClass.SUCCESS:
        return f"{status_code} OK"
    if status_class is StatusClass.ERROR:
        return f"{status_code} Error"
    return str(status_code)


def format_size(size: int) -> str:
    if size < 1024:
        return f"{size} bytes"
    if size < 1024 * 1024:
        return f"{size / 1024:.2f} KB"
    return f"{size / (1024 * 1024):.2f} MB"


class ExecutionResult(BaseModel):
    """Outcome of one successful HTTP exchange."""

    status_code: int
    status_text: str  # status line, e.g. "200 OK"
    response_headers: list[tuple[str, str]]
    response_body: str
    elapsed_ms: int
    request_byte_size: int
    response_byte_size: int

    @property
    def status_class(self) -> StatusClass:
        return classify_status(self.status_code)

    def summary(self) -> str:
        return (
            f"{self.elapsed_ms} ms    "
            f"Req: {format_size(self.request_byte_size)}    "
            f"Resp: {format_size(self.response_byte_size)}"
        )


def pretty_json(text: str) -> str | None:
    """Re-indent ``text`` with 4 spaces if it is strict JSON, else None.

    Only the whitespace between tokens changes. Number literals, string
    escapes and repeated keys come out exactly as the server sent them.
    """
    try:
        json.loads(text, parse_constant=_reject_constant)
    except ValueError:
        return None
    return _reindent(text, "    ")


def _reject_constant(name: str):
    # NaN / Infinity / -Infinity are not JSON
    raise ValueError(f"non-standard JSON constant {name}")


def _reindent(text: str, indent: str) -> str:
    out = []
    depth = 0
    opened = False  # last token was "{" or "[" and nothing has followed yet
    for token in _JSON_TOKEN.findall(text):
        if token in ("}", "]"):
            depth -= 1
            if not opened:
                out.append("\n" + indent * depth)
            out.append(token)
            opened = False
            continue
        if opened:
            out.append("\n" + indent * depth)
            opened = False
        if token in ("{", "["):
            depth += 1
            opened = True
            out.append(token)
        elif token == ",":
            out.append(",\n" + indent * depth)
        elif token == ":":
            out.append(": ")
        else:
            out.append(token)
    return "".join(out)


class RequestExecutor:
    """Issues HTTP calls through a ``requests.Session``.

    No timeout is imposed unless one is given; no retries are attempted.
    Cookies are never stored, so one exchange cannot leak into the next.
    """

    def __init__(self, session: requests.Session | None = None, timeout: float | None = None):
        self.session = session or requests.Session()
        self.session.cookies.set_policy(DefaultCookiePolicy(allowed_domains=[]))
        self.timeout = timeout

    def execute(
        self,
        method: HttpMethod | str,
        url: str,
        headers: Iterable[tuple[str, str]] = (),
        body: str = "",
    ) -> ExecutionResult:
        prepared, request_size = self._build(method, url, headers, body)

        logger.debug("Sending %s %s (%d bytes)", prepared.method, prepared.url, request_size)
        start = time.perf_counter()
        try:
            response = self.session.send(prepared, stream=True, timeout=self.timeout)
        except _BUILD_ERRORS as e:
            # raised at send time for schemes no adapter handles
            raise RequestBuildError(f"Request error: {e}") from e
        except requests.RequestException as e:
            raise TransportError(f"HTTP error: {e}") from e
        elapsed_ms = int((time.perf_counter() - start) * 1000)

        try:
            raw_body = response.content
        except (requests.RequestException, OSError) as e:
            raise ReadError(f"Read error: {e}") from e
        finally:
            response.close()

        text = raw_body.decode("utf-8", errors="replace")
        formatted = pretty_json(text)

        logger.debug("Received %s in %d ms (%d bytes)", response.status_code, elapsed_ms, len(raw_body))
        return ExecutionResult(
            status_code=response.status_code,
            status_text=f"{response.status_code} {response.reason or ''}".strip(),
            response_headers=list(response.headers.items()),
            response_body=text if formatted is None else formatted,
            elapsed_ms=elapsed_ms,
            request_byte_size=request_size,
            response_byte_size=len(raw_body),
        )

    def _build(self, method, url, headers, body) -> tuple[requests.PreparedRequest, int]:
        try:
            method = HttpMethod(method.upper() if isinstance(method, str) else method)
        except ValueError as e:
            raise RequestBuildError(f"Request error: unsupported method {method!r}") from e

        data = None
        if method not in BODYLESS_METHODS:
            data = body.encode("utf-8")

        flat = flatten_headers(headers)
        for key, value in flat.items():
            # http.client writes names as ASCII and values as Latin-1
            try:
                key.encode("ascii")
                value.encode("latin-1")
            except UnicodeEncodeError as e:
                raise RequestBuildError(f"Request error: header {key!r} cannot be sent: {e}") from e

        try:
            prepared = self.session.prepare_request(
                requests.Request(
                    method=method.value,
                    url=url,
                    headers=flat,
                    data=data,
                )
            )
        except (requests.RequestException, ValueError) as e:
            raise RequestBuildError(f"Request error: {e}") from e
        return prepared, 0 if data is None else len(data)


def execute(
    method: HttpMethod | str,
    url: str,
    headers: Iterable[tuple[str, str]] = (),
    body: str = "",
) -> ExecutionResult:
    """Send one request with a throwaway executor."""
    return RequestExecutor().execute(method, url, headers, body)
