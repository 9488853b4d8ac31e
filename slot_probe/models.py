"""Request, Response and outcome dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, TextIO, Union

HeaderHandler = Callable[[Mapping[str, str]], Union[Mapping[str, str], None]]
StreamHandler = Callable[[TextIO], str]


@dataclass
class Request:
    """HTTP request representation.

    Attributes:
        method: HTTP method (GET, POST, PUT, HEAD, etc.).
        url: The request URL.
        headers: Request headers.
        content: Encoded request body, None for no body.
        timeout: Request timeout in seconds.
        proxy: Proxy URL.
        http_version: "1.0", "1.1" or "2".
        auth: Username/password pair for basic auth.
        follow_redirects: Whether to follow redirects.
        max_redirects: Maximum number of redirect hops.
    """

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    content: bytes | None = None
    timeout: float = 90.0
    proxy: str | None = None
    http_version: str = "1.1"
    auth: tuple[str, str] | None = None
    follow_redirects: bool = True
    max_redirects: int = 10

    def __post_init__(self) -> None:
        """Normalize method to uppercase."""
        self.method = self.method.upper()


@dataclass
class Response:
    """HTTP response representation.

    Attributes:
        status_code: HTTP status code.
        headers: Raw response headers.
        content: Response body as bytes (already gzip/deflate decoded).
        url: Final URL after redirects.
        cookies: Cookies set by the final response.
        elapsed: Request duration in seconds.
        request: The request that produced this response.
        history: Redirect responses that led here.
    """

    status_code: int
    headers: dict[str, str]
    content: bytes
    url: str
    cookies: dict[str, str] = field(default_factory=dict)
    elapsed: float = 0.0
    request: Request | None = None
    history: list["Response"] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """Check if status code indicates success (2xx)."""
        return 200 <= self.status_code < 300

    @property
    def is_redirect(self) -> bool:
        """Check if status code is a redirect (3xx)."""
        return 300 <= self.status_code < 400

    @property
    def is_error(self) -> bool:
        """Check if status code is a client or server error (4xx, 5xx)."""
        return self.status_code >= 400

    def decode(self, encoding: str, errors: str = "replace") -> str:
        """Decode content with the given encoding."""
        return self.content.decode(encoding, errors=errors)

    @property
    def text(self) -> str:
        """Decode content as UTF-8 text."""
        return self.decode("utf-8")

    def json(self) -> Any:
        """Parse content as JSON."""
        import json as json_module
        return json_module.loads(self.content)


class HTTPClientError(Exception):
    """Base exception for HTTP client errors."""
    pass


class TransportError(HTTPClientError):
    """No response was obtained (connection, DNS, timeout, redirect loop)."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error


class InvalidURLError(HTTPClientError, ValueError):
    """The request URL is malformed or not http(s)."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Invalid URL {url!r}: {reason}")
        self.url = url


@dataclass
class Success:
    """A response below 400 with its decoded body."""

    body: str
    response: Response
    ok = True


@dataclass
class ErrorWithBody:
    """A 4xx/5xx response; body holds the server's error page."""

    body: str
    response: Response
    ok = False


@dataclass
class NoResponse:
    """No response was received at all."""

    error: TransportError
    ok = False

    @property
    def body(self) -> str:
        return ""


Outcome = Union[Success, ErrorWithBody, NoResponse]
