"""Configuration dataclasses for the HTTP client."""

from __future__ import annotations

import codecs
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from .models import HeaderHandler, StreamHandler


PROTOCOL_VERSIONS = ("1.0", "1.1", "2")


@dataclass
class Credentials:
    """Credentials sent with every request.

    Attributes:
        username: Basic auth username.
        password: Basic auth password.
        token: Bearer token, sent as ``Authorization: Bearer <token>``.
    """

    username: str | None = None
    password: str | None = None
    token: str | None = None

    def __post_init__(self) -> None:
        """Require either a username or a token."""
        if not self.username and not self.token:
            raise ValueError("credentials need a username or a token")

    @property
    def basic(self) -> tuple[str, str] | None:
        """Username/password pair for basic auth, if configured."""
        if self.username:
            return (self.username, self.password or "")
        return None


@dataclass
class RequestConfig:
    """Per-client request configuration.

    Fields are read each time a request is sent, so changing them between
    calls changes the next request.

    Attributes:
        override_host: Value for the Host header. Empty keeps the URL host.
        override_user_agent: Fixed User-Agent. Empty means a random one per request.
        override_accept: Fixed Accept header. Empty keeps the per-verb default.
        protocol_version: "1.0", "1.1" or "2". None uses the per-verb default
                          (1.0 for GET, 1.1 for body verbs and downloads).
                          "1.0" is only sent on the wire by the curl backend;
                          httpx speaks 1.1 with ``Connection: close``.
        content_type: Content-Type of request bodies.
        encoding: Text encoding used to decode response bodies.
        timeout: Request timeout in seconds.
        follow_redirects: Whether to follow HTTP redirects.
        max_redirects: Maximum number of redirect hops.
        expect_100_continue: Send ``Expect: 100-continue`` with request bodies.
        credentials: Optional credentials, sent on the first attempt.
        proxy: Proxy URL (e.g., "http://host:port").
        referer: Referer sent with the next request; updated after each success.
        verify_ssl: Whether to verify SSL certificates.
        backend: Wire backend - "httpx" (default) or "curl" (needs curl_cffi).
        header_handler: Hook returning extra headers for each outgoing request.
        stream_handler: Hook that reads the decoded body stream and returns the result.
    """

    # Header overrides
    override_host: str = ""
    override_user_agent: str = ""
    override_accept: str = ""
    protocol_version: str | None = None

    # Body and decoding
    content_type: str = "application/x-www-form-urlencoded"
    encoding: str = "iso-8859-1"

    # Timeouts and redirects
    timeout: float = 90.0
    follow_redirects: bool = True
    max_redirects: int = 10
    expect_100_continue: bool = True

    # Auth and routing
    credentials: Credentials | None = None
    proxy: str | None = None
    referer: str = "http://www.google.com"
    verify_ssl: bool = True
    backend: Literal["httpx", "curl"] = "httpx"

    # Hooks
    header_handler: HeaderHandler | None = None
    stream_handler: StreamHandler | None = None

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.timeout <= 0:
            raise ValueError("timeout must be > 0")
        if self.max_redirects < 0:
            raise ValueError("max_redirects must be >= 0")
        if self.protocol_version is not None and self.protocol_version not in PROTOCOL_VERSIONS:
            raise ValueError(f"protocol_version must be one of {PROTOCOL_VERSIONS}")
        if self.backend not in ("httpx", "curl"):
            raise ValueError("backend must be 'httpx' or 'curl'")
        try:
            codecs.lookup(self.encoding)
        except LookupError as e:
            raise ValueError(f"unknown encoding: {self.encoding}") from e
