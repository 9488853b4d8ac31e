"""Configurable HTTP client for polling booking sites.

Each call performs exactly one HTTP exchange with the client's current
configuration and never raises for network failures:

- 4xx/5xx responses return the server's error page as the body
- failures without any response return an empty body (or None for downloads)
- successful responses update the client's referer and URL to the final,
  post-redirect location

Basic usage:

    from slot_probe import HttpClient

    client = HttpClient()
    html = client.get("https://example.simplybook.cc/v2/")
    print(client.url)  # final URL after redirects

    # Extra headers learned from a previous response
    client.config.header_handler = lambda headers: {"X-Csrf-Token": token}
    services = client.get("https://example.simplybook.cc/v2/service/")

    # Explicit outcome instead of a plain string
    outcome = client.fetch("https://example.simplybook.cc/v2/")
    if isinstance(outcome, ErrorWithBody):
        print(outcome.response.status_code, outcome.body)
"""

from __future__ import annotations

import io
import logging
from datetime import datetime
from types import MappingProxyType
from typing import Any, Mapping

import httpx

from ._backends import Backend, CurlBackend, HttpxBackend
from ._trace import ExchangeTrace, Tracer
from .config import RequestConfig
from .cookies import CookieStore
from .models import (
    ErrorWithBody,
    HTTPClientError,
    InvalidURLError,
    NoResponse,
    Outcome,
    Request,
    Response,
    Success,
    TransportError,
)
from .user_agent import (
    ACCEPT_ENCODING,
    ACCEPT_HTML,
    ACCEPT_JSON,
    ACCEPT_LANGUAGE,
    random_user_agent,
)

logger = logging.getLogger(__name__)

# Verbs sent with an empty request body
BODILESS_METHODS = frozenset({"HEAD"})


class HttpClient:
    """HTTP client with shared cookie, redirect, header and encoding policy.

    Configuration lives in ``self.config`` and is read each time a request
    is sent. Cookies, referer and last URL are per instance; use separate
    instances (or external locking) for concurrent work.

    Args:
        config: Request configuration. Defaults to ``RequestConfig()``.
        verbose: Print a trace of every exchange.
        trace_output: Stream for the verbose trace (defaults to stderr).
        trace_callback: Called with an ExchangeTrace for every exchange when verbose.
        transport: Custom httpx transport for the httpx backend.
    """

    def __init__(
        self,
        config: RequestConfig | None = None,
        *,
        verbose: bool = False,
        trace_output: Any = None,
        trace_callback: Any = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config or RequestConfig()
        self.cookies = CookieStore()

        # Location state, updated after every successful exchange
        self.url = ""
        self.resolved_uri = "about:blank"
        self.last_response: Response | None = None

        self._transport = transport
        self._backends: dict[tuple[str, bool], Backend] = {}
        self._tracer = Tracer(
            enabled=verbose,
            output=trace_output,
            callback=trace_callback,
        )
        self._closed = False

    @property
    def referer(self) -> str:
        """Referer sent with the next request."""
        return self.config.referer

    @referer.setter
    def referer(self, value: str) -> None:
        self.config.referer = value

    # -------------------------------------------------------------------------
    # HTTP Methods
    # -------------------------------------------------------------------------

    def get(self, url: str) -> str:
        """Make a GET request and return the body.

        Returns the decoded page on success, the error page for 4xx/5xx
        responses and an empty string when no response was received.

        Raises:
            InvalidURLError: If the URL is malformed.
        """
        return self.fetch(url).body

    def post_or_verb(self, url: str, body: str, method: str = "POST") -> str:
        """Send ``body`` with the given method and return the response body.

        The body is ASCII-encoded; verbs in BODILESS_METHODS send an empty body.

        Raises:
            InvalidURLError: If the URL is malformed.
        """
        return self.fetch(url, method, body).body

    def request(self, url: str, method: str = "GET", postdata: str = "") -> str:
        """Dispatch GET to ``get`` and every other verb to ``post_or_verb``."""
        if method.upper() == "GET":
            return self.get(url)
        return self.post_or_verb(url, postdata, method)

    def fetch(self, url: str, method: str = "GET", body: str | None = None) -> Outcome:
        """Make a request and return its outcome.

        GET requests ignore ``body``. Every other verb is sent with the
        ASCII-encoded body (unless bodiless) and the JSON-leaning Accept
        header.

        Returns:
            Success, ErrorWithBody or NoResponse.

        Raises:
            InvalidURLError: If the URL is malformed.
        """
        method = method.upper()
        if method == "GET":
            request = self._build_request(url, method, None, ACCEPT_HTML, "1.0")
        else:
            content = b""
            if method not in BODILESS_METHODS:
                content = (body or "").encode("ascii", errors="replace")
            request = self._build_request(url, method, content, ACCEPT_JSON, "1.1")

        try:
            response = self._send(request)
        except TransportError as e:
            logger.debug("%s %s got no response: %s", method, url, e)
            return NoResponse(e)

        if response.is_error:
            logger.debug("%s %s returned HTTP %d", method, url, response.status_code)
            return ErrorWithBody(response.decode("utf-8"), response)

        self._record_location(response)
        return Success(self._read_body(response), response)

    def download_file(self, url: str) -> bytes | None:
        """Download ``url`` and return the raw body bytes.

        Uses the same cookies and headers as ``get``. Returns None on any
        failure, including malformed URLs and 4xx/5xx responses.
        """
        try:
            request = self._build_request(url, "GET", None, ACCEPT_HTML, "1.1")
            response = self._send(request)
        except (InvalidURLError, TransportError) as e:
            logger.debug("Download of %s failed: %s", url, e)
            return None

        if response.is_error:
            logger.debug("Download of %s returned HTTP %d", url, response.status_code)
            return None

        self._record_location(response)
        return response.content

    # -------------------------------------------------------------------------
    # Session Control
    # -------------------------------------------------------------------------

    def reset_cookies(self) -> None:
        """Replace the cookie store with an empty one."""
        self.cookies = CookieStore()

    # -------------------------------------------------------------------------
    # Context Managers
    # -------------------------------------------------------------------------

    def __enter__(self) -> "HttpClient":
        """Enter context manager."""
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit context manager and cleanup resources."""
        self.close()

    def close(self) -> None:
        """Close the client and release resources."""
        if not self._closed:
            for backend in self._backends.values():
                backend.close()
            self._backends.clear()
            self._closed = True

    # -------------------------------------------------------------------------
    # Internal Methods
    # -------------------------------------------------------------------------

    def _build_request(
        self,
        url: str,
        method: str,
        content: bytes | None,
        default_accept: str,
        default_version: str,
    ) -> Request:
        """Build a request from the current configuration.

        Args:
            url: Request URL.
            method: HTTP method.
            content: Encoded body, None for no body.
            default_accept: Accept header unless overridden.
            default_version: HTTP version unless overridden.

        Returns:
            Request ready for a backend.

        Raises:
            InvalidURLError: If the URL is malformed.
        """
        _validate_url(url)
        config = self.config

        headers = {
            "User-Agent": config.override_user_agent or random_user_agent(),
            "Accept": config.override_accept or default_accept,
            "Accept-Language": ACCEPT_LANGUAGE,
            "Accept-Encoding": ACCEPT_ENCODING,
            "Connection": "close",
        }
        if config.referer:
            headers["Referer"] = config.referer
        if config.override_host:
            headers["Host"] = config.override_host

        if content is not None:
            headers["Content-Type"] = config.content_type
            headers["Content-Length"] = str(len(content))
            if config.expect_100_continue and content:
                headers["Expect"] = "100-continue"

        auth = None
        if config.credentials is not None:
            auth = config.credentials.basic
            if config.credentials.token:
                headers["Authorization"] = f"Bearer {config.credentials.token}"

        if config.header_handler is not None:
            extra = config.header_handler(MappingProxyType(dict(headers)))
            if extra:
                headers = _merge_headers(headers, extra)

        return Request(
            method=method,
            url=url,
            headers=headers,
            content=content,
            timeout=config.timeout,
            proxy=config.proxy,
            http_version=config.protocol_version or default_version,
            auth=auth,
            follow_redirects=config.follow_redirects,
            max_redirects=config.max_redirects,
        )

    def _get_backend(self) -> Backend:
        """Get or create the backend selected by the configuration."""
        key = (self.config.backend, self.config.verify_ssl)
        if key not in self._backends:
            if self.config.backend == "curl":
                self._backends[key] = CurlBackend(verify_ssl=self.config.verify_ssl)
            else:
                self._backends[key] = HttpxBackend(
                    verify_ssl=self.config.verify_ssl,
                    transport=self._transport,
                )
        return self._backends[key]

    def _send(self, request: Request) -> Response:
        """Send a request through the backend, tracing it when verbose.

        Raises:
            TransportError: If no response was received.
        """
        if self._closed:
            raise HTTPClientError("Client is closed")

        backend = self._get_backend()
        trace: ExchangeTrace | None = None
        if self._tracer.enabled:
            trace = ExchangeTrace(
                started=datetime.now(),
                method=request.method,
                url=request.url,
                backend=backend.name,
                http_version=request.http_version,
                request_headers=dict(request.headers),
                cookies_sent=self.cookies.get_for_url(request.url),
                proxy=request.proxy,
            )

        try:
            response = backend.send(request, self.cookies)
        except TransportError as e:
            if trace is not None:
                trace.error = str(e)
                self._tracer.emit(trace)
            raise

        self.last_response = response
        if trace is not None:
            trace.final_url = response.url
            trace.status_code = response.status_code
            trace.response_headers = dict(response.headers)
            trace.cookies_received = dict(response.cookies)
            trace.body_size = len(response.content)
            trace.body_preview = response.content[:200].decode(
                self.config.encoding, errors="replace"
            )
            trace.elapsed = response.elapsed
            self._tracer.emit(trace)

        return response

    def _record_location(self, response: Response) -> None:
        """Remember the final location of a successful exchange."""
        self.config.referer = response.url
        self.url = response.url
        self.resolved_uri = response.url

    def _read_body(self, response: Response) -> str:
        """Decode the body, or hand it to the stream hook when one is set."""
        handler = self.config.stream_handler
        if handler is None:
            return response.decode(self.config.encoding)

        with io.TextIOWrapper(
            io.BytesIO(response.content),
            encoding=self.config.encoding,
            errors="replace",
        ) as stream:
            return handler(stream)


def _validate_url(url: str) -> None:
    """Raise InvalidURLError unless ``url`` is an absolute http(s) URL."""
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as e:
        raise InvalidURLError(str(url), str(e)) from e
    if parsed.scheme not in ("http", "https"):
        raise InvalidURLError(url, "scheme must be http or https")
    if not parsed.host:
        raise InvalidURLError(url, "missing host")


def _merge_headers(headers: dict[str, str], extra: Mapping[str, str]) -> dict[str, str]:
    """Merge extra headers, replacing existing ones case-insensitively."""
    overridden = {name.lower() for name in extra}
    result = {k: v for k, v in headers.items() if k.lower() not in overridden}
    result.update(extra)
    return result
