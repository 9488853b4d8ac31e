"""curl_cffi-based HTTP backend with exact protocol version control."""

from __future__ import annotations

import time
from typing import Any

from ..cookies import CookieStore
from ..models import Request, Response, TransportError

# Optional curl_cffi import
try:
    from curl_cffi import CurlError, CurlHttpVersion
    from curl_cffi.requests import Session
    CURL_AVAILABLE = True
except ImportError:
    CURL_AVAILABLE = False
    CurlError = None
    CurlHttpVersion = None
    Session = None


class CurlBackend:
    """curl_cffi wrapper that performs one exchange per call.

    Unlike httpx, libcurl can speak HTTP/1.0 on the wire, so this backend
    honours the configured protocol version exactly.
    """

    name = "curl"

    def __init__(self, verify_ssl: bool = True):
        """Initialize curl backend.

        Args:
            verify_ssl: Whether to verify SSL certificates.

        Raises:
            ImportError: If curl_cffi is not installed.
        """
        if not CURL_AVAILABLE:
            raise ImportError(
                "curl_cffi is required for curl backend. "
                "Install with: pip install curl_cffi"
            )
        self._verify_ssl = verify_ssl
        self._http_versions = {
            "1.0": CurlHttpVersion.V1_0,
            "1.1": CurlHttpVersion.V1_1,
            "2": CurlHttpVersion.V2_0,
        }

    def send(self, request: Request, cookies: CookieStore) -> Response:
        """Execute an HTTP request.

        Args:
            request: The request to execute.
            cookies: Cookie store to send from and merge received cookies into.

        Returns:
            Response object for any HTTP status.

        Raises:
            TransportError: On connection/transport errors.
        """
        headers = dict(request.headers)
        # libcurl negotiates and decodes content-encoding itself
        accept_encoding = headers.pop("Accept-Encoding", None)

        kwargs: dict[str, Any] = {
            "method": request.method,
            "url": request.url,
            "headers": headers,
            "cookies": cookies.get_for_url(request.url),
            "timeout": request.timeout,
            "verify": self._verify_ssl,
            "allow_redirects": request.follow_redirects,
            "max_redirects": request.max_redirects,
            "http_version": self._http_versions[request.http_version],
            "accept_encoding": accept_encoding,
        }
        if request.content is not None:
            kwargs["data"] = request.content
        if request.auth:
            kwargs["auth"] = request.auth
        if request.proxy:
            kwargs["proxies"] = {"all": request.proxy}

        start_time = time.monotonic()
        try:
            with Session() as session:
                resp = session.request(**kwargs)
                # Session jar holds cookies from every redirect hop
                cookies.merge(session.cookies.jar)
        except CurlError as e:
            raise TransportError(
                f"Request failed: {type(e).__name__}: {e}",
                original_error=e,
            ) from e

        return self._convert_response(resp, request, time.monotonic() - start_time)

    def _convert_response(self, resp: Any, request: Request, elapsed: float) -> Response:
        """Convert curl_cffi response to our Response model."""
        resp_cookies = {}
        if hasattr(resp, "cookies"):
            for name, value in resp.cookies.items():
                resp_cookies[name] = value

        return Response(
            status_code=resp.status_code,
            headers=dict(resp.headers),
            content=resp.content,
            url=str(resp.url),
            cookies=resp_cookies,
            elapsed=elapsed,
            request=request,
            history=[],
        )

    def close(self) -> None:
        """Nothing to release; sessions are scoped to each call."""
