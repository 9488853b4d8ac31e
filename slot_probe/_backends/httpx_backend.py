"""httpx-based HTTP backend."""

from __future__ import annotations

import time

import httpx

from ..cookies import CookieStore
from ..models import Request, Response, TransportError


class HttpxBackend:
    """httpx wrapper that performs one exchange per call.

    A fresh ``httpx.Client`` is opened for every request and closed before
    ``send`` returns, so no connection outlives the call. The client shares
    the store's cookie jar, which makes httpx merge cookies from each
    redirect hop straight into it.
    """

    name = "httpx"

    def __init__(
        self,
        verify_ssl: bool = True,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize httpx backend.

        Args:
            verify_ssl: Whether to verify SSL certificates.
            transport: Custom httpx transport (e.g., httpx.MockTransport).
        """
        self._verify_ssl = verify_ssl
        self._transport = transport

    def send(self, request: Request, cookies: CookieStore) -> Response:
        """Execute an HTTP request.

        Args:
            request: The request to execute.
            cookies: Cookie store shared with the client.

        Returns:
            Response object for any HTTP status.

        Raises:
            TransportError: On connection/transport errors.
        """
        auth = httpx.BasicAuth(*request.auth) if request.auth else None

        start_time = time.monotonic()
        try:
            with httpx.Client(
                cookies=cookies.jar,
                timeout=request.timeout,
                verify=self._verify_ssl,
                http2=request.http_version == "2",
                follow_redirects=request.follow_redirects,
                max_redirects=request.max_redirects,
                proxy=request.proxy,
                auth=auth,
                transport=self._transport,
                trust_env=self._transport is None and request.proxy is None,
            ) as client:
                resp = client.request(
                    method=request.method,
                    url=request.url,
                    headers=request.headers,
                    content=request.content,
                )
        except httpx.HTTPError as e:
            raise TransportError(
                f"Request failed: {type(e).__name__}: {e}",
                original_error=e,
            ) from e

        return self._convert_response(resp, request, time.monotonic() - start_time)

    def _convert_response(
        self,
        httpx_resp: httpx.Response,
        request: Request,
        elapsed: float,
    ) -> Response:
        """Convert httpx.Response to our Response model."""
        history = [
            Response(
                status_code=hop.status_code,
                headers=dict(hop.headers),
                content=hop.content,
                url=str(hop.url),
                cookies=dict(hop.cookies),
            )
            for hop in httpx_resp.history
        ]
        return Response(
            status_code=httpx_resp.status_code,
            headers=dict(httpx_resp.headers),
            content=httpx_resp.content,
            url=str(httpx_resp.url),
            cookies=dict(httpx_resp.cookies),
            elapsed=elapsed,
            request=request,
            history=history,
        )

    def close(self) -> None:
        """Nothing to release; clients are scoped to each call."""
