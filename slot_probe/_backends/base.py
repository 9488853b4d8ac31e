"""Backend protocol for sending a single HTTP exchange."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..cookies import CookieStore
from ..models import Request, Response


@runtime_checkable
class Backend(Protocol):
    """Protocol defining the backend interface.

    A backend performs exactly one exchange per ``send`` call, following
    redirects as the request asks. It returns a Response for every HTTP
    status and raises TransportError only when no response was obtained.
    """

    name: str

    def send(self, request: Request, cookies: CookieStore) -> Response:
        """Execute an HTTP request.

        Args:
            request: The request to execute.
            cookies: Cookie store to send from and merge received cookies into.

        Returns:
            Response object.

        Raises:
            TransportError: On connection or transport errors.
        """
        ...

    def close(self) -> None:
        """Release backend resources."""
        ...
