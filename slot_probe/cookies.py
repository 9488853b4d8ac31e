"""Client-scoped cookie storage."""

from __future__ import annotations

import time
from http.cookiejar import Cookie, CookieJar
from typing import Iterable, Iterator
from urllib.parse import urlparse


def _matches_domain(cookie: Cookie, host: str) -> bool:
    """Check if cookie applies to the given host."""
    host = host.lower()
    cookie_domain = cookie.domain.lower()

    # Domain attribute match (cookie domain starts with dot)
    if cookie_domain.startswith("."):
        return host.endswith(cookie_domain) or host == cookie_domain[1:]

    # Host-only cookie; the jar stores dotless hosts with a ".local" suffix
    if host == cookie_domain:
        return True
    return "." not in host and cookie_domain == host + ".local"


def _matches_path(cookie: Cookie, path: str) -> bool:
    """Check if cookie applies to the given path."""
    if cookie.path in ("", "/"):
        return True
    return path == cookie.path or path.startswith(cookie.path.rstrip("/") + "/")


class CookieStore:
    """Cookie storage keyed by (domain, path, name).

    Wraps an ``http.cookiejar.CookieJar`` so the jar can be handed straight
    to the HTTP library, which merges cookies from every response (redirect
    hops included) into it in place. Not safe for concurrent use.
    """

    def __init__(self) -> None:
        """Initialize empty cookie store."""
        self._jar = CookieJar()

    @property
    def jar(self) -> CookieJar:
        """The underlying cookie jar."""
        return self._jar

    def set(
        self,
        name: str,
        value: str,
        domain: str,
        path: str = "/",
        expires: float | None = None,
        secure: bool = False,
        http_only: bool = False,
    ) -> None:
        """Set a cookie.

        Args:
            name: Cookie name.
            value: Cookie value.
            domain: Cookie domain. A leading dot makes it a domain cookie,
                    otherwise it is host-only.
            path: Cookie path.
            expires: Expiration timestamp.
            secure: HTTPS-only flag.
            http_only: HTTP-only flag.
        """
        domain = domain.lower()
        dotted = domain.startswith(".")
        cookie = Cookie(
            version=0,
            name=name,
            value=value,
            port=None,
            port_specified=False,
            domain=domain,
            domain_specified=dotted,
            domain_initial_dot=dotted,
            path=path,
            path_specified=True,
            secure=secure,
            expires=int(expires) if expires is not None else None,
            discard=expires is None,
            comment=None,
            comment_url=None,
            rest={"HttpOnly": ""} if http_only else {},
        )
        self._jar.set_cookie(cookie)

    def get(self, name: str, domain: str | None = None, path: str | None = None) -> str | None:
        """Get a cookie value by name, optionally narrowed by domain and path."""
        for cookie in self._jar:
            if cookie.name != name:
                continue
            if domain is not None and cookie.domain.lstrip(".") != domain.lower().lstrip("."):
                continue
            if path is not None and cookie.path != path:
                continue
            return cookie.value
        return None

    def get_for_url(self, url: str) -> dict[str, str]:
        """Get cookies applicable to URL.

        Args:
            url: The request URL.

        Returns:
            Dict of cookie name to value.
        """
        parsed = urlparse(url)
        host = parsed.hostname or ""
        path = parsed.path or "/"
        is_secure = parsed.scheme.lower() == "https"
        now = time.time()

        result: dict[str, str] = {}
        # Shortest paths first; a more specific path wins on name clashes
        for cookie in sorted(self._jar, key=lambda c: len(c.path)):
            if cookie.is_expired(now):
                continue
            if not _matches_domain(cookie, host):
                continue
            if not _matches_path(cookie, path):
                continue
            if cookie.secure and not is_secure:
                continue
            result[cookie.name] = cookie.value or ""

        return result

    def merge(self, cookies: Iterable[Cookie]) -> None:
        """Add cookies received through another jar."""
        for cookie in cookies:
            self._jar.set_cookie(cookie)

    def delete(self, name: str, domain: str, path: str = "/") -> bool:
        """Delete a specific cookie.

        Returns:
            True if cookie was deleted, False if not found.
        """
        for cookie_domain in {domain.lower(), "." + domain.lower().lstrip(".")}:
            try:
                self._jar.clear(cookie_domain, path, name)
                return True
            except KeyError:
                continue
        return False

    def clear_domain(self, domain: str) -> None:
        """Clear all cookies for a domain."""
        domain = domain.lower().lstrip(".")
        for cookie in list(self._jar):
            if cookie.domain.lstrip(".") == domain:
                self._jar.clear(cookie.domain, cookie.path, cookie.name)

    def clear_all(self) -> None:
        """Clear all cookies."""
        self._jar.clear()

    def get_all(self) -> dict[str, dict[str, str]]:
        """Get all cookies organized by domain."""
        self._jar.clear_expired_cookies()
        result: dict[str, dict[str, str]] = {}
        for cookie in self._jar:
            result.setdefault(cookie.domain, {})[cookie.name] = cookie.value or ""
        return result

    def keys(self) -> list[tuple[str, str, str]]:
        """List the (domain, path, name) key of every stored cookie."""
        return [(c.domain, c.path, c.name) for c in self._jar]

    def __iter__(self) -> Iterator[Cookie]:
        return iter(self._jar)

    def __len__(self) -> int:
        """Return total number of cookies."""
        return len(self._jar)

    def __bool__(self) -> bool:
        """Return True if store has any cookies."""
        return len(self._jar) > 0
