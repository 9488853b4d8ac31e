"""HTTP client and vacancy probe for polling booking sites.

This package provides a synchronous, configurable HTTP client built for
scraping booking platforms:

- Shared cookie store that persists across requests until reset
- Referer and URL tracking of the final, post-redirect location
- Randomised browser user agent, overridable headers and Host
- Header-injection and body-decoding hooks
- Error pages returned as bodies instead of raised exceptions
- httpx backend by default, curl_cffi backend for exact HTTP/1.0

Basic usage:

    from slot_probe import HttpClient, RequestConfig

    client = HttpClient(RequestConfig(encoding="utf-8"))
    html = client.get("https://example.simplybook.cc/v2/")

    # Explicit outcome
    outcome = client.fetch("https://example.simplybook.cc/v2/service/")
    if outcome.ok:
        print(outcome.response.json())

    # Probe booking sites
    from slot_probe import BookingProbe, format_result

    probe = BookingProbe("2021-06-28", "2021-08-08")
    for line in format_result(probe.probe("https://example.simplybook.cc")):
        print(line)
"""

from .client import HttpClient
from .config import Credentials, RequestConfig
from .cookies import CookieStore
from .models import (
    Request,
    Response,
    Success,
    ErrorWithBody,
    NoResponse,
    Outcome,
    HeaderHandler,
    StreamHandler,
    HTTPClientError,
    TransportError,
    InvalidURLError,
)
from .probe import (
    BookingProbe,
    ProbeResult,
    discover_sites,
    extract_csrf_token,
    extract_site_info,
    format_result,
    load_sites,
)
from .user_agent import random_user_agent

__version__ = "0.1.0"

__all__ = [
    # Main client
    "HttpClient",
    # Configuration
    "RequestConfig",
    "Credentials",
    "CookieStore",
    # Models
    "Request",
    "Response",
    "Success",
    "ErrorWithBody",
    "NoResponse",
    "Outcome",
    "HeaderHandler",
    "StreamHandler",
    # Exceptions
    "HTTPClientError",
    "TransportError",
    "InvalidURLError",
    # Booking probe
    "BookingProbe",
    "ProbeResult",
    "discover_sites",
    "extract_csrf_token",
    "extract_site_info",
    "format_result",
    "load_sites",
    # Helpers
    "random_user_agent",
    # Version
    "__version__",
]
