"""Internal backend implementations for HttpClient."""

from .base import Backend
from .httpx_backend import HttpxBackend
from .curl_backend import CurlBackend, CURL_AVAILABLE

__all__ = ["Backend", "HttpxBackend", "CurlBackend", "CURL_AVAILABLE"]
