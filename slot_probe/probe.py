"""Vacancy probe for SimplyBook booking sites.

For every site the probe loads the booking page, pulls the CSRF token and
the JSON-LD site description out of the HTML, checks that the site offers
services and finally asks the working-days endpoint whether any day in the
requested range is open.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterable, Literal

import httpx

from .client import HttpClient
from .config import RequestConfig

logger = logging.getLogger(__name__)

SITE_PATTERN = r"https://\w+.simplybook.cc"
CSRF_PATTERN = re.compile(r"csrf_token...(?P<csrf>\w+)")
SITE_INFO_PATTERN = re.compile(r"ld.json.[>](?P<info>.*?)[<]/script")

ProbeStatus = Literal["vacancy", "no_working_days", "no_services", "blocked", "error"]


@dataclass
class ProbeResult:
    """Outcome of probing one site.

    Attributes:
        site: Base URL of the booking site.
        status: What the probe found.
        locality: Town from the site's JSON-LD address, when known.
    """

    site: str
    status: ProbeStatus
    locality: str | None = None


def discover_sites(html: str, pattern: str = SITE_PATTERN) -> list[str]:
    """Find booking site URLs in a saved HTML page, keeping first-seen order."""
    sites: list[str] = []
    for match in re.finditer(pattern, html):
        site = match.group(0).strip()
        if site not in sites:
            sites.append(site)
    return sites


def load_sites(path: str | Path, pattern: str = SITE_PATTERN) -> list[str]:
    """Read a saved HTML page and discover the site URLs in it."""
    return discover_sites(Path(path).read_text(encoding="utf-8"), pattern)


def extract_csrf_token(html: str) -> str:
    """Return the CSRF token embedded in the booking page, or ''."""
    match = CSRF_PATTERN.search(html)
    return match.group("csrf") if match else ""


def extract_site_info(html: str) -> Any:
    """Return the parsed JSON-LD block of the booking page.

    None means the block is missing, which usually means we were served a
    blocking page instead of the booking app.
    """
    match = SITE_INFO_PATTERN.search(html)
    if not match or not match.group("info"):
        return None
    return json.loads(match.group("info"))


def _locality(info: Any) -> str | None:
    # JSON-LD may hold a list of entities
    if isinstance(info, list):
        for entity in info:
            locality = _locality(entity)
            if locality is not None:
                return locality
        return None
    if not isinstance(info, dict):
        return None
    location = info.get("location")
    if isinstance(location, dict) and location.get("addressLocality") is not None:
        return str(location["addressLocality"])
    return None


def _is_open(day: dict[str, Any]) -> bool:
    return str(day.get("is_day_off")).lower() != "true"


class BookingProbe:
    """Checks booking sites for open working days.

    Args:
        date_from: First day of the range (YYYY-MM-DD).
        date_to: Last day of the range (YYYY-MM-DD).
        service: Service id passed to the working-days query.
        config_factory: Builds the RequestConfig for each site's client.
        transport: Custom httpx transport handed to every client.
        verbose: Trace every exchange.
    """

    def __init__(
        self,
        date_from: str,
        date_to: str,
        service: int = 1,
        config_factory: Callable[[], RequestConfig] = RequestConfig,
        transport: httpx.BaseTransport | None = None,
        verbose: bool = False,
    ) -> None:
        self.date_from = date_from
        self.date_to = date_to
        self.service = service
        self._config_factory = config_factory
        self._transport = transport
        self._verbose = verbose

    def working_days_url(self, site: str) -> str:
        """Build the working-days query URL for a site."""
        return (
            f"{site}/v2/booking/working-days/?from={self.date_from}&to={self.date_to}"
            f"&provider=any&service={self.service}&location=&category=&booking_id="
        )

    def probe(self, site: str) -> ProbeResult:
        """Probe a single site with a fresh client."""
        with HttpClient(
            self._config_factory(),
            verbose=self._verbose,
            transport=self._transport,
        ) as client:
            try:
                return self._probe(client, site)
            except ValueError as e:
                # json.JSONDecodeError is a ValueError
                logger.warning("Unexpected response from %s: %s", site, e)
                return ProbeResult(site, "error")

    def _probe(self, client: HttpClient, site: str) -> ProbeResult:
        html = client.get(f"{site}/v2/")
        csrf = extract_csrf_token(html)
        info = extract_site_info(html)
        if info is None:
            return ProbeResult(site, "blocked")

        client.config.header_handler = lambda headers: {
            "X-Csrf-Token": csrf,
            "X-Requested-With": "XMLHttpRequest",
        }

        services = json.loads(client.get(f"{site}/v2/service/"))
        if not isinstance(services, list):
            raise ValueError(f"services is {type(services).__name__}, expected a list")
        if not services:
            return ProbeResult(site, "no_services")

        working_days = json.loads(client.get(self.working_days_url(site)))
        if not isinstance(working_days, list) or not all(
            isinstance(day, dict) for day in working_days
        ):
            raise ValueError("working days is not a list of objects")
        if any(_is_open(day) for day in working_days):
            return ProbeResult(site, "vacancy", _locality(info))
        return ProbeResult(site, "no_working_days")

    def run(self, sites: Iterable[str]) -> list[ProbeResult]:
        """Probe every site in order."""
        results = []
        for site in sites:
            result = self.probe(site)
            logger.debug("%s: %s", site, result.status)
            results.append(result)
        return results


def format_result(result: ProbeResult) -> list[str]:
    """Render a probe result as report lines."""
    if result.status == "vacancy":
        lines = [f"Possible vacancy at {result.site}"]
        if result.locality:
            lines.append(f" In {result.locality}")
        return lines
    if result.status == "blocked":
        return [f"Blocked?  {result.site}"]
    if result.status == "no_services":
        return [f"No services at  {result.site}"]
    if result.status == "no_working_days":
        return [f"No working days  {result.site}"]
    return [f"Could not read  {result.site}"]
