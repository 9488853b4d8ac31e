"""Tests for the booking site probe."""

import json

import httpx
import pytest

from slot_probe import (
    BookingProbe,
    ProbeResult,
    discover_sites,
    extract_csrf_token,
    extract_site_info,
    format_result,
    load_sites,
)

BOOKING_PAGE = (
    '<html><head><script>var c = {"csrf_token":"abc123"};</script>'
    '<script type="application/ld+json">'
    '{"@type": "LocalBusiness", "location": {"addressLocality": "Dublin"}}'
    "</script></head><body></body></html>"
)
BLOCKED_PAGE = "<html><body>Access denied</body></html>"

OPEN_DAYS = [{"date": "2024-05-01", "is_day_off": True}, {"date": "2024-05-02", "is_day_off": False}]
CLOSED_DAYS = [{"date": "2024-05-01", "is_day_off": True}]


class BookingSites:
    """Mock transport handler serving one booking app per host."""

    def __init__(self) -> None:
        self.sites: dict[str, dict[str, httpx.Response]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, host: str, page: str, services, working_days) -> None:
        def as_json(value):
            if isinstance(value, str):
                return httpx.Response(200, text=value)
            return httpx.Response(200, json=value)

        self.sites[host] = {
            "/v2/": httpx.Response(200, text=page),
            "/v2/service/": as_json(services),
            "/v2/booking/working-days/": as_json(working_days),
        }

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.sites.get(request.url.host, {}).get(request.url.path)
        if route is None:
            return httpx.Response(404, text="not found")
        return httpx.Response(route.status_code, headers=route.headers, content=route.content)


@pytest.fixture
def booking_sites() -> BookingSites:
    return BookingSites()


@pytest.fixture
def booking_probe(booking_sites) -> BookingProbe:
    return BookingProbe(
        "2024-05-01",
        "2024-05-31",
        transport=httpx.MockTransport(booking_sites),
    )


class TestDiscovery:
    """Tests for finding sites in saved HTML."""

    def test_discover_sites_dedupes_in_order(self):
        html = (
            '<a href="https://beta.simplybook.cc/v2/">b</a>'
            '<a href="https://alpha.simplybook.cc">a</a>'
            '<a href="https://beta.simplybook.cc/other">b again</a>'
            '<a href="https://example.com">elsewhere</a>'
        )

        assert discover_sites(html) == [
            "https://beta.simplybook.cc",
            "https://alpha.simplybook.cc",
        ]

    def test_discover_custom_pattern(self):
        assert discover_sites("see https://x.test and https://y.test", r"https://\w+\.test") == [
            "https://x.test",
            "https://y.test",
        ]

    def test_load_sites(self, tmp_path):
        path = tmp_path / "sites.html"
        path.write_text('<a href="https://alpha.simplybook.cc">a</a>', encoding="utf-8")

        assert load_sites(path) == ["https://alpha.simplybook.cc"]

    def test_load_sites_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            load_sites(tmp_path / "missing.html")


class TestPageParsing:
    """Tests for CSRF token and JSON-LD extraction."""

    def test_extract_csrf_token(self):
        assert extract_csrf_token(BOOKING_PAGE) == "abc123"

    def test_extract_csrf_token_missing(self):
        assert extract_csrf_token(BLOCKED_PAGE) == ""

    def test_extract_site_info(self):
        info = extract_site_info(BOOKING_PAGE)
        assert info["location"]["addressLocality"] == "Dublin"

    def test_extract_site_info_missing(self):
        assert extract_site_info(BLOCKED_PAGE) is None

    def test_extract_site_info_invalid_json(self):
        page = '<script type="application/ld+json">{not json</script>'
        with pytest.raises(json.JSONDecodeError):
            extract_site_info(page)


class TestBookingProbe:
    """Tests for probing sites end to end."""

    def test_vacancy(self, booking_sites, booking_probe):
        booking_sites.add("alpha.simplybook.cc", BOOKING_PAGE, [{"id": 1}], OPEN_DAYS)

        result = booking_probe.probe("https://alpha.simplybook.cc")

        assert result == ProbeResult("https://alpha.simplybook.cc", "vacancy", "Dublin")

    def test_vacancy_without_locality(self, booking_sites, booking_probe):
        page = '"csrf_token":"t1" <script type="application/ld+json">{}</script>'
        booking_sites.add("alpha.simplybook.cc", page, [{"id": 1}], OPEN_DAYS)

        result = booking_probe.probe("https://alpha.simplybook.cc")

        assert result.status == "vacancy"
        assert result.locality is None

    def test_blocked(self, booking_sites, booking_probe):
        booking_sites.add("alpha.simplybook.cc", BLOCKED_PAGE, [{"id": 1}], OPEN_DAYS)

        result = booking_probe.probe("https://alpha.simplybook.cc")

        assert result.status == "blocked"
        assert len(booking_sites.requests) == 1

    def test_missing_booking_page_counts_as_blocked(self, booking_probe):
        assert booking_probe.probe("https://gone.simplybook.cc").status == "blocked"

    def test_no_services(self, booking_sites, booking_probe):
        booking_sites.add("alpha.simplybook.cc", BOOKING_PAGE, [], OPEN_DAYS)

        assert booking_probe.probe("https://alpha.simplybook.cc").status == "no_services"

    def test_no_working_days(self, booking_sites, booking_probe):
        booking_sites.add("alpha.simplybook.cc", BOOKING_PAGE, [{"id": 1}], CLOSED_DAYS)

        assert booking_probe.probe("https://alpha.simplybook.cc").status == "no_working_days"

    def test_unexpected_response_is_error(self, booking_sites, booking_probe):
        booking_sites.add("alpha.simplybook.cc", BOOKING_PAGE, "<html>oops</html>", OPEN_DAYS)

        assert booking_probe.probe("https://alpha.simplybook.cc").status == "error"

    @pytest.mark.parametrize(
        "working_days",
        [{"error": "csrf"}, "null", [1, 2], '"closed"'],
        ids=["object", "null", "numbers", "string"],
    )
    def test_unexpected_working_days_shape_is_error(
        self, booking_sites, booking_probe, working_days
    ):
        booking_sites.add("alpha.simplybook.cc", BOOKING_PAGE, [{"id": 1}], working_days)

        assert booking_probe.probe("https://alpha.simplybook.cc").status == "error"

    @pytest.mark.parametrize("services", [{"error": "forbidden"}, "null", "3"])
    def test_unexpected_services_shape_is_error(self, booking_sites, booking_probe, services):
        booking_sites.add("alpha.simplybook.cc", BOOKING_PAGE, services, OPEN_DAYS)

        assert booking_probe.probe("https://alpha.simplybook.cc").status == "error"

    def test_run_continues_after_unexpected_shape(self, booking_sites, booking_probe):
        booking_sites.add("alpha.simplybook.cc", BOOKING_PAGE, [{"id": 1}], {"error": "csrf"})
        booking_sites.add("beta.simplybook.cc", BOOKING_PAGE, [{"id": 1}], OPEN_DAYS)

        results = booking_probe.run(["https://alpha.simplybook.cc", "https://beta.simplybook.cc"])

        assert [r.status for r in results] == ["error", "vacancy"]

    def test_locality_from_json_ld_list(self, booking_sites, booking_probe):
        page = (
            '"csrf_token":"t1" <script type="application/ld+json">'
            '[{"@type": "WebSite"}, {"location": {"addressLocality": "Cork"}}]</script>'
        )
        booking_sites.add("alpha.simplybook.cc", page, [{"id": 1}], OPEN_DAYS)

        result = booking_probe.probe("https://alpha.simplybook.cc")

        assert result == ProbeResult("https://alpha.simplybook.cc", "vacancy", "Cork")

    def test_ajax_headers_after_booking_page(self, booking_sites, booking_probe):
        booking_sites.add("alpha.simplybook.cc", BOOKING_PAGE, [{"id": 1}], OPEN_DAYS)

        booking_probe.probe("https://alpha.simplybook.cc")

        page, services, days = booking_sites.requests
        assert "X-Csrf-Token" not in page.headers
        assert services.headers["X-Csrf-Token"] == "abc123"
        assert services.headers["X-Requested-With"] == "XMLHttpRequest"
        assert days.headers["X-Csrf-Token"] == "abc123"
        assert services.headers["Referer"] == "https://alpha.simplybook.cc/v2/"

    def test_working_days_query(self, booking_sites, booking_probe):
        booking_sites.add("alpha.simplybook.cc", BOOKING_PAGE, [{"id": 1}], OPEN_DAYS)

        booking_probe.probe("https://alpha.simplybook.cc")

        params = booking_sites.requests[-1].url.params
        assert params["from"] == "2024-05-01"
        assert params["to"] == "2024-05-31"
        assert params["provider"] == "any"
        assert params["service"] == "1"

    def test_working_days_url(self):
        probe = BookingProbe("2024-05-01", "2024-05-31", service=7)

        assert probe.working_days_url("https://a.simplybook.cc") == (
            "https://a.simplybook.cc/v2/booking/working-days/"
            "?from=2024-05-01&to=2024-05-31&provider=any&service=7"
            "&location=&category=&booking_id="
        )

    def test_run_uses_fresh_client_per_site(self, booking_sites, booking_probe):
        booking_sites.add("alpha.simplybook.cc", BOOKING_PAGE, [{"id": 1}], OPEN_DAYS)
        booking_sites.add("beta.simplybook.cc", BLOCKED_PAGE, [], [])

        results = booking_probe.run(["https://alpha.simplybook.cc", "https://beta.simplybook.cc"])

        assert [r.status for r in results] == ["vacancy", "blocked"]
        beta_page = booking_sites.requests[-1]
        assert "X-Csrf-Token" not in beta_page.headers
        assert beta_page.headers["Referer"] == "http://www.google.com"


class TestFormatResult:
    """Tests for report lines."""

    @pytest.mark.parametrize(
        "result,lines",
        [
            (
                ProbeResult("https://a.simplybook.cc", "vacancy", "Dublin"),
                ["Possible vacancy at https://a.simplybook.cc", " In Dublin"],
            ),
            (
                ProbeResult("https://a.simplybook.cc", "vacancy"),
                ["Possible vacancy at https://a.simplybook.cc"],
            ),
            (ProbeResult("https://a.simplybook.cc", "blocked"), ["Blocked?  https://a.simplybook.cc"]),
            (
                ProbeResult("https://a.simplybook.cc", "no_services"),
                ["No services at  https://a.simplybook.cc"],
            ),
            (
                ProbeResult("https://a.simplybook.cc", "no_working_days"),
                ["No working days  https://a.simplybook.cc"],
            ),
            (ProbeResult("https://a.simplybook.cc", "error"), ["Could not read  https://a.simplybook.cc"]),
        ],
    )
    def test_format(self, result, lines):
        assert format_result(result) == lines
