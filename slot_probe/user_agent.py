"""Browser signature strings sent with every request."""

from __future__ import annotations

import random

USER_AGENT_TEMPLATE = (
    "Mozilla/5.0 (Windows NT 10.0; WOW64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/49.0.{build}.87 Safari/537.36"
)

ACCEPT_HTML = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
ACCEPT_JSON = "application/json, text/javascript, */*; q=0.01"
ACCEPT_LANGUAGE = "en-gb"
ACCEPT_ENCODING = "gzip, deflate"


def random_user_agent(rng: random.Random | None = None) -> str:
    """Build the Chrome user agent with a random three-digit build number.

    Only the build token varies, the rest of the signature stays fixed.

    Args:
        rng: Random source to draw from. Defaults to the ``random`` module.

    Returns:
        User-Agent header value.
    """
    build = (rng or random).randint(100, 999)
    return USER_AGENT_TEMPLATE.format(build=build)
