"""Command line entry point: ``python -m slot_probe``."""

from __future__ import annotations

import argparse
import logging
import sys
from functools import partial

from .config import RequestConfig
from .probe import BookingProbe, format_result, load_sites


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="slot_probe",
        description="Check SimplyBook booking sites for open working days.",
    )
    parser.add_argument("sites_html", help="saved HTML page listing the booking sites")
    parser.add_argument("--from", dest="date_from", required=True, help="first day, YYYY-MM-DD")
    parser.add_argument("--to", dest="date_to", required=True, help="last day, YYYY-MM-DD")
    parser.add_argument("--service", type=int, default=1, help="service id (default: 1)")
    parser.add_argument(
        "--backend",
        choices=("httpx", "curl"),
        default="httpx",
        help="HTTP backend (default: httpx)",
    )
    parser.add_argument("--timeout", type=float, default=90.0, help="request timeout in seconds")
    parser.add_argument("-v", "--verbose", action="store_true", help="trace every request")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        sites = load_sites(args.sites_html)
    except OSError as e:
        print(f"slot_probe: cannot read {args.sites_html}: {e}", file=sys.stderr)
        return 2

    probe = BookingProbe(
        args.date_from,
        args.date_to,
        service=args.service,
        config_factory=partial(RequestConfig, backend=args.backend, timeout=args.timeout),
        verbose=args.verbose,
    )
    for site in sites:
        for line in format_result(probe.probe(site)):
            print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
