#!/usr/bin/env python3
"""
SteamCity CLI tool

Command line interface for starting the terminal dashboard and for
decoding and encoding dashboard addresses.
"""

from __future__ import annotations

import argparse
import json
import sys

from steamcity.config import get_settings
from steamcity.exceptions import InvalidRouteError
from steamcity.logger import setup_logger
from steamcity.navigation import Route, ViewName, decode, encode

# The terminal UI owns stdout, so its log goes to a file
DEFAULT_LOG_FILE = "steamcity-tui.log"


def parse_param_pairs(pairs: list[str]) -> dict[str, str]:
    """
    Parse ``KEY=VALUE`` command line pairs

    Args:
        pairs: Values given to ``--param``

    Returns:
        Parameters in the order given; a repeated key keeps its last value

    Raises:
        ValueError: If a pair has no ``=`` or an empty key
    """
    params: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Invalid parameter: {pair!r}. Expected KEY=VALUE")
        params[key] = value
    return params


def route_to_dict(route: Route) -> dict[str, object]:
    return {"view": route.view.value, "id": route.id, "params": dict(route.params)}


def run_route_decode(fragment: str) -> None:
    """
    Print the route an address decodes to, as JSON

    Args:
        fragment: Address fragment such as ``#/sensors/s-1?period=7d``
    """
    try:
        route = decode(fragment)
    except InvalidRouteError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    print(json.dumps(route_to_dict(route)))


def run_route_encode(view: str, route_id: str | None, param_pairs: list[str]) -> None:
    """
    Print the canonical address of a route

    Args:
        view: View name (map, experiments, sensors or data)
        route_id: Optional experiment or sensor id
        param_pairs: ``KEY=VALUE`` query parameters
    """
    try:
        route = Route(view=ViewName.parse(view), id=route_id, params=parse_param_pairs(param_pairs))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    print(encode(route, with_marker=True))


def run_tui(
    api_url: str | None = None,
    route: str | None = None,
    log_level: str | None = None,
    log_file: str = DEFAULT_LOG_FILE,
) -> None:
    """
    Start TUI dashboard

    Args:
        api_url: Base URL of the API. Defaults to STEAMCITY_API_URL
        route: Address to open, e.g. ``#/experiments/exp-001``
        log_level: Log level name. Defaults to STEAMCITY_LOG_LEVEL
        log_file: File the dashboard logs to
    """
    settings = get_settings()
    updates: dict[str, object] = {}
    if api_url:
        updates["api_url"] = api_url.rstrip("/")
    if log_level:
        updates["log_level"] = log_level.upper()
    if updates:
        settings = settings.model_copy(update=updates)

    setup_logger(settings.log_level_value, log_file=log_file)

    print("Starting SteamCity TUI...")
    print(f"API: {settings.api_url}")
    print(f"Log file: {log_file}")

    from steamcity.tui import run_tui as _run_tui

    _run_tui(settings=settings, initial_fragment=route)


def main(argv: list[str] | None = None) -> None:
    """
    CLI main entry point
    """
    parser = argparse.ArgumentParser(description="SteamCity dashboard tool")
    subparsers = parser.add_subparsers(dest="command", help="Subcommands")

    tui_parser = subparsers.add_parser("tui", help="Start terminal UI dashboard")
    tui_parser.add_argument("--api-url", default=None, help="API base URL (default: STEAMCITY_API_URL or http://localhost:3000/api)")
    tui_parser.add_argument("--route", default=None, help="Address to open, e.g. '#/sensors/sensor-123?period=7d'")
    tui_parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        default=None,
        help="Log level (default: STEAMCITY_LOG_LEVEL or INFO)",
    )
    tui_parser.add_argument("--log-file", default=DEFAULT_LOG_FILE, help=f"Log file (default: {DEFAULT_LOG_FILE})")

    route_parser = subparsers.add_parser("route", help="Decode or encode dashboard addresses")
    route_subparsers = route_parser.add_subparsers(dest="route_command", help="Route subcommands")

    decode_parser = route_subparsers.add_parser("decode", help="Print the route of an address as JSON")
    decode_parser.add_argument("fragment", help="Address fragment, e.g. '#/data/exp-005?period=7d'")

    encode_parser = route_subparsers.add_parser("encode", help="Print the canonical address of a route")
    encode_parser.add_argument("view", help="View: map, experiments, sensors or data")
    encode_parser.add_argument("id", nargs="?", default=None, help="Experiment or sensor id")
    encode_parser.add_argument(
        "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Query parameter (repeatable)",
    )

    args = parser.parse_args(argv)

    if args.command == "tui":
        run_tui(api_url=args.api_url, route=args.route, log_level=args.log_level, log_file=args.log_file)
    elif args.command == "route":
        if args.route_command == "decode":
            run_route_decode(args.fragment)
        elif args.route_command == "encode":
            run_route_encode(args.view, args.id, args.param)
        else:
            route_parser.print_help()
            sys.exit(1)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
