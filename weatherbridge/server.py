"""Process bootstrap: logging, configuration, MCP stdio server and a small CLI."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from .config import WeatherApiConfig, env
from .formatting import ERROR_MARKER
from .providers.openweather import OpenWeatherMapProvider
from .tools import Tool, WeatherTools, build_registry, dispatch


logger = logging.getLogger(__name__)

SERVER_NAME = "weatherbridge"
API_KEY_URL = "https://openweathermap.org/api"


def configure_logging(level: Optional[str] = None) -> None:
    # stdout carries the MCP protocol, so diagnostics go to stderr.
    logging.basicConfig(
        level=(level or env("WEATHERBRIDGE_LOG_LEVEL", "INFO") or "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def create_registry(config: WeatherApiConfig) -> Dict[str, Tool]:
    provider = OpenWeatherMapProvider(config)
    return build_registry(WeatherTools(provider))


def build_server(registry: Dict[str, Tool]) -> FastMCP:
    server = FastMCP(SERVER_NAME)
    for tool in registry.values():
        server.add_tool(tool.func, name=tool.name, description=tool.description)
    return server


def report_configuration(config: WeatherApiConfig) -> None:
    if not config.has_api_key:
        logger.warning(
            "OpenWeatherMap API key not found. Please set the OPENWEATHERMAP_API_KEY environment variable."
        )
        logger.info("You can get a free API key from: %s", API_KEY_URL)
    else:
        logger.info("Weather server starting with API key configured (units=%s)", config.units)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=SERVER_NAME, description="OpenWeatherMap tools over MCP")
    parser.add_argument("--log-level", default=None, help="Logging level (default: WEATHERBRIDGE_LOG_LEVEL or INFO)")
    commands = parser.add_subparsers(dest="command")

    commands.add_parser("serve", help="Serve the weather tools over MCP stdio (default)")

    for name, help_text in (
        ("current", "Print current weather for a city"),
        ("forecast", "Print the daily forecast for a city"),
        ("alerts", "Print active weather alerts for a city"),
    ):
        command = commands.add_parser(name, help=help_text)
        command.add_argument("city", help="City name")
        command.add_argument("--country", dest="country_code", default=None, help="Country code, e.g. GB")
        if name == "forecast":
            command.add_argument("--days", type=int, default=3, help="Number of days (1-5)")
    return parser


COMMAND_TOOLS = {
    "current": "get_current_weather",
    "forecast": "get_weather_forecast",
    "alerts": "get_weather_alerts",
}


def main(argv: Optional[List[str]] = None) -> int:
    args = _parser().parse_args(argv)
    configure_logging(args.log_level)

    config = WeatherApiConfig.from_env()
    report_configuration(config)
    registry = create_registry(config)

    if args.command in (None, "serve"):
        build_server(registry).run()
        return 0

    arguments = {"city": args.city, "country_code": args.country_code}
    if args.command == "forecast":
        arguments["days"] = args.days
    text = asyncio.run(dispatch(registry, COMMAND_TOOLS[args.command], arguments))
    sys.stdout.write(text)
    return 1 if text.startswith(ERROR_MARKER) else 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
