"""Command-line entry point: run one joke-mesh service under uvicorn.

Usage:
    joke-mesh gateway
    python -m jokemesh jokes
"""

import argparse
import sys
from collections.abc import Callable, Sequence

import uvicorn
from fastapi import FastAPI
from pydantic import ValidationError as SettingsValidationError

from jokemesh.apps import analytics, gateway, jokes, user
from jokemesh.core.config import (
    Settings,
    get_analytics_settings,
    get_gateway_settings,
    get_jokes_settings,
    get_user_settings,
)
from jokemesh.core.exceptions import ConfigurationError
from jokemesh.core.logging import configure_logging, get_logger


logger = get_logger(__name__)

SERVICES: dict[str, tuple[Callable[[], Settings], Callable[..., FastAPI]]] = {
    "gateway": (get_gateway_settings, gateway.create_app),
    "jokes": (get_jokes_settings, jokes.create_app),
    "analytics": (get_analytics_settings, analytics.create_app),
    "user": (get_user_settings, user.create_app),
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="joke-mesh",
        description="Run one service of the joke mesh.",
    )
    parser.add_argument("service", choices=sorted(SERVICES), help="Service to run")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    load_settings, create_app = SERVICES[args.service]

    try:
        settings = load_settings()
    except SettingsValidationError as e:
        configure_logging()
        logger.error("Invalid configuration", service=args.service, error=str(e))
        return 1

    configure_logging(level=settings.log_level, service_name=settings.service_name)

    try:
        app = create_app(settings)
    except ConfigurationError as e:
        logger.error(
            "Failed to initialize service",
            error=e.message,
            setting=e.setting,
        )
        return 1

    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
