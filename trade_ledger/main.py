"""Main module entrypoint for local runtime execution.

This module validates startup configuration and launches the FastAPI service.
"""

import argparse

import uvicorn

from trade_ledger.bootstrap import bootstrap_create_application
from trade_ledger.config import config_load_settings


def main() -> None:
    """Run the API server with validated startup configuration.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
    """

    argument_parser = argparse.ArgumentParser(description="Trade Ledger runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api",),
        help="Runtime command: `api` starts the trade reconstruction server",
        type=str,
    )
    argument_parser.add_argument(
        "--port",
        dest="port",
        type=int,
        help="Optional port override for `api`",
    )
    parsed_arguments = argument_parser.parse_args()

    settings = config_load_settings()
    application = bootstrap_create_application()
    uvicorn.run(
        application,
        host=settings.application_host,
        port=parsed_arguments.port or settings.application_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
