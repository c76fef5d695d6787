"""Command line entry point: ping the configured AvaTax environment.

Reads ``AVATAX_*`` settings (environment, identity, credentials) from the
environment or a .env file, configures logging, and calls the ping
endpoint to verify connectivity and authentication.
"""

import sys

import orjson
from loguru import logger

from avatax.client import AvaTaxClient
from avatax.client.models import PingResultModel
from avatax.core.config import get_settings
from avatax.core.logging import setup_logging


def main() -> int:
    """Call ping and print the JSON result; returns a process exit code."""
    settings = get_settings()

    setup_logging(settings)

    with AvaTaxClient.from_settings(settings) as client:
        logger.info("Pinging AvaTax at {}", client.base_url)
        result = client.ping()

    if not isinstance(result, PingResultModel):
        logger.error("Ping failed: {}", result)
        return 1

    payload = result.model_dump(mode="json", by_alias=True, exclude_none=True)
    sys.stdout.write(orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode() + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
