"""
Token service entry point.

Looks up token data (or wallet portfolios) from the command line.

Run with:
    python -m token_service.main <mint> [<mint> ...]
    python -m token_service.main --portfolio <wallet> [<wallet> ...]
"""

import asyncio
import logging
import sys

from token_service.config import get_settings
from token_service.core.exceptions import TokenServiceError
from token_service.services.factory import ServiceFactory
from token_service.utils.formatters import format_portfolio, format_token_info

USAGE = "Usage: python -m token_service.main [--portfolio] <address> [<address> ...]"


def setup_logging(level: str) -> None:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
    """
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )

    # Reduce noise from external libraries
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("backoff").setLevel(logging.WARNING)


def parse_args(argv: list[str]) -> tuple[bool, list[str]]:
    """Split argv into the portfolio flag and the addresses."""
    portfolio = "--portfolio" in argv
    addresses = [arg for arg in argv if arg != "--portfolio"]
    return portfolio, addresses


async def main(argv: list[str]) -> int:
    """
    Main application entry point.

    Initializes:
    1. Configuration from environment
    2. Logging
    3. TokenService via factory

    Then queries every address and prints the result.

    Returns:
        Process exit code (0 on success, 1 if any lookup failed)
    """
    portfolio_mode, addresses = parse_args(argv)
    if not addresses:
        print(USAGE, file=sys.stderr)
        return 2

    # Load configuration
    settings = get_settings()

    # Setup logging first (so configuration errors are logged)
    setup_logging(settings.log_level)
    logger = logging.getLogger(__name__)

    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Mock mode: {settings.use_mock_services}")

    try:
        service = ServiceFactory(settings).create_token_service()
    except TokenServiceError as e:
        logger.error(f"Configuration failed: {e}")
        print(e.message, file=sys.stderr)
        return 1

    exit_code = 0
    async with service:
        for address in addresses:
            try:
                if portfolio_mode:
                    output = format_portfolio(await service.get_wallet_portfolio(address))
                else:
                    output = format_token_info(await service.get_token_data(address))
            except TokenServiceError as e:
                logger.warning(f"Lookup failed for {address}: {e}")
                print(f"{address}: {e.message}", file=sys.stderr)
                exit_code = 1
                continue

            print(output)
            print()

    return exit_code


def run() -> None:
    """Console script entry point."""
    try:
        sys.exit(asyncio.run(main(sys.argv[1:])))
    except KeyboardInterrupt:
        print("\nStopped by user.")


if __name__ == "__main__":
    run()
