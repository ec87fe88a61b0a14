"""
Main entry point for the receipt print server.

Loads .env, configures logging and serves until interrupted.
"""

import asyncio
import logging
import sys


def setup_logging(debug: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )


async def run_server() -> None:
    """Run the HTTP server until cancelled."""
    from config.settings import get_settings
    from printserver.server import PrintServer

    settings = get_settings()
    server = PrintServer(settings)
    await server.start()

    if settings.is_simulator:
        logging.getLogger(__name__).info("Simulator mode: jobs go to the mock printer")

    try:
        await asyncio.Event().wait()
    finally:
        await server.stop()


def main() -> None:
    """Main entry point."""
    from dotenv import load_dotenv

    # Load environment variables
    load_dotenv()

    from config.settings import get_settings
    settings = get_settings()

    # Setup logging
    setup_logging(settings.debug)

    logger = logging.getLogger(__name__)
    logger.info("Print server starting...")

    try:
        asyncio.run(run_server())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)

    logger.info("Print server stopped")


if __name__ == "__main__":
    main()
