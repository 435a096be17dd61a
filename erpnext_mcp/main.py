"""Composition root for the ERPNext bridge.

This module is the ONLY location that imports both core domain logic
and concrete adapter implementations. All wiring of dependencies
happens here, creating a clear entry point for the application.

Module Structure:
- Configuration loading via config module
- Logging setup (stderr; stdout belongs to the MCP stdio transport)
- ERPNext adapter instantiation from an explicit ConnectionConfig
- Tool dispatcher and MCP server wiring
"""

import asyncio
import logging
import sys

from erpnext_mcp.adapters.erpnext.client import ERPNextClient
from erpnext_mcp.adapters.mcp.dispatcher import ToolDispatcher
from erpnext_mcp.adapters.mcp.server import build_server, serve_stdio
from erpnext_mcp.config import Settings, load_settings
from erpnext_mcp.core.errors import ConfigurationError


def configure_logging(log_level: str, log_format: str, debug: bool = False) -> None:
    """Configure application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Log format (json, text).
        debug: If True, the ERPNext adapter logs every request at DEBUG.
    """
    level = getattr(logging, log_level, logging.INFO)

    if log_format == "json":
        format_str = '{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s"}'
    else:
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stderr),
        ],
    )

    if debug:
        logging.getLogger("erpnext_mcp.adapters.erpnext").setLevel(logging.DEBUG)


def build_dispatcher(settings: Settings) -> tuple[ERPNextClient, ToolDispatcher]:
    """Instantiate the ERPNext adapter and the tool dispatcher.

    Raises:
        ConfigurationError: If ERPNEXT_URL is not set.
    """
    client = ERPNextClient(settings.connection_config())
    return client, ToolDispatcher(client)


async def bootstrap(settings: Settings | None = None) -> None:
    """Load configuration, wire adapters, and serve MCP over stdio.

    Steps:
    1. Load configuration from environment
    2. Configure logging
    3. Instantiate the ERPNext adapter
    4. Build the MCP server around the dispatcher
    5. Serve until the client disconnects

    Raises:
        ConfigurationError: If required configuration is missing.
    """
    # Step 1: Load configuration
    settings = settings or load_settings()

    # Step 2: Configure logging
    configure_logging(settings.log_level, settings.log_format, settings.erpnext_debug)
    logger = logging.getLogger(__name__)

    # Step 3: Instantiate adapter
    client, dispatcher = build_dispatcher(settings)

    auth_mode = "API token" if client.is_authenticated() else "session login required"
    logger.info(f"Connected to: {client.base_url} ({auth_mode})")
    logger.info(f"Debug mode: {'enabled' if settings.erpnext_debug else 'disabled'}")

    # Step 4: Build server
    server = build_server(dispatcher, name=settings.server_name)

    # Step 5: Serve
    try:
        logger.info(f"{settings.server_name} running on stdio")
        await serve_stdio(server)
    finally:
        await client.close()


def main() -> None:
    """Application entry point.

    Exit codes:
        0: Successful shutdown
        1: Fatal configuration or runtime error
        130: Interrupted by user (SIGINT/KeyboardInterrupt)
    """
    logger = logging.getLogger(__name__)
    try:
        asyncio.run(bootstrap())
    except KeyboardInterrupt:
        logger.warning("Shutdown requested by user (SIGINT)")
        sys.exit(130)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Server error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
