"""WellPlate server entry point — ``python -m wellplate.core.server.main``."""

from __future__ import annotations

import logging
from ipaddress import ip_address

from wellplate.core.config.settings import get_settings
from wellplate.core.server.app import create_app


def _is_loopback_host(host: str) -> bool:
    if host == "localhost":
        return True
    try:
        return ip_address(host).is_loopback
    except ValueError:
        return False


def run() -> None:
    """Start the WellPlate MCP server with Streamable HTTP transport."""
    settings = get_settings()
    logging.basicConfig(level=getattr(logging, settings.wp_log_level.upper(), logging.INFO))

    logger = logging.getLogger(__name__)
    if not settings.wp_allow_insecure_bind and not _is_loopback_host(settings.wp_host):
        raise RuntimeError(
            "Refusing to bind WellPlate server to a non-loopback host without an auth layer. "
            "Set WP_ALLOW_INSECURE_BIND=true to override (unsafe)."
        )
    logger.info("Starting WellPlate Stress server on %s:%d", settings.wp_host, settings.wp_port)

    mcp = create_app()
    mcp.run(
        transport="streamable-http",
        host=settings.wp_host,
        port=settings.wp_port,
    )


if __name__ == "__main__":
    run()
