"""Server bootstrap: environment, logging, dependency graph, stdio transport."""

from __future__ import annotations

import asyncio
import logging
import sys

from .container import ServerContainer, build_container
from .env import load_dotenv_if_present

logger = logging.getLogger(__name__)


class _RequestIdFilter(logging.Filter):
    """Ensure every log record has a request_id attribute."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = "system"
        return True


def _configure_logging(level: str = "INFO") -> None:
    # stdout carries the protocol, so logs go to stderr.
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s [request_id=%(request_id)s] %(name)s: %(message)s",
    )
    root_logger = logging.getLogger()
    request_filter = _RequestIdFilter()
    for handler in root_logger.handlers:
        handler.addFilter(request_filter)


def create_server(container: ServerContainer | None = None):
    """Construct the MCP SDK server bound to the container's dispatcher."""
    from .mcp.transport import create_mcp_server

    container = container or build_container()
    server_settings = container.settings.server
    return create_mcp_server(
        container.registry,
        container.dispatcher,
        name=server_settings.name,
        version=server_settings.version,
    )


def main() -> None:
    load_dotenv_if_present()

    from .mcp.transport import serve_stdio
    from .settings import get_settings

    settings = get_settings()
    _configure_logging(settings.server.log_level)

    container = build_container(settings=settings)
    server = create_server(container)
    logger.info(
        "starting %s %s tools=%s",
        settings.server.name,
        settings.server.version,
        ",".join(container.registry.names()),
    )
    try:
        asyncio.run(serve_stdio(server))
    except KeyboardInterrupt:
        logger.info("server interrupted")


if __name__ == "__main__":
    main()
