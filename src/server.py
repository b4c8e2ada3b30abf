"""Server setup: logging and a configured JSON-RPC handler."""
import logging
from typing import Optional

from .config import ServerConfig
from .jsonrpc.handler import JSONRPCHandler

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level)


def create_server(config: Optional[ServerConfig] = None) -> JSONRPCHandler:
    """Create a JSON-RPC handler from ``config`` (environment when omitted).

    The caller registers its functions, objects, factories and exceptions on
    the returned handler, then feeds raw request text to ``handle``. A None
    result means there is nothing to send back.
    """
    if config is None:
        config = ServerConfig.from_env()
    configure_logging(config.log_level)

    handler = JSONRPCHandler(
        separator=config.namespace_separator,
        registered_error_code=config.registered_error_code,
    )
    logger.info(
        f"JSON-RPC server created (separator={config.namespace_separator!r}, "
        f"registered_error_code={config.registered_error_code})"
    )
    return handler
