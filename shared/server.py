"""
Listener binding and serving for gateway services.
"""

import socket

import uvicorn

from shared.errors import BindError
from shared.logging import get_logger

logger = get_logger("poolgateway.server")


def bind_socket(host: str, port: int) -> socket.socket:
    """Bind a TCP socket, translating any failure into ``BindError``."""
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except (OSError, OverflowError) as e:
        sock.close()
        raise BindError(host, port, str(e)) from e

    sock.set_inheritable(True)
    return sock


def serve(app, host: str, port: int, log_level: str = "info") -> None:
    """Bind ``host:port`` and serve ``app`` until the process is stopped.

    Binding happens here rather than inside uvicorn so a bad address or a
    busy port surfaces as ``BindError`` to the caller instead of a bare
    process exit.
    """
    sock = bind_socket(host, port)
    server = uvicorn.Server(uvicorn.Config(app, log_level=log_level.lower()))

    logger.info("Gateway listening", host=host, port=port)
    try:
        server.run(sockets=[sock])
    finally:
        sock.close()
