from __future__ import annotations

import contextlib
import logging
import socket
import threading
import time
from dataclasses import dataclass

import uvicorn

from ..config import Settings
from ..sdk.reader import AccountReader
from .app import create_app

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LookupServer:
    host: str
    port: int
    url: str


def _find_free_port(host: str) -> int:
    with contextlib.closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind((host, 0))
        return int(s.getsockname()[1])


def run(
    settings: Settings | None = None,
    *,
    host: str | None = None,
    port: int | None = None,
    account_reader: AccountReader | None = None,
    log_level: str | None = None,
    access_log: bool = False,
    startup_timeout_s: float = 5.0,
) -> LookupServer:
    """Start the lookup service in a background thread.

    `host` and `port` override the settings; `port=0` picks a free port.
    """
    settings = settings or Settings.from_env()
    host = settings.host if host is None else host
    port = settings.port if port is None else int(port)
    if port == 0:
        port = _find_free_port(host)

    app = create_app(settings, account_reader=account_reader)

    config = uvicorn.Config(
        app,
        host=host,
        port=port,
        log_level=(log_level or settings.log_level).lower(),
        access_log=access_log,
        log_config=None,
    )
    server = uvicorn.Server(config)

    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()

    # Wait for the socket so an immediate request doesn't race with startup.
    deadline = time.monotonic() + startup_timeout_s
    while not server.started and thread.is_alive() and time.monotonic() < deadline:
        time.sleep(0.01)
    if not server.started:
        raise RuntimeError(f"Lookup service failed to start on {host}:{port}")

    url = f"http://{host}:{port}/"
    logger.info("Lookup service listening on %s (endpoint %s)", url, settings.endpoint)
    return LookupServer(host=host, port=port, url=url)
