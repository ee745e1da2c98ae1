from __future__ import annotations

import argparse
import dataclasses

from .config import Settings
from .logging_config import configure_logging
from .runtime.server import run


def main() -> None:
    settings = Settings.from_env()

    p = argparse.ArgumentParser(prog="lookup-registry", description="lookup-registry: address lookup table registry service")
    p.add_argument("--endpoint", default=settings.endpoint, help="Solana JSON-RPC endpoint")
    p.add_argument("--host", default=settings.host)
    p.add_argument("--port", type=int, default=settings.port)
    p.add_argument("--cache-ttl", type=float, default=settings.cache_ttl_s, help="Registry cache TTL in seconds")
    p.add_argument("--log-level", default=settings.log_level)
    p.add_argument("--log-json", action="store_true", default=settings.log_json)
    args = p.parse_args()

    if not args.cache_ttl > 0:
        p.error("--cache-ttl must be > 0")

    settings = dataclasses.replace(
        settings,
        endpoint=args.endpoint,
        host=args.host,
        port=args.port,
        cache_ttl_s=args.cache_ttl,
        log_level=args.log_level.upper(),
        log_json=args.log_json,
    )
    configure_logging(level=settings.log_level, json_output=settings.log_json)

    srv = run(settings)
    print(srv.url)

    # Block forever (so it behaves like a normal CLI server)
    import time

    while True:
        time.sleep(3600)


if __name__ == "__main__":
    main()
