"""Import the airport catalog from the upstream feed and flush the cache.

Runs the same import as ``POST /admin/import-data`` without the HTTP server,
e.g. on first boot or from cron::

    python scripts/import_airports.py [--url URL] [--no-flush]
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

from airport_catalog_api.config import settings

os.environ.setdefault("DATABASE_URL", settings.database_url)

import httpx  # noqa: E402
from fastapi import HTTPException  # noqa: E402

from airport_catalog_api.cache.redis_client import (  # noqa: E402
    CACHE_ERRORS,
    cache_invalidate_all,
    close_redis,
    init_redis,
)
from airport_catalog_api.services.import_service import ImportService  # noqa: E402
from airport_catalog_db.database import (  # noqa: E402
    async_session_factory,
    dispose_engine,
    init_models,
)


async def main(url: str | None, flush: bool) -> int:
    await init_models()
    print(f"Importing airports from {url or settings.airports_data_url} ...")

    try:
        async with (
            httpx.AsyncClient(
                timeout=httpx.Timeout(settings.import_timeout), follow_redirects=True
            ) as client,
            async_session_factory() as session,
        ):
            count = await ImportService(session, client).import_catalog(url)
    except HTTPException as exc:
        print(f"Import failed: {exc.detail}", file=sys.stderr)
        return 1
    finally:
        await dispose_engine()

    print(f"  Imported {count} airports.")

    if flush:
        await init_redis(settings.redis_url, settings.redis_socket_timeout)
        try:
            removed = await cache_invalidate_all(raise_errors=True)
        except CACHE_ERRORS as exc:
            print(f"Cache flush failed: {exc}", file=sys.stderr)
            return 1
        finally:
            await close_redis()
        print(f"  Cleared {removed} cache keys.")

    print("Done!")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--url", help="override the configured feed URL")
    parser.add_argument(
        "--no-flush", action="store_true", help="leave the response cache alone"
    )
    args = parser.parse_args()
    sys.exit(asyncio.run(main(args.url, flush=not args.no_flush)))
