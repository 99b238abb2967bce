"""Lifecycle helpers wiring background tasks for FastAPI startup."""

from __future__ import annotations

import asyncio
import logging

from .media.asset_cache import AssetCache


logger = logging.getLogger(__name__)


def cache_sweep_once(cache: AssetCache) -> int:
    """Run a single sweep iteration and return the number of purged entries."""
    return cache.sweep()


async def run_periodic_cache_sweep(
    *,
    cache: AssetCache,
    shutdown_event: asyncio.Event,
    interval_seconds: float | None = None,
) -> None:
    """Sweep expired cache entries until ``shutdown_event`` is signalled."""

    interval = max(0.01, float(interval_seconds or cache.check_period_seconds))
    while not shutdown_event.is_set():
        try:
            purged = cache_sweep_once(cache)
        except Exception:  # pragma: no cover
            logger.exception("cache.sweep.failed")
        else:
            if purged:
                logger.info("cache.sweep.purged", extra={"entries": purged})
        try:
            await asyncio.wait_for(shutdown_event.wait(), timeout=interval)
        except asyncio.TimeoutError:
            continue


__all__ = [
    "cache_sweep_once",
    "run_periodic_cache_sweep",
]
