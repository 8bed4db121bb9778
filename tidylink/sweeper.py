"""
Retention sweep for Tidylink.

The sweep is a best-effort retention policy, not a consistency mechanism:
a skipped or delayed run only means old links stay resolvable a little
longer. `periodic_sweep` runs it in the background of the web app;
`sweep_links.py` runs it once for cron-style schedulers.
"""

import asyncio
import logging

from .context import AppContext
from .errors import StorageError

logger = logging.getLogger(__name__)


def run_sweep_once(context: AppContext) -> int:
    """
    Sweep links older than the configured retention window.

    Raises:
        StorageError: Propagated to the caller, which owns retry/alerting.
    """
    days = context.settings.RETENTION_DAYS
    removed = context.links.sweep_expired(days)
    logger.info("Old links cleaned up successfully (%d removed, retention %d days)", removed, days)
    return removed


async def periodic_sweep(context: AppContext, interval_seconds: float) -> None:
    """
    Wait `interval_seconds`, sweep, repeat until cancelled.

    The blocking storage call runs in a worker thread so request handling
    is never stalled. Storage failures are logged and retried on the next tick.
    """
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await asyncio.to_thread(run_sweep_once, context)
        except StorageError as exc:
            logger.error("Error cleaning up old links: %s", exc)
