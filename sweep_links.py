# sweep_links.py
"""
One-shot retention sweep for external schedulers (cron, k8s CronJob).

    python sweep_links.py --days 30
    python sweep_links.py --backend postgres --dsn postgresql://... --days 7

Exit code 1 when storage fails, so the scheduler can alert/retry.
"""

import argparse
import logging
import sys
import time
from datetime import datetime, timezone

from tidylink.config import load_settings
from tidylink.context import build_context
from tidylink.errors import StorageError
from tidylink.logging_config import setup_logging
from tidylink.storage.storage_factory import get_storage

log = logging.getLogger("tidylink.sweep")


def now_iso():
    return datetime.now(timezone.utc).isoformat()


def parse_args(argv=None):
    cfg = load_settings()
    ap = argparse.ArgumentParser(description="Delete short links older than the retention window.")
    ap.add_argument("--days", type=int, default=cfg.RETENTION_DAYS, help="retention window in days")
    ap.add_argument("--backend", default=cfg.STORAGE_BACKEND, choices=["sqlite", "postgres"])
    ap.add_argument("--db-path", default=cfg.DB_PATH, help="sqlite file")
    ap.add_argument("--dsn", default=cfg.DB_DSN, help="postgres DSN")
    ap.add_argument("--log-level", default=cfg.LOG_LEVEL)
    args = ap.parse_args(argv)
    if args.days < 0:
        ap.error("--days must be non-negative")
    return cfg, args


def main(argv=None) -> int:
    cfg, args = parse_args(argv)
    setup_logging(args.log_level, cfg.LOG_PATH or None)

    t0 = time.perf_counter()
    try:
        storage = get_storage(args.backend, path=args.db_path, dsn=args.dsn)
        context = build_context(cfg, storage=storage)
        removed = context.links.sweep_expired(args.days)
    except (StorageError, ValueError) as exc:
        log.error("Error cleaning up old links: %s", exc)
        return 1

    dt = time.perf_counter() - t0
    print(f"END:     {now_iso()}")
    print(f"TOTAL:   {dt:.3f} s")
    print(f"REMOVED: {removed} links older than {args.days} days")
    return 0


if __name__ == "__main__":
    sys.exit(main())
