"""
Background chart prefetcher.

Runs a daemon thread that periodically warms the chart cache for one
scan breadth, so user-facing scans mostly hit the cache.  Progress is
tracked in-memory so a status endpoint can report it.

Schedule:
  - Waits a short grace period after start-up.
  - Refetches every chart in TRENDING_PREFETCH_BREADTH, then sleeps
    TRENDING_PREFETCH_INTERVAL seconds (one cache TTL by default).
"""

import logging
import threading
import time
from datetime import datetime, timezone

from django.conf import settings

logger = logging.getLogger(__name__)

STARTUP_DELAY_SECONDS = 30

# ── In-memory progress state ──────────────────────────────────────────────

_status_lock = threading.Lock()
_prefetch_status = {
    "running": False,
    "breadth": "",
    "total": 0,
    "completed": 0,
    "started_at": None,
    "last_completed_at": None,
    "error": None,
}


def get_status():
    """Return a snapshot of the current prefetch status."""
    with _status_lock:
        return dict(_prefetch_status)


def _update_status(**kwargs):
    with _status_lock:
        _prefetch_status.update(kwargs)


def _now():
    return datetime.now(timezone.utc).isoformat()


# ── Core prefetch logic ───────────────────────────────────────────────────

def run_prefetch(service=None, breadth=None):
    """Warm the cache for every chart in ``breadth``. Returns charts fetched."""
    from .countries import normalize_breadth
    from .services import TrendingService

    service = service if service is not None else TrendingService()
    breadth = normalize_breadth(breadth or settings.TRENDING_PREFETCH_BREADTH)

    _update_status(
        running=True,
        breadth=breadth.value,
        total=0,
        completed=0,
        started_at=_now(),
        error=None,
    )

    def on_progress(completed, total):
        _update_status(completed=completed, total=total)
        if completed % 20 == 0 or completed == total:
            logger.info(f"Prefetch progress: {completed}/{total}")

    try:
        fetched = service.prefetch(breadth, on_progress=on_progress)
    finally:
        _update_status(running=False)

    _update_status(last_completed_at=_now())
    return fetched


# ── Scheduler thread ─────────────────────────────────────────────────────

def _scheduler_loop():
    """Main scheduler loop. Refetches charts once per interval."""
    time.sleep(STARTUP_DELAY_SECONDS)

    while True:
        try:
            run_prefetch()
        except Exception as e:
            logger.error(f"Prefetch scheduler error: {e}")
            _update_status(running=False, error=str(e))

        time.sleep(settings.TRENDING_PREFETCH_INTERVAL)


_scheduler_started = False
_scheduler_lock = threading.Lock()


def start_scheduler():
    """Start the background prefetch thread (idempotent)."""
    global _scheduler_started
    with _scheduler_lock:
        if _scheduler_started:
            return
        _scheduler_started = True

    thread = threading.Thread(target=_scheduler_loop, daemon=True, name="chart-prefetch")
    thread.start()
    logger.info("Chart prefetch scheduler started.")
