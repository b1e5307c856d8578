"""
Background jobs that maintain the asset caches.

- Pin map flush: pins made while serving in live_pinned mode are held in
  memory; they are written to disk every few minutes so a restart does not
  re-pin assets.
- Expired asset purge: live_cache entries are only replaced when requested
  again, so expired images of frames nobody revisits are dropped on a timer.
"""
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from pathlib import Path
from typing import Optional
import logging

from breadcast.config import settings
from breadcast.engine.asset_cache import AssetTTLCache, PinOnceAssetCache

logger = logging.getLogger(__name__)


def flush_pin_map(pin_cache: PinOnceAssetCache, path: Path) -> bool:
    """
    Write the pin map to disk if it changed since the last flush.

    Returns:
        True if the file was written.
    """
    try:
        return pin_cache.save(path)
    except OSError as e:
        logger.error(f"Error saving pin map to {path}: {str(e)}")
        return False


def purge_expired_assets(ttl_cache: AssetTTLCache) -> int:
    """
    Drop expired rendered images from the live cache.

    Returns:
        Number of entries removed.
    """
    removed = ttl_cache.cleanup_expired()
    if removed:
        logger.info(f"Purged {removed} expired assets ({ttl_cache.size} cached)")
    return removed


def setup_scheduler(
    pin_cache: Optional[PinOnceAssetCache] = None,
    pin_map_path: Optional[Path] = None,
    ttl_cache: Optional[AssetTTLCache] = None,
) -> BackgroundScheduler:
    """
    Set up the background scheduler with a job for each cache given.

    Returns:
        Configured scheduler instance
    """
    scheduler = BackgroundScheduler()

    if pin_cache is not None and pin_map_path is not None:
        scheduler.add_job(
            flush_pin_map,
            trigger=IntervalTrigger(minutes=settings.pin_map_save_minutes),
            args=[pin_cache, pin_map_path],
            id='pin_map_flush',
            name='Pin map flush',
            replace_existing=True,
        )
        logger.info(
            f"Scheduled pin map flush every {settings.pin_map_save_minutes} minutes"
        )

    if ttl_cache is not None:
        scheduler.add_job(
            purge_expired_assets,
            trigger=IntervalTrigger(minutes=settings.asset_cleanup_minutes),
            args=[ttl_cache],
            id='expired_asset_purge',
            name='Expired asset purge',
            replace_existing=True,
        )
        logger.info(
            f"Scheduled expired asset purge every {settings.asset_cleanup_minutes} minutes"
        )

    return scheduler


def start_scheduler(
    pin_cache: Optional[PinOnceAssetCache] = None,
    pin_map_path: Optional[Path] = None,
    ttl_cache: Optional[AssetTTLCache] = None,
) -> Optional[BackgroundScheduler]:
    """
    Start the background scheduler.

    Only starts if ENABLE_BACKGROUND_JOBS is True in settings.
    """
    if not settings.enable_background_jobs:
        logger.info("Background jobs are disabled in settings")
        return None

    scheduler = setup_scheduler(pin_cache, pin_map_path, ttl_cache)
    scheduler.start()

    logger.info("Background scheduler started successfully")

    return scheduler


def stop_scheduler(scheduler: Optional[BackgroundScheduler]):
    """
    Stop the background scheduler gracefully.

    Args:
        scheduler: The scheduler instance to stop
    """
    if scheduler:
        scheduler.shutdown(wait=True)
        logger.info("Background scheduler stopped")
