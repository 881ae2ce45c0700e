"""
Background scheduler for periodic tasks.

This module manages background jobs that run on a schedule:
- Cleanup orphaned avatars: runs every AVATAR_CLEANUP_INTERVAL_HOURS
"""

import logging
from datetime import datetime, timedelta
from pathlib import Path
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.database import SessionLocal
from app.models.user import User
from app.storage.local_storage import LocalStorage, storage

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler()


def cleanup_orphaned_avatars(
    db: Session,
    avatar_storage: LocalStorage = storage,
    grace: timedelta | None = None
) -> int:
    """
    Delete avatar files that no user references.

    Files are matched by name, since avatar names are unique uuids and the
    stored path depends on how UPLOAD_DIR was spelled when it was saved.
    Files younger than the grace period are kept: a registration may have saved
    its avatar but not committed the user yet. Returns the number of files deleted.
    """
    if grace is None:
        grace = timedelta(minutes=settings.AVATAR_CLEANUP_GRACE_MINUTES)

    referenced = {
        Path(path).name for (path,) in db.query(User.avatar_path).filter(User.avatar_path.isnot(None))
    }
    cutoff = datetime.now() - grace

    deleted = 0
    for path in avatar_storage.list_avatars():
        if path.name in referenced:
            continue
        if datetime.fromtimestamp(path.stat().st_mtime) > cutoff:
            continue
        try:
            avatar_storage.delete_avatar(str(path))
            deleted += 1
            logger.info(f"Deleted orphaned avatar: {path.name}")
        except OSError as e:
            logger.error(f"Error deleting orphaned avatar {path.name}: {str(e)}")

    return deleted


def cleanup_orphaned_avatars_job():
    """Scheduled entry point; owns its own database session"""
    db = SessionLocal()
    try:
        deleted = cleanup_orphaned_avatars(db)
        if deleted > 0:
            logger.info(f"Cleanup job completed: Deleted {deleted} orphaned avatars")
        else:
            logger.info("Cleanup job completed: No orphaned avatars found")
    except Exception:
        logger.exception("Error in cleanup_orphaned_avatars_job")
    finally:
        db.close()


def start_scheduler():
    """
    Start the background scheduler.

    Called from the FastAPI lifespan on startup.
    """
    if not scheduler.running:
        scheduler.add_job(
            cleanup_orphaned_avatars_job,
            trigger=IntervalTrigger(hours=settings.AVATAR_CLEANUP_INTERVAL_HOURS),
            id="cleanup_orphaned_avatars",
            name="Cleanup orphaned avatars",
            replace_existing=True
        )

        scheduler.start()
        logger.info(
            "Background scheduler started. Avatar cleanup scheduled every "
            f"{settings.AVATAR_CLEANUP_INTERVAL_HOURS} hours."
        )


def stop_scheduler():
    """Stop the background scheduler on app shutdown."""
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Background scheduler stopped.")
