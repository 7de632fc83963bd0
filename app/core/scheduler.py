"""
Background jobs - active-session refresh, absence sweep and ledger cleanup
"""
import logging
from typing import Optional
from zoneinfo import ZoneInfo
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from atams.logging import get_logger
from app.core.config import settings
from app.db.session import SessionLocal
from app.services.active_session_service import ActiveSessionService
from app.services.absence_sweep_service import AbsenceSweepService
from app.services.cleanup_service import CleanupService

logger = get_logger(__name__)

logging.getLogger("apscheduler").setLevel(logging.WARNING)
logging.getLogger("apscheduler.executors.default").setLevel(logging.ERROR)

active_session_service = ActiveSessionService()
absence_sweep_service = AbsenceSweepService()
cleanup_service = CleanupService()


def refresh_active_sessions() -> None:
    db = SessionLocal()
    try:
        active_session_service.refresh(db)
    except Exception:
        logger.exception("Scheduled active session refresh failed")
    finally:
        db.close()


def sweep_absences() -> None:
    db = SessionLocal()
    try:
        absence_sweep_service.sweep(db)
    except Exception:
        logger.exception("Scheduled absence sweep failed")
    finally:
        db.close()


def cleanup_scan_ledger() -> None:
    db = SessionLocal()
    try:
        deleted = cleanup_service.cleanup_scan_ledger(db, days_old=settings.SCAN_LEDGER_RETENTION_DAYS)
        logger.info("Removed %d processed-scan ledger entries", deleted)
    except Exception:
        logger.exception("Scheduled ledger cleanup failed")
    finally:
        db.close()


def create_scheduler() -> BackgroundScheduler:
    tz = ZoneInfo(settings.TIMEZONE)
    scheduler = BackgroundScheduler(timezone=tz)
    scheduler.add_job(
        func=refresh_active_sessions,
        trigger="interval",
        minutes=settings.ACTIVE_SESSION_REFRESH_MINUTES,
        id="refresh_active_sessions",
        name="Refresh active sessions",
        replace_existing=True
    )
    scheduler.add_job(
        func=sweep_absences,
        trigger=CronTrigger.from_crontab(settings.ABSENCE_SWEEP_CRON, timezone=tz),
        id="sweep_absences",
        name="Mark absent students",
        replace_existing=True
    )
    scheduler.add_job(
        func=cleanup_scan_ledger,
        trigger=CronTrigger(hour=3, minute=0, timezone=tz),
        id="cleanup_scan_ledger",
        name="Clean up processed-scan ledger",
        replace_existing=True
    )
    return scheduler


_scheduler: Optional[BackgroundScheduler] = None


def start_scheduler() -> BackgroundScheduler:
    global _scheduler
    if _scheduler is None:
        _scheduler = create_scheduler()
        _scheduler.start()
        logger.info("Background scheduler started")
    return _scheduler


def shutdown_scheduler() -> None:
    global _scheduler
    if _scheduler is not None:
        _scheduler.shutdown(wait=False)
        _scheduler = None
