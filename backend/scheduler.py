"""
Background scheduler for periodic ledger maintenance
Handles:
- Reconciling stored FP totals with the activity log
"""

import logging
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.orm import Session
from backend.database import SessionLocal
from backend.services.fp_service import FpService
from backend.constants import RECONCILE_ENABLED, RECONCILE_CRON_HOUR

logger = logging.getLogger("frisfocus.scheduler")


def run_reconciliation():
    """Recompute every user's FP total from the ledger and repair drift"""
    db: Session = SessionLocal()
    try:
        repaired = FpService(db).reconcile_all()
        if repaired:
            logger.warning(f"Reconciliation repaired {len(repaired)} user total(s)")
    except Exception as e:
        logger.error(f"Error in run_reconciliation: {e}")
    finally:
        db.close()


# Create scheduler instance
scheduler = BackgroundScheduler()


def start_scheduler():
    """Start the background scheduler"""
    if not RECONCILE_ENABLED:
        logger.info("FP reconciliation disabled; scheduler not started")
        return

    logger.info("Starting FrisFocus background scheduler")

    scheduler.add_job(
        run_reconciliation,
        CronTrigger(hour=RECONCILE_CRON_HOUR, minute=0),
        id='run_reconciliation',
        replace_existing=True
    )

    scheduler.start()
    logger.info(f"Background scheduler started (reconciliation daily at {RECONCILE_CRON_HOUR:02d}:00)")


def stop_scheduler():
    """Stop the background scheduler"""
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Background scheduler stopped")
