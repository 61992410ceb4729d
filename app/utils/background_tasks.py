import schedule
import logging
import threading
from datetime import datetime
from ..database import SessionLocal
from ..services.chore_service import ChoreService
from ..services.notification_service import NotificationService
from .constants import AppConstants
from .realtime import SocketEventPublisher, manager

logger = logging.getLogger(__name__)


class BackgroundTaskScheduler:
    def __init__(self, session_factory=SessionLocal, publisher=None):
        self.session_factory = session_factory
        self.publisher = publisher or SocketEventPublisher(manager)
        self.jobs = schedule.Scheduler()
        self.running = False
        self._stop = threading.Event()
        self.last_check_time = None
        self.last_check_status = "Not started"

    def schedule_jobs(self):
        """Reminder checks every few minutes, recurring chores once a day"""
        self.jobs.clear()
        self.jobs.every(AppConstants.REMINDER_CHECK_INTERVAL_MINUTES).minutes.do(
            self.run_reminder_checks
        )
        self.jobs.every().day.at("00:05").do(self.run_recurring_chores)

        logger.info(
            f"Reminder checks scheduled every {AppConstants.REMINDER_CHECK_INTERVAL_MINUTES} minutes"
        )

    def run_reminder_checks(self):
        """Run all notification checks"""
        self.last_check_time = datetime.utcnow()

        db = self.session_factory()
        try:
            results = NotificationService(db, self.publisher).run_all_reminder_checks(
                self.last_check_time
            )
            self.last_check_status = "Success"
            return results
        except Exception as e:
            logger.error(f"Background reminder check failed: {str(e)}", exc_info=True)
            self.last_check_status = f"Error: {str(e)}"
            return None
        finally:
            db.close()

    def run_recurring_chores(self):
        """Roll recurring chores whose due date has passed"""
        db = self.session_factory()
        try:
            rolled = ChoreService(db, self.publisher).schedule_recurring_chores()
            logger.info(f"Recurring chores rescheduled: {rolled}")
            return rolled
        except Exception as e:
            logger.error(f"Recurring chore job failed: {str(e)}", exc_info=True)
            return None
        finally:
            db.close()

    def start_scheduler(self):
        """Run pending jobs until stopped"""
        self.running = True
        self._stop.clear()
        logger.info("Starting background task scheduler...")

        self.schedule_jobs()

        while not self._stop.is_set():
            try:
                self.jobs.run_pending()
            except Exception as e:
                logger.error(f"Scheduler error: {str(e)}")
            self._stop.wait(60)

        self.running = False

    def stop_scheduler(self):
        self._stop.set()
        logger.info("Background task scheduler stopped")

    def get_status(self):
        """Get current scheduler status"""
        return {
            "running": self.running,
            "scheduled_jobs_count": len(self.jobs.jobs),
            "last_check_time": (
                self.last_check_time.isoformat() if self.last_check_time else None
            ),
            "last_check_status": self.last_check_status,
            "job_details": [
                {
                    "job": str(job.job_func.__name__),
                    "next_run": job.next_run.isoformat() if job.next_run else None,
                    "interval": str(job.interval),
                    "unit": job.unit,
                }
                for job in self.jobs.jobs
            ],
        }


scheduler = BackgroundTaskScheduler()


def start_background_tasks():
    """Start background tasks (call this when starting the app)"""
    scheduler_thread = threading.Thread(target=scheduler.start_scheduler, daemon=True)
    scheduler_thread.start()
    logger.info("Background tasks started in separate thread")


def stop_background_tasks():
    scheduler.stop_scheduler()
