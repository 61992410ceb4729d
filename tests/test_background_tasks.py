from datetime import datetime, timedelta

import pytest
from sqlalchemy.orm import sessionmaker

from app.models import Chore, Notification
from app.models.enums import ChoreStatus, RecurrenceFrequency
from app.schemas.chore import ChoreCreate
from app.schemas.recurrence_rule import RecurrenceRuleCreate
from app.services.chore_service import ChoreService
from app.services.recurrence_rule_service import RecurrenceRuleService
from app.utils.background_tasks import BackgroundTaskScheduler


@pytest.fixture
def scheduler(engine, publisher):
    return BackgroundTaskScheduler(
        session_factory=sessionmaker(autocommit=False, autoflush=False, bind=engine),
        publisher=publisher,
    )


def test_status_before_start(scheduler):
    status = scheduler.get_status()
    assert status["running"] is False
    assert status["scheduled_jobs_count"] == 0
    assert status["last_check_status"] == "Not started"


def test_schedule_jobs_registers_both_jobs(scheduler):
    scheduler.schedule_jobs()
    scheduler.schedule_jobs()

    status = scheduler.get_status()
    assert status["scheduled_jobs_count"] == 2
    assert {job["job"] for job in status["job_details"]} == {
        "run_reminder_checks",
        "run_recurring_chores",
    }


def test_reminder_check_uses_its_own_session(scheduler, db, household_id, admin, member, publisher):
    ChoreService(db).create_chore(
        household_id,
        ChoreCreate(
            title="Water plants",
            due_date=datetime.utcnow() + timedelta(hours=2),
            assigned_user_ids=[member.id],
        ),
        admin.id,
    )

    results = scheduler.run_reminder_checks()

    assert results == {"event_reminders": 0, "chore_reminders": 1}
    assert scheduler.get_status()["last_check_status"] == "Success"
    assert scheduler.get_status()["last_check_time"] is not None
    assert publisher.names() == ["notification_update"]
    assert db.query(Notification).filter(Notification.user_id == member.id).count() == 2


def test_recurring_chore_job(scheduler, db, household_id, admin, member):
    rule = RecurrenceRuleService(db).create_recurrence_rule(
        RecurrenceRuleCreate(frequency=RecurrenceFrequency.DAILY), admin.id
    )["data"]
    ChoreService(db).create_chore(
        household_id,
        ChoreCreate(
            title="Feed the cat",
            due_date=datetime.utcnow() - timedelta(days=1),
            recurrence_rule_id=rule.id,
            assigned_user_ids=[member.id],
            status=ChoreStatus.COMPLETED,
        ),
        admin.id,
    )

    assert scheduler.run_recurring_chores() == 1
    db.expire_all()
    assert db.query(Chore).filter(Chore.deleted_at.is_(None)).count() == 2
