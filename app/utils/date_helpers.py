from datetime import datetime, timedelta, date
from typing import Tuple, Union
from dateutil.relativedelta import relativedelta
from ..models.enums import RecurrenceFrequency


class DateHelpers:
    @staticmethod
    def get_next_occurrence(
        start_date: datetime,
        frequency: Union[RecurrenceFrequency, str],
        interval: int = 1,
    ) -> datetime:
        """Calculate the next occurrence of a recurring date"""
        frequency = RecurrenceFrequency(frequency)
        interval = max(interval or 1, 1)

        if frequency == RecurrenceFrequency.DAILY:
            return start_date + timedelta(days=interval)
        elif frequency == RecurrenceFrequency.WEEKLY:
            return start_date + timedelta(weeks=interval)
        elif frequency == RecurrenceFrequency.BIWEEKLY:
            return start_date + timedelta(weeks=2 * interval)
        elif frequency == RecurrenceFrequency.MONTHLY:
            return start_date + relativedelta(months=interval)
        elif frequency == RecurrenceFrequency.YEARLY:
            return start_date + relativedelta(years=interval)
        else:
            raise ValueError(f"Unsupported recurrence frequency: {frequency}")

    @staticmethod
    def get_day_boundaries(target_date: date) -> Tuple[datetime, datetime]:
        """Get start and end datetime of a calendar day"""
        start_of_day = datetime(target_date.year, target_date.month, target_date.day)
        return start_of_day, start_of_day + timedelta(days=1)

