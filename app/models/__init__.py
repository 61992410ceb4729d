from .user import User
from .household import Household
from .household_membership import HouseholdMember
from .recurrence_rule import RecurrenceRule
from .chore import Chore, ChoreAssignment, Subtask, ChoreHistory, ChoreSwapRequest
from .expense import Expense, ExpenseSplit, ExpenseHistory, Receipt, Transaction
from .event import Event, EventReminder, CalendarEventHistory
from .thread import (
    Thread,
    thread_participants,
    Message,
    Attachment,
    Reaction,
    Mention,
    MessageRead,
)
from .poll import Poll, PollOption, PollVote
from .notification import Notification, NotificationSettings


__all__ = [
    "User",
    "Household",
    "HouseholdMember",
    "RecurrenceRule",
    "Chore",
    "ChoreAssignment",
    "Subtask",
    "ChoreHistory",
    "ChoreSwapRequest",
    "Expense",
    "ExpenseSplit",
    "ExpenseHistory",
    "Receipt",
    "Transaction",
    "Event",
    "EventReminder",
    "CalendarEventHistory",
    "Thread",
    "thread_participants",
    "Message",
    "Attachment",
    "Reaction",
    "Mention",
    "MessageRead",
    "Poll",
    "PollOption",
    "PollVote",
    "Notification",
    "NotificationSettings",
]
