from .attachment_service import AttachmentService
from .chore_service import ChoreService
from .event_service import EventService
from .expense_service import ExpenseService
from .household_service import HouseholdService
from .mention_service import MentionService
from .message_service import MessageService
from .notification_service import NotificationService
from .poll_service import PollService
from .reaction_service import ReactionService
from .recurrence_rule_service import RecurrenceRuleService
from .subtask_service import SubtaskService
from .thread_service import ThreadService
from .transaction_service import TransactionService
from .user_service import UserService

__all__ = [
    "AttachmentService",
    "ChoreService",
    "EventService",
    "ExpenseService",
    "HouseholdService",
    "MentionService",
    "MessageService",
    "NotificationService",
    "PollService",
    "ReactionService",
    "RecurrenceRuleService",
    "SubtaskService",
    "ThreadService",
    "TransactionService",
    "UserService",
]
