from enum import Enum


class HouseholdRole(str, Enum):
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


class HouseholdMemberStatus(str, Enum):
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class ChoreStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class SubtaskStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class ChorePriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class ChoreAction(str, Enum):
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    COMPLETED = "COMPLETED"
    SWAPPED = "SWAPPED"
    DELETED = "DELETED"


class ChoreSwapRequestStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ExpenseCategory(str, Enum):
    FOOD = "FOOD"
    UTILITIES = "UTILITIES"
    RENT = "RENT"
    TRANSPORTATION = "TRANSPORTATION"
    ENTERTAINMENT = "ENTERTAINMENT"
    HOUSEHOLD = "HOUSEHOLD"
    OTHER = "OTHER"


class ExpenseAction(str, Enum):
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    DELETED = "DELETED"
    SPLIT = "SPLIT"
    RECEIPT_UPLOADED = "RECEIPT_UPLOADED"


class TransactionStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


class EventCategory(str, Enum):
    GENERAL = "GENERAL"
    CHORE = "CHORE"
    MEETING = "MEETING"
    SOCIAL = "SOCIAL"
    OTHER = "OTHER"


class EventStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class EventReminderType(str, Enum):
    PUSH_NOTIFICATION = "PUSH_NOTIFICATION"
    EMAIL = "EMAIL"
    SMS = "SMS"


class CalendarEventAction(str, Enum):
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    STATUS_CHANGED = "STATUS_CHANGED"
    RECURRENCE_CHANGED = "RECURRENCE_CHANGED"
    DELETED = "DELETED"


class RecurrenceFrequency(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    BIWEEKLY = "BIWEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


class ThreadAction(str, Enum):
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    DELETED = "DELETED"
    USERS_INVITED = "USERS_INVITED"


class MessageAction(str, Enum):
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    DELETED = "DELETED"
    READ = "READ"
    ATTACHMENT_ADDED = "ATTACHMENT_ADDED"
    ATTACHMENT_REMOVED = "ATTACHMENT_REMOVED"
    REACTION_ADDED = "REACTION_ADDED"
    REACTION_REMOVED = "REACTION_REMOVED"
    MENTIONED = "MENTIONED"
    MENTION_REMOVED = "MENTION_REMOVED"
    POLL_CREATED = "POLL_CREATED"
    POLL_UPDATED = "POLL_UPDATED"
    POLL_DELETED = "POLL_DELETED"
    POLL_VOTED = "POLL_VOTED"
    POLL_VOTE_REMOVED = "POLL_VOTE_REMOVED"


class ReactionType(str, Enum):
    LIKE = "LIKE"
    LOVE = "LOVE"
    HAHA = "HAHA"
    WOW = "WOW"
    SAD = "SAD"
    ANGRY = "ANGRY"


class PollType(str, Enum):
    SINGLE_CHOICE = "SINGLE_CHOICE"
    MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
    RANKED_CHOICE = "RANKED_CHOICE"
    EVENT_DATE = "EVENT_DATE"


class PollStatus(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    CONVERTED = "CONVERTED"


class NotificationType(str, Enum):
    NEW_MESSAGE = "NEW_MESSAGE"
    CHORE_ASSIGNED = "CHORE_ASSIGNED"
    CHORE_DUE_SOON = "CHORE_DUE_SOON"
    CHORE_COMPLETED = "CHORE_COMPLETED"
    EVENT_REMINDER = "EVENT_REMINDER"
    EXPENSE_UPDATED = "EXPENSE_UPDATED"
    PAYMENT_REMINDER = "PAYMENT_REMINDER"
    OTHER = "OTHER"


class HouseholdAction(str, Enum):
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    DELETED = "DELETED"
    MEMBER_ADDED = "MEMBER_ADDED"
    MEMBER_REMOVED = "MEMBER_REMOVED"
    MEMBER_STATUS_UPDATED = "MEMBER_STATUS_UPDATED"
    MEMBER_ROLE_UPDATED = "MEMBER_ROLE_UPDATED"
    MEMBER_SELECTION_UPDATED = "MEMBER_SELECTION_UPDATED"
    INVITATION_SENT = "INVITATION_SENT"
    INVITATION_ACCEPTED = "INVITATION_ACCEPTED"
    INVITATION_REJECTED = "INVITATION_REJECTED"


class TransactionAction(str, Enum):
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    DELETED = "DELETED"


class NotificationAction(str, Enum):
    CREATED = "CREATED"
    READ = "READ"
    DELETED = "DELETED"
    SETTINGS_UPDATED = "SETTINGS_UPDATED"


class RecurrenceRuleAction(str, Enum):
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    DELETED = "DELETED"


class UserAction(str, Enum):
    UPDATED = "UPDATED"
