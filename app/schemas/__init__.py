from .common import PaginationInfo, UserSummary
from .user import UserUpdate, UserResponse
from .household import (
    HouseholdCreate,
    HouseholdUpdate,
    HouseholdResponse,
    HouseholdMemberResponse,
)
from .chore import ChoreCreate, ChoreUpdate, ChoreResponse, SubtaskResponse
from .expense import ExpenseCreate, ExpenseUpdate, ExpenseResponse, TransactionResponse
from .event import EventCreate, EventUpdate, EventResponse
from .recurrence_rule import RecurrenceRuleCreate, RecurrenceRuleResponse
from .thread import ThreadCreate, ThreadResponse, ThreadWithMessagesResponse
from .message import MessageCreate, MessageResponse
from .poll import PollCreate, PollResponse, PollAnalytics
from .notification import NotificationCreate, NotificationResponse
