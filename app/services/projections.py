"""Named eager-load shapes reused across services.

Each tuple is passed to ``query.options(*SHAPE)`` so the response schema
for that entity can be built without lazy loads.
"""

from sqlalchemy.orm import selectinload

from ..models.household import Household
from ..models.household_membership import HouseholdMember
from ..models.chore import Chore, ChoreAssignment
from ..models.expense import Expense, ExpenseSplit
from ..models.event import Event
from ..models.thread import Thread, Message
from ..models.poll import Poll, PollOption

HOUSEHOLD_WITH_MEMBERS = (
    selectinload(Household.members).selectinload(HouseholdMember.user),
)

MEMBER_WITH_USER = (selectinload(HouseholdMember.user),)

MEMBER_WITH_HOUSEHOLD = (selectinload(HouseholdMember.household),)

CHORE_WITH_ASSIGNEES = (
    selectinload(Chore.assignments).selectinload(ChoreAssignment.user),
    selectinload(Chore.subtasks),
)

EXPENSE_WITH_SPLITS = (
    selectinload(Expense.splits).selectinload(ExpenseSplit.user),
    selectinload(Expense.receipts),
)

EVENT_WITH_DETAILS = (
    selectinload(Event.reminders),
    selectinload(Event.history),
)

POLL_WITH_OPTIONS = (
    selectinload(Poll.options).selectinload(PollOption.votes),
)

MESSAGE_WITH_DETAILS = (
    selectinload(Message.author),
    selectinload(Message.attachments),
    selectinload(Message.reactions),
    selectinload(Message.mentions),
    selectinload(Message.poll).selectinload(Poll.options).selectinload(PollOption.votes),
)

THREAD_WITH_PARTICIPANTS = (
    selectinload(Thread.participants).selectinload(HouseholdMember.user),
)
