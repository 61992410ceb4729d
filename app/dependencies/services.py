from typing import Callable, Type
from fastapi import Depends
from sqlalchemy.orm import Session
from ..database import get_db
from ..services.base import BaseService
from ..services.household_service import HouseholdService
from ..services.user_service import UserService
from ..services.chore_service import ChoreService
from ..services.subtask_service import SubtaskService
from ..services.expense_service import ExpenseService
from ..services.transaction_service import TransactionService
from ..services.event_service import EventService
from ..services.recurrence_rule_service import RecurrenceRuleService
from ..services.thread_service import ThreadService
from ..services.message_service import MessageService
from ..services.attachment_service import AttachmentService
from ..services.reaction_service import ReactionService
from ..services.mention_service import MentionService
from ..services.poll_service import PollService
from ..services.notification_service import NotificationService
from ..utils.realtime import EventPublisher
from .permissions import get_event_publisher


def service_provider(service_class: Type[BaseService]) -> Callable[..., BaseService]:
    """Build a dependency that hands a request-scoped service to a route"""

    def provider(
        db: Session = Depends(get_db),
        publisher: EventPublisher = Depends(get_event_publisher),
    ) -> BaseService:
        return service_class(db, publisher)

    provider.__name__ = f"get_{service_class.__name__}"
    return provider


get_household_service = service_provider(HouseholdService)
get_user_service = service_provider(UserService)
get_chore_service = service_provider(ChoreService)
get_subtask_service = service_provider(SubtaskService)
get_expense_service = service_provider(ExpenseService)
get_transaction_service = service_provider(TransactionService)
get_event_service = service_provider(EventService)
get_recurrence_rule_service = service_provider(RecurrenceRuleService)
get_thread_service = service_provider(ThreadService)
get_message_service = service_provider(MessageService)
get_attachment_service = service_provider(AttachmentService)
get_reaction_service = service_provider(ReactionService)
get_mention_service = service_provider(MentionService)
get_poll_service = service_provider(PollService)
get_notification_service = service_provider(NotificationService)
