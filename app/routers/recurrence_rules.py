from fastapi import APIRouter, Depends, Response, status
from ..services.recurrence_rule_service import RecurrenceRuleService
from ..schemas.recurrence_rule import RecurrenceRuleCreate, RecurrenceRuleUpdate
from ..dependencies.permissions import get_current_user
from ..dependencies.services import get_recurrence_rule_service
from ..utils.router_helpers import handle_service_errors
from ..models.user import User

router = APIRouter(tags=["recurrence-rules"])


@router.get("/")
@handle_service_errors
async def get_recurrence_rules(
    current_user: User = Depends(get_current_user),
    rule_service: RecurrenceRuleService = Depends(get_recurrence_rule_service),
):
    return rule_service.get_recurrence_rules()


@router.post("/", status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def create_recurrence_rule(
    rule_data: RecurrenceRuleCreate,
    current_user: User = Depends(get_current_user),
    rule_service: RecurrenceRuleService = Depends(get_recurrence_rule_service),
):
    return rule_service.create_recurrence_rule(rule_data, current_user.id)


@router.get("/{rule_id}")
@handle_service_errors
async def get_recurrence_rule(
    rule_id: int,
    current_user: User = Depends(get_current_user),
    rule_service: RecurrenceRuleService = Depends(get_recurrence_rule_service),
):
    return rule_service.get_recurrence_rule(rule_id)


@router.patch("/{rule_id}")
@handle_service_errors
async def update_recurrence_rule(
    rule_id: int,
    rule_update: RecurrenceRuleUpdate,
    current_user: User = Depends(get_current_user),
    rule_service: RecurrenceRuleService = Depends(get_recurrence_rule_service),
):
    return rule_service.update_recurrence_rule(rule_id, rule_update, current_user.id)


@router.delete("/{rule_id}", status_code=status.HTTP_204_NO_CONTENT)
@handle_service_errors
async def delete_recurrence_rule(
    rule_id: int,
    current_user: User = Depends(get_current_user),
    rule_service: RecurrenceRuleService = Depends(get_recurrence_rule_service),
):
    """Chores and events using the rule keep existing without recurrence"""
    rule_service.delete_recurrence_rule(rule_id, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
