from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy import and_
from sqlalchemy.orm import Session
from ..database import get_db, get_supabase
from ..dependencies.permissions import resolve_user_from_token
from ..models.household_membership import HouseholdMember
from ..utils.realtime import manager, household_channel, user_channel
from supabase import Client
import logging

router = APIRouter(tags=["realtime"])
logger = logging.getLogger(__name__)


@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    token: str = Query(...),
    db: Session = Depends(get_db),
    supabase: Client = Depends(get_supabase),
):
    """Join the caller's user room and every household room they belong to"""
    try:
        user = resolve_user_from_token(token, db, supabase)
    except Exception as e:
        logger.warning(f"WebSocket authentication error: {e}")
        user = None

    if not user:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    household_ids = [
        m.household_id
        for m in db.query(HouseholdMember)
        .filter(
            and_(HouseholdMember.user_id == user.id, HouseholdMember.is_accepted == True)
        )
        .all()
    ]
    channels = [user_channel(user.id)] + [household_channel(h) for h in household_ids]

    await manager.connect(websocket, channels)
    try:
        while True:
            # Clients only listen; anything they send is a keep-alive
            await websocket.receive_text()
    except WebSocketDisconnect:
        manager.disconnect(websocket)
        logger.info(f"WebSocket closed for user {user.id}")
