from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from ..database import get_db, get_supabase
from ..models.user import User
from ..utils.realtime import EventPublisher, SocketEventPublisher, manager
from supabase import Client
import logging

security = HTTPBearer()
logger = logging.getLogger(__name__)


def resolve_user_from_token(token: str, db: Session, supabase: Client) -> User:
    """Verify a Supabase access token and return the matching local user.

    Users that exist in Supabase but not yet in our database are created on
    first sight. Returns None when the token is not valid.
    """
    auth_response = supabase.auth.get_user(token)
    if not auth_response or not auth_response.user:
        return None

    supabase_user = auth_response.user
    user = User.find_by_supabase_id(db, supabase_user.id)
    if not user:
        user = User.create_from_supabase(supabase_user, db)
    return user


# Auth Helper Functions
async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
    supabase: Client = Depends(get_supabase),
) -> User:
    """Get current authenticated user from Supabase token"""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        user = resolve_user_from_token(credentials.credentials, db, supabase)
    except Exception as e:
        logger.error(f"Authentication error: {e}")
        raise credentials_exception

    if not user:
        raise credentials_exception
    return user


def get_event_publisher() -> EventPublisher:
    """Publisher handed to every service, broadcasting to the WebSocket rooms"""
    return SocketEventPublisher(manager)
