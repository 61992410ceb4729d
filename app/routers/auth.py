from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session
from ..database import get_db, get_supabase
from ..models.user import User
from ..schemas.user import UserResponse
from ..schemas.auth import RegisterRequest, LoginRequest, TokenResponse
from ..utils.constants import AppConstants
from ..utils.router_helpers import handle_service_errors
from ..dependencies.permissions import get_current_user
from supabase import Client
import logging
import os

router = APIRouter(tags=["authentication"])
logger = logging.getLogger(__name__)

COOKIE_SECURE = os.getenv("COOKIE_SECURE", "false").lower() == "true"


def _set_refresh_cookie(response: Response, refresh_token: str):
    response.set_cookie(
        key=AppConstants.REFRESH_COOKIE_NAME,
        value=refresh_token,
        httponly=True,
        secure=COOKIE_SECURE,
        samesite="strict",
        path=AppConstants.REFRESH_COOKIE_PATH,
        max_age=AppConstants.REFRESH_COOKIE_MAX_AGE,
    )


def _clear_refresh_cookie(response: Response):
    response.delete_cookie(
        key=AppConstants.REFRESH_COOKIE_NAME, path=AppConstants.REFRESH_COOKIE_PATH
    )


@router.post("/register", status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def register_user(
    user_data: RegisterRequest,
    db: Session = Depends(get_db),
    supabase: Client = Depends(get_supabase),
):
    """Register a new user with Supabase Auth"""
    if User.find_by_email(db, user_data.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )

    try:
        auth_response = supabase.auth.sign_up(
            {
                "email": user_data.email,
                "password": user_data.password,
                "options": {"data": {"name": user_data.name}},
            }
        )
    except Exception as e:
        logger.error(f"Registration error: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Registration failed"
        )

    if not auth_response.user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Registration failed"
        )

    user = User(
        email=user_data.email,
        name=user_data.name,
        supabase_id=auth_response.user.id,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(f"Registered user {user.id}")
    return {"data": UserResponse.model_validate(user)}


@router.post("/login")
@handle_service_errors
async def login(
    login_data: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    supabase: Client = Depends(get_supabase),
):
    """Login user with Supabase Auth, the refresh token goes into an httponly cookie"""
    try:
        auth_response = supabase.auth.sign_in_with_password(
            {"email": login_data.email, "password": login_data.password}
        )
    except Exception as e:
        logger.warning(f"Login error: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    if not auth_response.user or not auth_response.session:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    user = User.find_by_supabase_id(db, auth_response.user.id)
    if not user:
        user = User.create_from_supabase(auth_response.user, db)

    _set_refresh_cookie(response, auth_response.session.refresh_token)

    return {
        "data": TokenResponse(
            access_token=auth_response.session.access_token,
            expires_in=auth_response.session.expires_in,
            user=UserResponse.model_validate(user),
        )
    }


@router.post("/refresh-token")
@handle_service_errors
async def refresh_token(
    request: Request,
    response: Response,
    supabase: Client = Depends(get_supabase),
):
    """Rotate both tokens using the refresh cookie"""
    token = request.cookies.get(AppConstants.REFRESH_COOKIE_NAME)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Refresh token missing"
        )

    try:
        refresh_response = supabase.auth.refresh_session(token)
    except Exception as e:
        logger.warning(f"Token refresh error: {e}")
        _clear_refresh_cookie(response)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Token refresh failed"
        )

    if not refresh_response.session:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not refresh token",
        )

    _set_refresh_cookie(response, refresh_response.session.refresh_token)
    return {
        "data": TokenResponse(
            access_token=refresh_response.session.access_token,
            expires_in=refresh_response.session.expires_in,
        )
    }


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(supabase: Client = Depends(get_supabase)):
    """Logout user (invalidate Supabase session and clear the refresh cookie)"""
    try:
        supabase.auth.sign_out()
    except Exception as e:
        # The client drops its access token either way
        logger.warning(f"Logout error: {e}")

    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    _clear_refresh_cookie(response)
    return response


@router.get("/me")
@handle_service_errors
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current user information"""
    return {"data": UserResponse.model_validate(current_user)}
