"""
learnpath/routes/auth.py
Authentication routes: register and login, both rate limited

Response data: {"user": {...}, "token": "<jwt>"}
Send the token back as `Authorization: Bearer <jwt>`.
"""
import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from learnpath.database import get_db
from learnpath.rate_limit import AUTH_LIMIT, limiter
from learnpath.schemas.common import ok
from learnpath.schemas.user import UserLogin, UserRegister, UserResponse
from learnpath.services import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _auth_data(result: dict) -> dict:
    return {
        "user": UserResponse.model_validate(result["user"]).model_dump(mode="json"),
        "token": result["token"],
    }


@router.post("/register", status_code=status.HTTP_201_CREATED)
@limiter.limit(AUTH_LIMIT)
async def register(
    request: Request,  # Required by slowapi
    user_data: UserRegister,
    db: AsyncSession = Depends(get_db),
):
    """Create a STUDENT account and return it with an access token."""
    result = await auth_service.register(db, user_data)
    return ok(_auth_data(result), "Registration successful")


@router.post("/login")
@limiter.limit(AUTH_LIMIT)
async def login(
    request: Request,  # Required by slowapi
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db),
):
    result = await auth_service.login(db, credentials)
    return ok(_auth_data(result), "Login successful")
