"""
learnpath/services/auth_service.py
Registration and login

Both return {user, token}. Registration always creates a STUDENT;
elevated roles are granted by an admin or the CLI.
"""
import logging
from typing import Any, Dict

from sqlalchemy.ext.asyncio import AsyncSession

from learnpath.errors import ErrorCode, UnauthorizedError
from learnpath.orm.user import User, UserRole
from learnpath.rbac import create_access_token, verify_password_async
from learnpath.schemas.user import UserLogin, UserRegister
from learnpath.services import user_service

logger = logging.getLogger(__name__)


def _auth_payload(user: User) -> Dict[str, Any]:
    return {"user": user, "token": create_access_token(user)}


async def register(db: AsyncSession, data: UserRegister) -> Dict[str, Any]:
    logger.info(f"Registration attempt for email: {data.email}")
    user = await user_service.create_user(db, data.email, data.password, data.name, UserRole.STUDENT)
    return _auth_payload(user)


async def login(db: AsyncSession, data: UserLogin) -> Dict[str, Any]:
    user = await user_service.get_user_by_email(db, data.email)

    if user is None or not await verify_password_async(data.password, user.password_hash):
        logger.warning(f"Failed login attempt for email: {data.email}")
        raise UnauthorizedError("Invalid email or password", code=ErrorCode.INVALID_CREDENTIALS)

    logger.info(f"User logged in: id={user.id} role={user.role.value}")
    return _auth_payload(user)
