"""
learnpath/rbac.py
Role-Based Access Control (RBAC)

Authentication is stateless: the bearer token's claims are the identity.
Routes declare their policy with one of:

    Depends(get_current_user)          # any valid token
    Depends(require_role(STAFF_ROLES)) # TEACHER or ADMIN
    Depends(require_role(ADMIN_ONLY))  # ADMIN
"""
import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from learnpath.config import settings
from learnpath.errors import ErrorCode, ForbiddenError, UnauthorizedError
from learnpath.orm.user import User, UserRole

logger = logging.getLogger(__name__)

# ================= CONFIG =================

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/auth/login", auto_error=False)

STAFF_ROLES = [UserRole.TEACHER, UserRole.ADMIN]
ADMIN_ONLY = [UserRole.ADMIN]

# Thread pool for bcrypt, which would otherwise block the event loop
_executor = None


def get_executor():
    global _executor
    if _executor is None:
        _executor = ThreadPoolExecutor(max_workers=4)
    return _executor


# ================= PASSWORDS =================

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError):
        # Unrecognised or corrupt hash
        return False


async def hash_password_async(password: str) -> str:
    """Async-friendly password hashing that doesn't block the event loop."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(get_executor(), hash_password, password)


async def verify_password_async(plain: str, hashed: str) -> bool:
    """Async-friendly password verification that doesn't block the event loop."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(get_executor(), verify_password, plain, hashed)


# ================= TOKEN UTILS =================

@dataclass(frozen=True)
class AuthUser:
    """Identity extracted from a verified access token."""
    user_id: int
    email: str
    role: UserRole


def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token carrying user id, email and role"""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {
        "sub": str(user.id),
        "email": user.email,
        "role": UserRole(user.role).value,
        "type": "access",
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """Decode and validate JWT token, None when invalid or expired"""
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None


def auth_user_from_payload(payload: Optional[dict]) -> Optional[AuthUser]:
    if not payload or payload.get("type") != "access":
        return None
    try:
        return AuthUser(
            user_id=int(payload["sub"]),
            email=payload["email"],
            role=UserRole(payload["role"]),
        )
    except (KeyError, ValueError, TypeError):
        return None


# ================= AUTH DEPENDENCIES =================

async def get_current_user(token: Optional[str] = Depends(oauth2_scheme)) -> AuthUser:
    """
    Resolve the caller from the Authorization bearer token.
    Raises 401 if the token is missing, invalid or expired.
    """
    if not token:
        raise UnauthorizedError("Authentication required", code=ErrorCode.AUTH_REQUIRED)

    user = auth_user_from_payload(decode_token(token))
    if user is None:
        raise UnauthorizedError("Invalid or expired token", code=ErrorCode.AUTH_INVALID)

    return user


def has_role(user: AuthUser, allowed_roles: Iterable[UserRole]) -> bool:
    """Capability check for use inside handlers."""
    return user.role in set(allowed_roles)


def require_role(allowed_roles: List[UserRole]):
    """
    Dependency factory: require one of the given roles.
    Usage: Depends(require_role([UserRole.TEACHER, UserRole.ADMIN]))
    """
    allowed = list(allowed_roles)

    async def dependency(current_user: AuthUser = Depends(get_current_user)) -> AuthUser:
        if not has_role(current_user, allowed):
            logger.warning(
                f"Access denied: User {current_user.user_id} with role {current_user.role.value} "
                f"attempted to access resource requiring {[r.value for r in allowed]}"
            )
            raise ForbiddenError(
                f"This action requires one of: {[r.value for r in allowed]}",
                code=ErrorCode.PERMISSION_DENIED,
                details={"current_role": current_user.role.value},
            )
        return current_user

    return dependency
