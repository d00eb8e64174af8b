"""
learnpath/services/user_service.py
Account management: admin CRUD and self-service profile updates
"""
import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from learnpath.errors import ConflictError, ConstraintError, ErrorCode, ValidationError
from learnpath.orm.user import User, UserRole
from learnpath.orm.user_progress import UserProgress
from learnpath.rbac import hash_password_async, verify_password_async
from learnpath.schemas.user import UpdateMeRequest, UserCreate, UserUpdate
from learnpath.services.common import commit_or_raise, get_or_404

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "Email already registered"


async def get_user(db: AsyncSession, user_id: int, populate_existing: bool = False) -> User:
    return await get_or_404(
        db, User, user_id, "User", code=ErrorCode.USER_NOT_FOUND, populate_existing=populate_existing
    )


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    return result.scalar_one_or_none()


async def _ensure_email_free(db: AsyncSession, email: str, exclude_user_id: Optional[int] = None) -> None:
    existing = await get_user_by_email(db, email)
    if existing is not None and existing.id != exclude_user_id:
        logger.warning(f"Email already registered: {email}")
        raise ConflictError(DUPLICATE_EMAIL_MESSAGE, code=ErrorCode.DUPLICATE_EMAIL, details={"field": "email"})


async def list_users(db: AsyncSession) -> List[User]:
    result = await db.execute(select(User).order_by(User.created_at.desc(), User.id.desc()))
    return list(result.scalars().all())


async def create_user(
    db: AsyncSession,
    email: str,
    password: str,
    name: str,
    role: UserRole = UserRole.STUDENT,
) -> User:
    """Hashes the password off the event loop; 409 on duplicate email."""
    email = email.lower()
    await _ensure_email_free(db, email)

    user = User(
        email=email,
        name=name,
        password_hash=await hash_password_async(password),
        role=role,
    )
    db.add(user)
    await commit_or_raise(db, conflict_message=DUPLICATE_EMAIL_MESSAGE)
    await db.refresh(user)

    logger.info(f"User created: id={user.id} email={user.email} role={user.role.value}")
    return user


async def admin_create_user(db: AsyncSession, data: UserCreate) -> User:
    return await create_user(db, data.email, data.password, data.name, data.role)


async def update_user(db: AsyncSession, user_id: int, data: UserUpdate) -> User:
    user = await get_user(db, user_id)
    fields = data.model_dump(exclude_unset=True)

    if "email" in fields:
        fields["email"] = fields["email"].lower()
        await _ensure_email_free(db, fields["email"], exclude_user_id=user_id)
    if "password" in fields:
        user.password_hash = await hash_password_async(fields.pop("password"))
        logger.info(f"Password changed by admin for user {user_id}")

    for key, value in fields.items():
        setattr(user, key, value)

    await commit_or_raise(db, conflict_message=DUPLICATE_EMAIL_MESSAGE)
    logger.info(f"User updated: id={user_id}")
    return await get_user(db, user_id, populate_existing=True)


async def set_role(db: AsyncSession, user_id: int, role: UserRole) -> User:
    user = await get_user(db, user_id)
    previous = user.role
    user.role = role
    await commit_or_raise(db)
    logger.info(f"Role changed: user={user_id} {previous.value} -> {role.value}")
    return await get_user(db, user_id, populate_existing=True)


async def delete_user(db: AsyncSession, user_id: int, acting_user_id: int) -> None:
    """Admins cannot delete themselves; users with progress records are kept."""
    if user_id == acting_user_id:
        raise ValidationError("You cannot delete your own account", field="id")

    user = await get_user(db, user_id)

    progress_count = (await db.execute(
        select(func.count(UserProgress.id)).where(UserProgress.user_id == user_id)
    )).scalar() or 0
    if progress_count:
        raise ConstraintError(
            f"User has {progress_count} progress record(s) and cannot be deleted",
            details={"progress_records": progress_count},
        )

    await db.delete(user)
    await commit_or_raise(db, constraint_message="User is still referenced by progress records")
    logger.info(f"User deleted: id={user_id} by admin {acting_user_id}")


# ================= SELF-SERVICE =================

async def update_me(db: AsyncSession, user_id: int, data: UpdateMeRequest) -> User:
    user = await get_user(db, user_id)
    fields = data.model_dump(exclude_unset=True)

    if "email" in fields:
        fields["email"] = fields["email"].lower()
        await _ensure_email_free(db, fields["email"], exclude_user_id=user_id)

    for key, value in fields.items():
        setattr(user, key, value)

    await commit_or_raise(db, conflict_message=DUPLICATE_EMAIL_MESSAGE)
    logger.info(f"Profile updated: user={user_id} fields={sorted(fields)}")
    return await get_user(db, user_id, populate_existing=True)


async def update_password(db: AsyncSession, user_id: int, current_password: str, new_password: str) -> None:
    user = await get_user(db, user_id)

    if not await verify_password_async(current_password, user.password_hash):
        logger.warning(f"Password change rejected for user {user_id}: wrong current password")
        raise ValidationError("Current password is incorrect", field="current_password")

    user.password_hash = await hash_password_async(new_password)
    await commit_or_raise(db)
    logger.info(f"Password changed: user={user_id}")
