"""
learnpath/routes/users.py
Account routes

Self-service (any valid token): /users/me, /users/update-me, /users/update-password
Administration (ADMIN): list, create, update, change role, delete
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from learnpath.database import get_db
from learnpath.orm.user import User
from learnpath.rbac import ADMIN_ONLY, AuthUser, get_current_user, require_role
from learnpath.schemas.common import ok
from learnpath.schemas.user import (
    RoleUpdate,
    UpdateMeRequest,
    UpdatePasswordRequest,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from learnpath.services import user_service

router = APIRouter(prefix="/users", tags=["Users"])


def user_data(user: User) -> dict:
    return UserResponse.model_validate(user).model_dump(mode="json")


# ================= SELF-SERVICE =================

@router.get("/me")
async def get_me(
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser = Depends(get_current_user),
):
    user = await user_service.get_user(db, current_user.user_id)
    return ok(user_data(user))


@router.patch("/update-me")
async def update_me(
    data: UpdateMeRequest,
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser = Depends(get_current_user),
):
    user = await user_service.update_me(db, current_user.user_id, data)
    return ok(user_data(user), "Profile updated")


@router.patch("/update-password")
async def update_password(
    data: UpdatePasswordRequest,
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser = Depends(get_current_user),
):
    await user_service.update_password(db, current_user.user_id, data.current_password, data.new_password)
    return ok(message="Password updated")


# ================= ADMIN =================

@router.get("")
async def list_users(
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser = Depends(require_role(ADMIN_ONLY)),
):
    users = await user_service.list_users(db)
    return ok([user_data(u) for u in users])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    data: UserCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser = Depends(require_role(ADMIN_ONLY)),
):
    user = await user_service.admin_create_user(db, data)
    return ok(user_data(user), "User created")


@router.patch("/{user_id}/role")
async def update_role(
    user_id: int,
    data: RoleUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser = Depends(require_role(ADMIN_ONLY)),
):
    user = await user_service.set_role(db, user_id, data.role)
    return ok(user_data(user), "Role updated")


@router.patch("/{user_id}")
async def update_user(
    user_id: int,
    data: UserUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser = Depends(require_role(ADMIN_ONLY)),
):
    user = await user_service.update_user(db, user_id, data)
    return ok(user_data(user), "User updated")


@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser = Depends(require_role(ADMIN_ONLY)),
):
    await user_service.delete_user(db, user_id, acting_user_id=current_user.user_id)
    return ok(message="User deleted")
