"""Quản lý tài khoản người dùng (chỉ dành cho admin)."""

from fastapi import APIRouter, Depends, status

from .. import schemas
from ..core.caching import private_short_cache
from ..dependencies import AdminUser, DbSession
from ..services import accounts

router = APIRouter(prefix="/admins", tags=["Admins"])


@router.get("", response_model=schemas.UserList, dependencies=[Depends(private_short_cache)])
def list_admins(_: AdminUser, db: DbSession):
    return {"users": accounts.list_users(db)}


@router.post("", response_model=schemas.UserEnvelope, status_code=status.HTTP_201_CREATED)
def create_admin(payload: schemas.UserCreate, _: AdminUser, db: DbSession):
    user = accounts.create_user(
        db,
        name=payload.name,
        email=payload.email,
        password=payload.password,
        role=payload.role,
        status=payload.status,
        showroom_name=payload.showroom_name,
    )
    return {"user": user}


@router.put("/{user_id}", response_model=schemas.UserEnvelope)
def update_admin(user_id: int, payload: schemas.UserUpdate, _: AdminUser, db: DbSession):
    user = accounts.update_user(db, user_id, **payload.model_dump(exclude_none=True))
    return {"user": user}


@router.delete("/{user_id}", response_model=schemas.MessageResponse)
def delete_admin(user_id: int, _: AdminUser, db: DbSession):
    accounts.delete_user(db, user_id)
    return {"message": "Deleted"}
