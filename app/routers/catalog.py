"""
Danh mục sản phẩm và danh sách showroom.

Danh sách công khai (dùng cho form phản hồi) không yêu cầu đăng nhập và được
phép cache lâu hơn; các thao tác quản trị chỉ dành cho admin.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from .. import schemas
from ..core.caching import private_short_cache, public_long_cache
from ..core.exceptions import BadRequestError, ConflictError, NotFoundError
from ..dependencies import AdminUser, DbSession
from ..models import Category, Showroom

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Catalog"])


# --- Danh mục sản phẩm ---

def _list_categories(db) -> dict:
    categories = db.execute(select(Category).order_by(Category.id)).scalars().all()
    return {"categories": [schemas.CategoryOut.model_validate(c) for c in categories]}


@router.get("/categories", response_model=schemas.CategoryList, dependencies=[Depends(public_long_cache)])
def list_categories(_: AdminUser, db: DbSession):
    return _list_categories(db)


@router.get("/categories-public", response_model=schemas.CategoryList, dependencies=[Depends(public_long_cache)])
def list_categories_public(db: DbSession):
    return _list_categories(db)


@router.post("/create-categories", response_model=schemas.CategoryEnvelope, status_code=status.HTTP_201_CREATED)
def create_category(payload: schemas.CategoryIn, _: AdminUser, db: DbSession):
    name = (payload.name or "").strip()
    if not name:
        raise BadRequestError("name is required")
    if db.execute(select(Category).where(Category.name == name)).scalar_one_or_none():
        raise ConflictError("Category already exists")

    category = Category(name=name, description=payload.description or "", status=payload.status or "Active")
    db.add(category)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Category already exists")
    db.refresh(category)
    return {"category": schemas.CategoryOut.model_validate(category)}


@router.put("/categories/{category_id}", response_model=schemas.CategoryEnvelope)
def update_category(category_id: int, payload: schemas.CategoryIn, _: AdminUser, db: DbSession):
    category = db.get(Category, category_id)
    if category is None:
        raise NotFoundError("Not found")
    if payload.name:
        category.name = payload.name.strip()
    if payload.description is not None:
        category.description = payload.description
    if payload.status:
        category.status = payload.status
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Category name already exists")
    db.refresh(category)
    return {"category": schemas.CategoryOut.model_validate(category)}


@router.delete("/categories/{category_id}", response_model=schemas.MessageResponse)
def delete_category(category_id: int, _: AdminUser, db: DbSession):
    category = db.get(Category, category_id)
    if category is None:
        raise NotFoundError("Not found")
    db.delete(category)
    db.commit()
    return {"message": "Deleted"}


# --- Showroom ---

@router.get("/showrooms-public", response_model=schemas.ShowroomList,
            response_model_exclude_none=True, dependencies=[Depends(public_long_cache)])
def list_showrooms_public(db: DbSession):
    showrooms = db.execute(
        select(Showroom).where(Showroom.active.is_(True)).order_by(Showroom.name)
    ).scalars().all()
    return {"showrooms": [{"id": s.id, "name": s.name} for s in showrooms]}


@router.get("/showrooms", response_model=schemas.ShowroomList, dependencies=[Depends(private_short_cache)])
def list_showrooms(_: AdminUser, db: DbSession):
    showrooms = db.execute(select(Showroom).order_by(Showroom.name)).scalars().all()
    return {"showrooms": [schemas.ShowroomOut.model_validate(s) for s in showrooms]}


@router.post("/showrooms", response_model=schemas.ShowroomEnvelope,
             response_model_exclude_none=True, status_code=status.HTTP_201_CREATED)
def create_showroom(payload: schemas.ShowroomIn, _: AdminUser, db: DbSession):
    name = (payload.name or "").strip()
    if not name:
        raise BadRequestError("name is required")
    if db.execute(select(Showroom).where(Showroom.name == name)).scalar_one_or_none():
        raise ConflictError("Showroom already exists")

    showroom = Showroom(name=name, active=payload.active if payload.active is not None else True)
    db.add(showroom)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Showroom already exists")
    db.refresh(showroom)
    logger.info(f"Đã tạo showroom '{showroom.name}'.")
    return {"showroom": {"id": showroom.id, "name": showroom.name, "active": showroom.active}}


@router.put("/showrooms/{showroom_id}", response_model=schemas.ShowroomEnvelope, response_model_exclude_none=True)
def update_showroom(showroom_id: int, payload: schemas.ShowroomIn, _: AdminUser, db: DbSession):
    showroom = db.get(Showroom, showroom_id)
    if showroom is None:
        raise NotFoundError("Not found")
    if payload.name is not None:
        showroom.name = payload.name.strip()
    if payload.active is not None:
        showroom.active = payload.active
    if payload.status is not None:
        showroom.status = payload.status or None
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Showroom already exists")
    db.refresh(showroom)
    return {"showroom": {"id": showroom.id, "name": showroom.name, "active": showroom.active}}


@router.delete("/showrooms/{showroom_id}", response_model=schemas.MessageResponse)
def delete_showroom(showroom_id: int, _: AdminUser, db: DbSession):
    showroom = db.get(Showroom, showroom_id)
    if showroom is None:
        raise NotFoundError("Not found")
    db.delete(showroom)
    db.commit()
    return {"message": "Deleted"}
