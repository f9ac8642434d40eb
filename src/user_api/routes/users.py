from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_session
from ..models.user import User
from ..services.users import user_service

router = APIRouter(prefix="/user", tags=["user"])

DUPLICATE_EMAIL = "A user with this email already exists"

# Bounded to the PostgreSQL integer primary key range.
UserId = Annotated[int, Path(ge=1, le=2**31 - 1)]


class CreateUserRequest(BaseModel):
    email: str
    name: str | None = None


class UpdateUserRequest(BaseModel):
    email: str | None = None
    name: str | None = None


def _serialize(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "created_at": user.created_at.isoformat(),
    }


@router.post("", status_code=201)
async def create_user(req: CreateUserRequest, session: AsyncSession = Depends(get_session)):
    try:
        user = await user_service.create(session, req.model_dump())
    except IntegrityError:
        raise HTTPException(status_code=409, detail=DUPLICATE_EMAIL)
    return _serialize(user)


@router.get("")
async def list_users(session: AsyncSession = Depends(get_session)):
    users = await user_service.find_all(session)
    return [_serialize(u) for u in users]


@router.get("/{user_id}")
async def get_user(user_id: UserId, session: AsyncSession = Depends(get_session)):
    user = await user_service.find_one(session, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return _serialize(user)


@router.patch("/{user_id}")
async def update_user(
    user_id: UserId,
    req: UpdateUserRequest,
    session: AsyncSession = Depends(get_session),
):
    """Partial update; fields absent from the body are left untouched."""
    data = req.model_dump(exclude_unset=True)
    if "email" in data and data["email"] is None:
        raise HTTPException(status_code=422, detail="email cannot be null")

    try:
        user = await user_service.update(session, user_id, data)
    except IntegrityError:
        raise HTTPException(status_code=409, detail=DUPLICATE_EMAIL)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return _serialize(user)


@router.delete("/{user_id}")
async def delete_user(user_id: UserId, session: AsyncSession = Depends(get_session)):
    user = await user_service.remove(session, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return _serialize(user)
