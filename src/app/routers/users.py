# src/app/routers/users.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from src.app.deps import get_user_repository
from src.app.domain.errors import DuplicateUserError
from src.app.infra.db.base import UserRepository
from src.app.schemas.users import InsertUser, User

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/{user_id}", response_model=User)
async def get_user(
    user_id: str,
    users: UserRepository = Depends(get_user_repository),
) -> User:
    record = users.get_user(user_id)
    if not record:
        raise HTTPException(status_code=404, detail="User not found")
    return User(id=record["id"], username=record["username"])


@router.post("", response_model=User, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: InsertUser,
    users: UserRepository = Depends(get_user_repository),
) -> User:
    try:
        record = users.create_user(payload.model_dump())
    except DuplicateUserError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return User(id=record["id"], username=record["username"])
