# src/app/schemas/users.py
from __future__ import annotations

from pydantic import BaseModel, Field


class InsertUser(BaseModel):
    username: str = Field(..., min_length=3, max_length=32, pattern=r"^[A-Za-z0-9_]+$")
    password: str = Field(..., min_length=6)


class User(BaseModel):
    """Stored user as returned by the API; the password never leaves the server."""
    id: str
    username: str
