# src/app/schemas/posts.py
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class MockPost(BaseModel):
    id: str
    userId: str
    image: str
    caption: str
    location: Optional[str] = None
    likes: int = 0
    comments: int = 0
    isRecipe: bool = False
    recipeId: Optional[str] = None
    createdAt: str
    tags: list[str] = Field(default_factory=list)
