# src/app/routers/posts.py
from __future__ import annotations

from fastapi import APIRouter

from src.app.schemas.posts import MockPost

router = APIRouter(prefix="/api/posts", tags=["posts"])

# Static sample so the API answers without a backend
MOCK_POSTS: list[MockPost] = [
    MockPost(
        id="post-health-1",
        userId="user1",
        image="/assets/sample-1.png",
        caption="Welcome to Culina API - mock post",
        location="Internet",
        likes=10,
        comments=2,
        isRecipe=False,
        createdAt="just now",
        tags=["mock", "hello"],
    ),
]


@router.get("", response_model=list[MockPost])
async def list_posts() -> list[MockPost]:
    return MOCK_POSTS
