from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Literal, Optional

from pydantic import AnyUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8-sig",
        case_sensitive=False,
        extra="ignore",
    )

    SUPABASE_URL: Optional[AnyUrl] = None
    SUPABASE_KEY: Optional[str] = None
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"
    FRONTEND_CORS_ORIGINS: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://localhost:5000"],
    )

    COLLECTION_PROFILES: str = "profiles"
    COLLECTION_POSTS: str = "posts"
    COLLECTION_RECIPES: str = "recipes"
    COLLECTION_COMMENTS: str = "comments"
    COLLECTION_LIKES: str = "likes"
    COLLECTION_FOLLOWS: str = "follows"

    BUCKET_IMAGES: str = "images"
    FILE_STORE: Literal["supabase", "r2"] = "supabase"
    MAX_IMAGE_SIZE_MB: int = 10

    # Use the increment_counter RPC when the database exposes it
    ATOMIC_COUNTER_RPC: bool = False

    FEED_PAGE_SIZE: int = 10
    EXPLORE_PAGE_SIZE: int = 20
    RECIPES_PAGE_SIZE: int = 10

    def validate_backend(self) -> list[str]:
        errors: list[str] = []

        if not self.SUPABASE_URL:
            errors.append("SUPABASE_URL is required")

        if not self.SUPABASE_KEY:
            errors.append("SUPABASE_KEY is required")

        return errors


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()


@dataclass(frozen=True)
class Collections:
    """Names of the remote collections the services read and write."""
    profiles: str = "profiles"
    posts: str = "posts"
    recipes: str = "recipes"
    comments: str = "comments"
    likes: str = "likes"
    follows: str = "follows"

    @classmethod
    def from_settings(cls, s: Settings) -> "Collections":
        return cls(
            profiles=s.COLLECTION_PROFILES,
            posts=s.COLLECTION_POSTS,
            recipes=s.COLLECTION_RECIPES,
            comments=s.COLLECTION_COMMENTS,
            likes=s.COLLECTION_LIKES,
            follows=s.COLLECTION_FOLLOWS,
        )


def get_collections() -> Collections:
    return Collections.from_settings(get_settings())
