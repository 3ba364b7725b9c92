# src/app/domain/models.py
"""
Domain models for the social recipe graph.
These are pure data structures with no infrastructure dependencies.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class Difficulty(str, Enum):
    """Recipe difficulty levels."""
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class TargetType(str, Enum):
    """Kinds of documents a like can point at."""
    POST = "post"
    RECIPE = "recipe"
    COMMENT = "comment"


class CounterField(str, Enum):
    """Denormalized counters stored on a profile."""
    FOLLOWERS = "followers_count"
    FOLLOWING = "following_count"
    POSTS = "posts_count"
    RECIPES = "recipes_count"


class LookupStatus(str, Enum):
    FOUND = "FOUND"
    NOT_FOUND = "NOT_FOUND"
    FAILED = "FAILED"


@dataclass
class Profile:
    """Public profile attached 1:1 to an authentication principal."""
    id: str
    user_id: str
    name: str
    handle: str
    avatar: Optional[str] = None
    bio: Optional[str] = None

    # Denormalized counters (eventually consistent)
    followers_count: int = 0
    following_count: int = 0
    posts_count: int = 0
    recipes_count: int = 0

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Post:
    id: str
    user_id: str
    image: str
    caption: str
    location: Optional[str] = None
    is_recipe: bool = False
    recipe_id: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    likes_count: int = 0
    comments_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class RecipeStep:
    """A single ordered instruction of a recipe."""
    order: int
    instruction: str


@dataclass
class Recipe:
    id: str
    author_id: str
    title: str
    description: str
    ingredients: list[str] = field(default_factory=list)
    steps: list[RecipeStep] = field(default_factory=list)
    prep_time: int = 0  # minutes
    cook_time: int = 0  # minutes
    difficulty: Difficulty = Difficulty.EASY
    image: Optional[str] = None
    calories: Optional[int] = None
    servings: Optional[int] = None
    tags: list[str] = field(default_factory=list)
    likes_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def total_time(self) -> int:
        return self.prep_time + self.cook_time


@dataclass
class Comment:
    id: str
    post_id: str
    user_id: str
    content: str
    likes_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Like:
    id: str
    user_id: str
    target_type: TargetType
    target_id: str
    created_at: Optional[datetime] = None


@dataclass
class Follow:
    id: str
    follower_id: str
    following_id: str
    created_at: Optional[datetime] = None


@dataclass
class Principal:
    """Authenticated user as reported by the auth provider."""
    id: str
    email: Optional[str] = None
    name: Optional[str] = None


@dataclass
class ImageValidation:
    """Result of validating an image before upload."""
    valid: bool
    error: Optional[str] = None


@dataclass
class Lookup(Generic[T]):
    """
    Tagged result of a single-document read.
    Separates a legitimately absent document from a failed call.
    """
    status: LookupStatus
    value: Optional[T] = None
    error: Optional[Exception] = None

    @classmethod
    def found(cls, value: T) -> "Lookup[T]":
        return cls(status=LookupStatus.FOUND, value=value)

    @classmethod
    def not_found(cls) -> "Lookup[T]":
        return cls(status=LookupStatus.NOT_FOUND)

    @classmethod
    def failed(cls, error: Exception) -> "Lookup[T]":
        return cls(status=LookupStatus.FAILED, error=error)

    @property
    def is_found(self) -> bool:
        return self.status == LookupStatus.FOUND

    @property
    def is_failed(self) -> bool:
        return self.status == LookupStatus.FAILED
