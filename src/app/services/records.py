# src/app/services/records.py
"""
Conversions between store documents and domain models.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Iterable, Optional

from src.app.domain.models import (
    Comment,
    Difficulty,
    Follow,
    Like,
    Post,
    Profile,
    Recipe,
    RecipeStep,
    TargetType,
)
from src.app.infra.db.base import Document

logger = logging.getLogger(__name__)


def _parse_datetime(value: str | datetime | None) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        return None

    try:
        normalized = value.replace("Z", "+00:00") if value.endswith("Z") else value
        return datetime.fromisoformat(normalized)
    except ValueError:
        return None


def _parse_difficulty(value: object) -> Difficulty:
    if not value:
        return Difficulty.EASY
    for difficulty in Difficulty:
        if str(value).strip().lower() == difficulty.value.lower():
            return difficulty
    logger.warning("Unknown recipe difficulty %r, using %s", value, Difficulty.EASY.value)
    return Difficulty.EASY


def _safe_int(value: object, default: int = 0) -> int:
    return int(value) if value else default


def _optional_int(value: object) -> Optional[int]:
    return int(value) if value is not None else None


def _safe_str(value: object) -> str | None:
    return str(value) if value else None


def _str_list(value: object) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [str(item) for item in value]


def serialize_steps(steps: Iterable[RecipeStep | dict[str, Any] | str]) -> list[str]:
    """Each step is stored as its own JSON string; strings are assumed already serialized."""
    out: list[str] = []
    for step in steps:
        if isinstance(step, str):
            out.append(step)
        elif isinstance(step, RecipeStep):
            out.append(json.dumps({"order": step.order, "instruction": step.instruction}))
        else:
            out.append(json.dumps({"order": step["order"], "instruction": step["instruction"]}))
    return out


def parse_steps(raw_steps: Iterable[str]) -> list[RecipeStep]:
    steps: list[RecipeStep] = []
    for raw in raw_steps or []:
        try:
            data = json.loads(raw)
            steps.append(RecipeStep(order=int(data["order"]), instruction=str(data["instruction"])))
        except (TypeError, ValueError, KeyError):
            # Plain-text steps from older records
            steps.append(RecipeStep(order=0, instruction=str(raw)))
    return steps


def row_to_profile(row: Document) -> Profile:
    return Profile(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        name=str(row.get("name") or ""),
        handle=str(row.get("handle") or ""),
        avatar=_safe_str(row.get("avatar")),
        bio=_safe_str(row.get("bio")),
        followers_count=_safe_int(row.get("followers_count")),
        following_count=_safe_int(row.get("following_count")),
        posts_count=_safe_int(row.get("posts_count")),
        recipes_count=_safe_int(row.get("recipes_count")),
        created_at=_parse_datetime(row.get("created_at")),
        updated_at=_parse_datetime(row.get("updated_at")),
    )


def row_to_post(row: Document) -> Post:
    return Post(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        image=str(row.get("image") or ""),
        caption=str(row.get("caption") or ""),
        location=_safe_str(row.get("location")),
        is_recipe=bool(row.get("is_recipe", False)),
        recipe_id=_safe_str(row.get("recipe_id")),
        tags=_str_list(row.get("tags")),
        likes_count=_safe_int(row.get("likes_count")),
        comments_count=_safe_int(row.get("comments_count")),
        created_at=_parse_datetime(row.get("created_at")),
        updated_at=_parse_datetime(row.get("updated_at")),
    )


def row_to_recipe(row: Document) -> Recipe:
    return Recipe(
        id=str(row["id"]),
        author_id=str(row["author_id"]),
        title=str(row.get("title") or ""),
        description=str(row.get("description") or ""),
        image=_safe_str(row.get("image")),
        ingredients=_str_list(row.get("ingredients")),
        steps=parse_steps(_str_list(row.get("steps"))),
        prep_time=_safe_int(row.get("prep_time")),
        cook_time=_safe_int(row.get("cook_time")),
        difficulty=_parse_difficulty(row.get("difficulty")),
        calories=_optional_int(row.get("calories")),
        servings=_optional_int(row.get("servings")),
        tags=_str_list(row.get("tags")),
        likes_count=_safe_int(row.get("likes_count")),
        created_at=_parse_datetime(row.get("created_at")),
        updated_at=_parse_datetime(row.get("updated_at")),
    )


def row_to_comment(row: Document) -> Comment:
    return Comment(
        id=str(row["id"]),
        post_id=str(row["post_id"]),
        user_id=str(row["user_id"]),
        content=str(row.get("content") or ""),
        likes_count=_safe_int(row.get("likes_count")),
        created_at=_parse_datetime(row.get("created_at")),
        updated_at=_parse_datetime(row.get("updated_at")),
    )


def row_to_like(row: Document) -> Like:
    return Like(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        target_type=TargetType(row["target_type"]),
        target_id=str(row["target_id"]),
        created_at=_parse_datetime(row.get("created_at")),
    )


def row_to_follow(row: Document) -> Follow:
    return Follow(
        id=str(row["id"]),
        follower_id=str(row["follower_id"]),
        following_id=str(row["following_id"]),
        created_at=_parse_datetime(row.get("created_at")),
    )
