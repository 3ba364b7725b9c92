# src/app/deps.py (singletons exposed as dependencies)

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from supabase import Client, create_client

from src.app.cache.query_client import QueryClient
from src.app.config import Collections, get_collections, settings
from src.app.domain.errors import ConfigurationError
from src.app.infra.auth.base import AuthProvider
from src.app.infra.auth.supabase_auth import SupabaseAuthProvider
from src.app.infra.db.base import DocumentStore, UserRepository
from src.app.infra.db.memory_users_repo import MemoryUserRepository
from src.app.infra.db.supabase_document_store import SupabaseDocumentStore
from src.app.infra.storage.base import FileStore
from src.app.infra.storage.r2_provider import R2FileStore
from src.app.infra.storage.supabase_provider import SupabaseFileStore
from src.app.queries.posts import PostQueries
from src.app.queries.recipes import RecipeQueries
from src.app.queries.social import SocialQueries
from src.app.services.auth_service import AuthService
from src.app.services.comment_service import CommentService
from src.app.services.follow_service import FollowService
from src.app.services.like_service import LikeService
from src.app.services.post_service import PostService
from src.app.services.profile_service import ProfileService
from src.app.services.recipe_service import RecipeService
from src.app.services.storage_service import StorageService
from src.app.session import SessionContext

logger = logging.getLogger(__name__)

_client: Client | None = None


def get_supabase() -> Client:
    global _client
    if _client is None:
        errors = settings.validate_backend()
        if errors:
            raise ConfigurationError(errors)
        _client = create_client(str(settings.SUPABASE_URL), settings.SUPABASE_KEY)
    return _client


def get_document_store() -> DocumentStore:
    return SupabaseDocumentStore(get_supabase(), atomic_counter_rpc=settings.ATOMIC_COUNTER_RPC)


def get_file_store() -> FileStore:
    if settings.FILE_STORE == "r2":
        return R2FileStore()
    return SupabaseFileStore(get_supabase(), settings.BUCKET_IMAGES)


def get_auth_provider() -> AuthProvider:
    return SupabaseAuthProvider(get_supabase())


@lru_cache
def get_user_repository() -> UserRepository:
    return MemoryUserRepository()


@dataclass
class Services:
    profiles: ProfileService
    posts: PostService
    recipes: RecipeService
    comments: CommentService
    likes: LikeService
    follows: FollowService
    storage: StorageService
    auth: AuthService


def build_services(
    store: DocumentStore,
    file_store: FileStore,
    auth_provider: AuthProvider,
    collections: Optional[Collections] = None,
    session: Optional[SessionContext] = None,
) -> Services:
    collections = collections or get_collections()
    profiles = ProfileService(store, collections)
    posts = PostService(store, profiles, collections)
    return Services(
        profiles=profiles,
        posts=posts,
        recipes=RecipeService(store, profiles, collections),
        comments=CommentService(store, posts, collections),
        likes=LikeService(store, collections),
        follows=FollowService(store, profiles, collections),
        storage=StorageService(file_store, max_size_mb=settings.MAX_IMAGE_SIZE_MB),
        auth=AuthService(auth_provider, profiles, session or SessionContext()),
    )


@dataclass
class Queries:
    client: QueryClient
    posts: PostQueries
    recipes: RecipeQueries
    social: SocialQueries


def build_queries(services: Services, client: Optional[QueryClient] = None) -> Queries:
    client = client or QueryClient()
    return Queries(
        client=client,
        posts=PostQueries(client, services.posts),
        recipes=RecipeQueries(client, services.recipes),
        social=SocialQueries(
            client,
            profiles=services.profiles,
            follows=services.follows,
            likes=services.likes,
            comments=services.comments,
        ),
    )


def get_services() -> Services:
    """Services wired against the configured Supabase project."""
    logger.info("Wiring services: file_store=%s", settings.FILE_STORE)
    return build_services(get_document_store(), get_file_store(), get_auth_provider())
