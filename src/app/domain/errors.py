from __future__ import annotations


class CulinaError(Exception):
    pass


class DocumentStoreError(CulinaError):
    def __init__(self, operation: str, reason: str):
        super().__init__(f"Document store error during {operation}: {reason}")
        self.operation = operation
        self.reason = reason


class DocumentNotFoundError(DocumentStoreError):
    def __init__(self, collection: str, document_id: str):
        super().__init__("get", f"{collection}/{document_id} not found")
        self.collection = collection
        self.document_id = document_id


class SelfFollowError(CulinaError):
    def __init__(self, user_id: str):
        super().__init__("Cannot follow yourself")
        self.user_id = user_id


class InvalidImageError(CulinaError):
    def __init__(self, message: str = "Invalid image file"):
        super().__init__(message)


class FileStoreError(CulinaError):
    pass


class AuthError(CulinaError):
    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message)


class DuplicateUserError(CulinaError):
    def __init__(self, username: str):
        super().__init__(f"Username already exists: {username}")
        self.username = username


class ConfigurationError(CulinaError):
    def __init__(self, errors: list[str]):
        super().__init__(f"Configuration errors: {', '.join(errors)}")
        self.errors = errors


class QueryError(CulinaError):
    def __init__(self, key: tuple, reason: str):
        super().__init__(f"Query {key!r} failed: {reason}")
        self.key = key
        self.reason = reason
