"""
Error taxonomy shared by all modules.

Each error is an HTTPException with a fixed status code so services can raise
them directly; the handlers in app.main render them as {"message": detail}.
"""

from fastapi import HTTPException, status
from postgrest.exceptions import APIError

# Postgres SQLSTATE codes surfaced by PostgREST
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
INVALID_TEXT_REPRESENTATION = "22P02"


class ValidationError(HTTPException):
    def __init__(self, detail: str = "Invalid request"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class AuthError(HTTPException):
    def __init__(self, detail: str = "Invalid credentials"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class ForbiddenError(HTTPException):
    def __init__(self, detail: str = "You are not allowed to perform this action"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFoundError(HTTPException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictError(HTTPException):
    def __init__(self, detail: str = "Conflict"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class InternalError(HTTPException):
    def __init__(self, detail: str = "Internal server error"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


def is_unique_violation(exc: APIError) -> bool:
    return exc.code == UNIQUE_VIOLATION


def is_foreign_key_violation(exc: APIError) -> bool:
    return exc.code == FOREIGN_KEY_VIOLATION


def is_invalid_text_representation(exc: APIError) -> bool:
    return exc.code == INVALID_TEXT_REPRESENTATION
