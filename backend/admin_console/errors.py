"""Error taxonomy for role management.

Every class carries the HTTP status and title the app-level error handler
renders into the standard ``{"error": {...}}`` payload, so services can raise
them without importing Flask.
"""
from __future__ import annotations


class RoleError(Exception):
    status_code = 400
    title = 'Bad Request'

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(RoleError):
    status_code = 400
    title = 'Validation Error'


class DeletionForbiddenError(RoleError):
    status_code = 403
    title = 'Forbidden'


class RoleNotFoundError(RoleError):
    status_code = 404
    title = 'Not Found'


class ConflictError(RoleError):
    status_code = 409
    title = 'Conflict'


class RepositoryError(RoleError):
    """Free-form failure reported by a role repository."""
    status_code = 502
    title = 'Repository Error'


class UnknownModuleError(LookupError):
    def __init__(self, key: str):
        super().__init__(f'Unknown module: {key}')
        self.key = key


__all__ = [
    'RoleError',
    'ValidationError',
    'DeletionForbiddenError',
    'RoleNotFoundError',
    'ConflictError',
    'RepositoryError',
    'UnknownModuleError',
]
