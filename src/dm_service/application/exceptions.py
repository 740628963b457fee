from __future__ import annotations


class AppError(Exception):
    """Base application error."""

    code = "internal"

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class InvalidArgumentError(AppError):
    code = "invalid-argument"


class NotFoundError(AppError):
    code = "not-found"


class PermissionDeniedError(AppError):
    code = "permission-denied"
