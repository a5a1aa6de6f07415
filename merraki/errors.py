"""Application errors carrying a machine code and an HTTP-style status."""

from __future__ import annotations


class AppError(Exception):
    """An error with a stable code, a human message and a status number."""

    def __init__(
        self,
        code: str,
        message: str,
        status: int = 500,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status = status
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}, status={self.status})"


class NotFoundError(AppError):
    """Raised when a requested resource does not exist."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__("NOT_FOUND", message, 404)


def wrap(cause: BaseException, code: str, message: str, status: int) -> AppError:
    """Return an AppError that records ``cause`` as its underlying reason."""
    return AppError(code, message, status, cause)