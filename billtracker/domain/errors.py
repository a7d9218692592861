from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(slots=True, eq=False)
class DomainError(Exception):
    code: str
    message: str
    details: Any = None
    status_code: int = 400

    def __str__(self) -> str:
        return self.message


class UnauthorizedError(DomainError):
    def __init__(self, message: str = "unauthorized", *, details: Any = None) -> None:
        super().__init__(
            code="unauthorized",
            message=message,
            details=details,
            status_code=401,
        )


class NotFoundError(DomainError):
    def __init__(self, message: str, *, details: Any = None) -> None:
        super().__init__(
            code="not_found",
            message=message,
            details=details,
            status_code=404,
        )


class ValidationError(DomainError):
    def __init__(self, message: str, *, details: Any = None) -> None:
        super().__init__(
            code="validation_error",
            message=message,
            details=details,
            status_code=400,
        )


class StoreError(DomainError):
    """The underlying persistence layer rejected or failed an operation."""

    def __init__(self, message: str, *, method: str, reason: str = "") -> None:
        super().__init__(
            code="store_error",
            message=message,
            details={"method": method, "reason": reason},
            status_code=500,
        )


class UnsupportedOperationError(DomainError):
    def __init__(self, message: str = "method not supported", *, details: Any = None) -> None:
        super().__init__(
            code="method_not_allowed",
            message=message,
            details=details,
            status_code=405,
        )
