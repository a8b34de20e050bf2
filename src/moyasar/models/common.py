from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

from moyasar.errors import RequestValidationError

T = TypeVar("T")


class Currency(str, Enum):
    SAR = "SAR"
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    AED = "AED"
    QAR = "QAR"
    EGP = "EGP"
    KWD = "KWD"
    JPY = "JPY"


@dataclass(frozen=True)
class PaginationMeta:
    current_page: int
    next_page: int | None
    prev_page: int | None
    total_pages: int
    total_count: int


@dataclass
class ValidationResult(Generic[T]):
    """Outcome of validating a request body. Never raised, inspected."""

    success: bool
    data: T | None = None
    errors: list[str] = field(default_factory=list)

    @classmethod
    def ok(cls, data: T) -> "ValidationResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, errors: list[str]) -> "ValidationResult[T]":
        return cls(success=False, errors=errors)

    def unwrap(self) -> T:
        """Return the validated data or raise RequestValidationError."""
        if not self.success:
            raise RequestValidationError(self.errors)
        return self.data  # type: ignore[return-value]
