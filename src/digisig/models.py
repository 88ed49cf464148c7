from enum import Enum
from typing import Optional

from pydantic import BaseModel


class ValidationStatus(str, Enum):
    VALID = "valid"
    INVALID = "invalid"
    ERROR = "error"


class ValidationResult(BaseModel):
    """Outcome of ``validate_signature``.

    ``invalid``: verification ran and the signature (or its freshness) failed.
    ``error``: verification could not run; ``reason`` says why.
    """

    status: ValidationStatus
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is ValidationStatus.VALID

    @classmethod
    def valid(cls) -> "ValidationResult":
        return cls(status=ValidationStatus.VALID)

    @classmethod
    def invalid(cls, reason: Optional[str] = None) -> "ValidationResult":
        return cls(status=ValidationStatus.INVALID, reason=reason)

    @classmethod
    def error(cls, reason: str) -> "ValidationResult":
        return cls(status=ValidationStatus.ERROR, reason=reason)
