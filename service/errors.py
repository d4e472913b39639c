from enum import Enum
from typing import Dict, List, Optional


class ErrorKind(Enum):
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    VALIDATION = "validation"
    INFRASTRUCTURE = "infrastructure"


STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.VALIDATION: 400,
    ErrorKind.INFRASTRUCTURE: 500,
}


class GradeRecordError(Exception):
    kind: ErrorKind = ErrorKind.INFRASTRUCTURE

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]


class RecordNotFound(GradeRecordError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, name: str):
        super().__init__("student not found")
        self.name = name


class DuplicateRecord(GradeRecordError):
    kind = ErrorKind.CONFLICT

    def __init__(self, name: str):
        super().__init__("a student with this name already exists")
        self.name = name


class ValidationFailed(GradeRecordError):
    kind = ErrorKind.VALIDATION

    def __init__(self, errors: List[str], message: Optional[str] = None):
        super().__init__(message or "; ".join(errors))
        self.errors = errors


class StorageError(GradeRecordError):
    """Raised when the document store fails; ``detail`` is the driver's text."""

    kind = ErrorKind.INFRASTRUCTURE

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.detail = detail
