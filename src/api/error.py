"""API error type

Use case errors are raised as ClientError and rendered as
{"error": {"code", "message"}} by the handler registered in create_app.
"""

from fastapi import status

from src.libs.result import Error
from src.app.errors import ErrorCode

NOT_FOUND_CODES = frozenset({ErrorCode.INVOICE_NOT_FOUND, ErrorCode.CREDIT_NOTE_NOT_FOUND})

CONFLICT_CODES = frozenset({
    ErrorCode.INVOICE_NOT_EDITABLE,
    ErrorCode.DOCUMENT_NUMBER_COLLISION,
})

UNPROCESSABLE_CODES = frozenset({
    ErrorCode.INVOICE_NOT_ISSUED,
    ErrorCode.INELIGIBLE_INVOICE_STATUS,
    ErrorCode.INVOICE_HAS_NO_ITEMS,
    ErrorCode.INVALID_STATUS_TRANSITION,
})


def status_code_for(error: Error) -> int:
    """HTTP status for a use case error code"""
    if error.code in NOT_FOUND_CODES:
        return status.HTTP_404_NOT_FOUND
    if error.code in CONFLICT_CODES:
        return status.HTTP_409_CONFLICT
    if error.code in UNPROCESSABLE_CODES:
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    return status.HTTP_400_BAD_REQUEST


class ClientError(Exception):
    def __init__(self, error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.error = error
        self.status_code = status_code
        super().__init__(error.message)

    @classmethod
    def from_error(cls, error: Error) -> "ClientError":
        return cls(error, status_code=status_code_for(error))

    def to_dict(self) -> dict:
        return {"error": {"code": self.error.code, "message": self.error.message}}
