"""Error codes returned by invoicing use cases"""


class ErrorCode:
    # Benign: not a failure, the requested state already holds
    INVOICE_ALREADY_ISSUED = "INVOICE_ALREADY_ISSUED"

    # Validation / precondition
    INVOICE_NOT_FOUND = "INVOICE_NOT_FOUND"
    CREDIT_NOTE_NOT_FOUND = "CREDIT_NOTE_NOT_FOUND"
    INVOICE_NOT_ISSUED = "INVOICE_NOT_ISSUED"
    INELIGIBLE_INVOICE_STATUS = "INELIGIBLE_INVOICE_STATUS"
    INVOICE_HAS_NO_ITEMS = "INVOICE_HAS_NO_ITEMS"
    INVOICE_NOT_EDITABLE = "INVOICE_NOT_EDITABLE"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"

    # Infrastructure
    DOCUMENT_NUMBER_COLLISION = "DOCUMENT_NUMBER_COLLISION"
    CREATE_INVOICE_FAILED = "CREATE_INVOICE_FAILED"
    UPDATE_INVOICE_FAILED = "UPDATE_INVOICE_FAILED"
    ISSUE_INVOICE_FAILED = "ISSUE_INVOICE_FAILED"
    CHECK_EDITABLE_FAILED = "CHECK_EDITABLE_FAILED"
    VERIFY_INTEGRITY_FAILED = "VERIFY_INTEGRITY_FAILED"
    AUDIT_INTEGRITY_FAILED = "AUDIT_INTEGRITY_FAILED"
    UPDATE_STATUS_FAILED = "UPDATE_STATUS_FAILED"
    CREATE_CREDIT_NOTE_FAILED = "CREATE_CREDIT_NOTE_FAILED"
    GET_AUDIT_TRAIL_FAILED = "GET_AUDIT_TRAIL_FAILED"
    LIST_CREDIT_NOTES_FAILED = "LIST_CREDIT_NOTES_FAILED"
    GET_CREDIT_NOTE_FAILED = "GET_CREDIT_NOTE_FAILED"


BENIGN_ERROR_CODES = frozenset({
    ErrorCode.INVOICE_ALREADY_ISSUED,
})

VALIDATION_ERROR_CODES = frozenset({
    ErrorCode.INVOICE_NOT_FOUND,
    ErrorCode.CREDIT_NOTE_NOT_FOUND,
    ErrorCode.INVOICE_NOT_ISSUED,
    ErrorCode.INELIGIBLE_INVOICE_STATUS,
    ErrorCode.INVOICE_HAS_NO_ITEMS,
    ErrorCode.INVOICE_NOT_EDITABLE,
    ErrorCode.INVALID_STATUS_TRANSITION,
})
