"""Domain exceptions raised by the persistence adapters

Use cases translate these into Result errors; they never cross the use case
boundary.
"""


class DuplicateDocumentNumberError(Exception):
    """A document number is already taken for the account"""

    def __init__(self, document_number: str):
        self.document_number = document_number
        super().__init__(f"Document number {document_number} is already in use")


class ImmutableRecordError(Exception):
    """A write targeted a fiscally frozen or append-only record"""
