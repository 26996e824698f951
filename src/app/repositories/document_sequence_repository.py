"""Document Sequence Repository Interface

Defines the contract for per-account document number sequences.
"""

from abc import ABC, abstractmethod
from src.domain.document_counter import DocumentClass


class DocumentSequenceRepository(ABC):
    """
    Repository interface for atomic document numbering

    The increment runs inside the caller's transaction, so a rollback of
    that transaction gives the number back instead of leaking it.
    """

    @abstractmethod
    async def next_sequence_number(
        self,
        account_id: str,
        document_class: DocumentClass,
        prefix: str,
        padding: int = 6,
    ) -> str:
        """
        Atomically increment and return the next document number

        Args:
            account_id: Account (tenant) identifier
            document_class: Sequence to draw from (invoice, credit_note)
            prefix: Number prefix (e.g., "INV-")
            padding: Zero-padding width of the sequence part

        Returns:
            Formatted number (e.g., INV-000123)
        """
        pass
