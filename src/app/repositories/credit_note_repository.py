"""Credit Note Repository Interface

Defines the contract for credit note persistence operations.
Credit notes are append-only: there is no update or delete.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from src.domain.credit_note import CreditNote
from src.domain.credit_note_item import CreditNoteItem


class CreditNoteRepository(ABC):
    """Repository interface for CreditNote persistence"""

    @abstractmethod
    async def create(self, credit_note: CreditNote) -> CreditNote:
        """
        Create a new credit note header

        Args:
            credit_note: CreditNote entity to persist

        Returns:
            Created CreditNote

        Raises:
            DuplicateDocumentNumberError: If credit_note_number is taken for the owner
        """
        pass

    @abstractmethod
    async def get_by_id(self, credit_note_id: str, owner_id: str) -> Optional[CreditNote]:
        """
        Retrieve credit note by ID, scoped to its owner

        Args:
            credit_note_id: Credit note ID
            owner_id: Account that must own the credit note

        Returns:
            CreditNote if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_by_invoice_id(self, invoice_id: str) -> List[CreditNote]:
        """
        Retrieve all credit notes correcting an invoice

        Args:
            invoice_id: Invoice ID

        Returns:
            List of CreditNote ordered by creation
        """
        pass


class CreditNoteItemRepository(ABC):
    """Repository interface for CreditNoteItem persistence"""

    @abstractmethod
    async def create_many(self, items: List[CreditNoteItem]) -> List[CreditNoteItem]:
        """
        Create credit note items

        Args:
            items: CreditNoteItem entities to persist

        Returns:
            Created items
        """
        pass

    @abstractmethod
    async def get_by_credit_note_id(self, credit_note_id: str) -> List[CreditNoteItem]:
        """
        Retrieve items of a credit note in stored order

        Args:
            credit_note_id: Credit note ID

        Returns:
            List of CreditNoteItem ordered by position
        """
        pass
