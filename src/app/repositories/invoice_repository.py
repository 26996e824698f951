"""Invoice Repository Interface

Defines the contract for invoice persistence operations.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, List, Tuple
from src.domain.invoice import Invoice


class InvoiceRepository(ABC):
    """
    Repository interface for Invoice persistence

    Every read is scoped to the owning account; an invoice owned by another
    account is indistinguishable from a missing one.
    """

    @abstractmethod
    async def create(self, invoice: Invoice) -> Invoice:
        """
        Create a new invoice

        Args:
            invoice: Invoice entity to persist

        Returns:
            Created Invoice
        """
        pass

    @abstractmethod
    async def get_by_id(
        self, invoice_id: str, owner_id: str, for_update: bool = False
    ) -> Optional[Invoice]:
        """
        Retrieve invoice by ID, scoped to its owner

        Args:
            invoice_id: Invoice ID
            owner_id: Account that must own the invoice
            for_update: If True, lock the row with SELECT FOR UPDATE

        Returns:
            Invoice if found and owned by owner_id, None otherwise
        """
        pass

    @abstractmethod
    async def get_issued(
        self, limit: int = 100, after: Optional[Tuple[datetime, str]] = None
    ) -> List[Invoice]:
        """
        Retrieve issued invoices across all accounts

        Used by the integrity audit job. Pages by keyset so invoices issued
        while the audit runs neither shift nor repeat earlier pages.

        Args:
            limit: Maximum number of invoices to return
            after: (issued_at, id) of the last invoice of the previous page

        Returns:
            List of issued invoices ordered by (issued_at, id)
        """
        pass

    @abstractmethod
    async def update(self, invoice: Invoice) -> Invoice:
        """
        Update an existing invoice

        Args:
            invoice: Invoice entity with updated values

        Returns:
            Updated Invoice
        """
        pass

    @abstractmethod
    async def mark_issued(
        self,
        invoice_id: str,
        owner_id: str,
        invoice_number: str,
        issued_at: datetime,
        invoice_hash: str,
    ) -> bool:
        """
        Atomically flip an invoice to issued

        Sets is_issued, issued_at, invoice_hash, invoice_number and
        status=sent in one conditional update that only matches while
        is_issued is still false.

        Args:
            invoice_id: Invoice ID
            owner_id: Account that owns the invoice
            invoice_number: Final invoice number
            issued_at: Issuance timestamp (also part of the hash)
            invoice_hash: Fiscal hash of the frozen content

        Returns:
            True if this call issued the invoice, False if it was already issued

        Raises:
            DuplicateDocumentNumberError: If invoice_number is taken for the owner
        """
        pass
