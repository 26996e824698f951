"""Invoice Item Repository Interface

Defines the contract for invoice item persistence operations.
"""

from abc import ABC, abstractmethod
from typing import List
from src.domain.invoice_item import InvoiceItem


class InvoiceItemRepository(ABC):
    """
    Repository interface for InvoiceItem persistence

    Items are returned in stored order (position).
    """

    @abstractmethod
    async def get_by_invoice_id(self, invoice_id: str) -> List[InvoiceItem]:
        """
        Retrieve all items for an invoice in stored order

        Args:
            invoice_id: Invoice ID

        Returns:
            List of InvoiceItem ordered by position
        """
        pass

    @abstractmethod
    async def create_many(self, items: List[InvoiceItem]) -> List[InvoiceItem]:
        """
        Create invoice items

        Args:
            items: InvoiceItem entities to persist

        Returns:
            Created items
        """
        pass

    @abstractmethod
    async def delete_by_invoice_id(self, invoice_id: str) -> None:
        """
        Remove all items of a draft invoice

        Args:
            invoice_id: Invoice ID
        """
        pass
