"""Invoice Audit Log Repository Interface

Defines the contract for audit trail persistence.
The audit log is append-only: there is no update or delete.
"""

from abc import ABC, abstractmethod
from typing import List
from src.domain.audit_log import InvoiceAuditLog


class AuditLogRepository(ABC):
    """Repository interface for InvoiceAuditLog persistence"""

    @abstractmethod
    async def append(self, entry: InvoiceAuditLog) -> InvoiceAuditLog:
        """
        Append an audit entry

        Args:
            entry: InvoiceAuditLog entity to persist

        Returns:
            Persisted entry with generated ID
        """
        pass

    @abstractmethod
    async def get_by_invoice_id(self, invoice_id: str) -> List[InvoiceAuditLog]:
        """
        Retrieve the audit trail of an invoice

        Args:
            invoice_id: Invoice ID

        Returns:
            Entries in append order (timestamp, then id)
        """
        pass
