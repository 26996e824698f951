"""SQLAlchemy implementation of AuditLogRepository

Append-only persistence of invoice audit entries.
"""

from typing import List
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.audit_log_repository import AuditLogRepository
from src.domain.audit_log import InvoiceAuditLog


class SqlAlchemyAuditLogRepository(AuditLogRepository):
    """
    SQLAlchemy implementation of AuditLogRepository

    Entries are only ever inserted; the immutability guards reject updates
    and deletes at flush time.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def append(self, entry: InvoiceAuditLog) -> InvoiceAuditLog:
        """
        Append an audit entry

        Args:
            entry: InvoiceAuditLog entity to persist

        Returns:
            Created entry with its generated ID
        """
        self.session.add(entry)
        await self.session.flush()
        await self.session.refresh(entry)
        return entry

    async def get_by_invoice_id(self, invoice_id: str) -> List[InvoiceAuditLog]:
        """
        Retrieve the audit trail of an invoice, oldest first

        Ties on timestamp are broken by the monotonically increasing id.
        """
        stmt = (
            select(InvoiceAuditLog)
            .where(InvoiceAuditLog.invoice_id == invoice_id)
            .order_by(InvoiceAuditLog.timestamp, InvoiceAuditLog.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
