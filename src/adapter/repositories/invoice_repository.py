"""SQLAlchemy Invoice Repository Implementation

Implements invoice persistence using SQLAlchemy async session.
"""

from typing import Optional, List, Tuple
from datetime import datetime
from sqlalchemy import and_, or_, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.invoice_repository import InvoiceRepository
from src.domain.exceptions import DuplicateDocumentNumberError
from src.domain.invoice import Invoice, InvoiceStatus


class SqlAlchemyInvoiceRepository(InvoiceRepository):
    """
    SQLAlchemy implementation of InvoiceRepository

    Features:
    - Owner-scoped reads (another account's invoice reads as missing)
    - Row locking for issuance (SELECT FOR UPDATE where supported)
    - Conditional issued flip guarded by is_issued = false
    - Number collisions surfaced as DuplicateDocumentNumberError
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, invoice: Invoice) -> Invoice:
        """
        Create a new invoice

        Args:
            invoice: Invoice entity to persist

        Returns:
            Created Invoice
        """
        self.session.add(invoice)
        await self.session.flush()
        await self.session.refresh(invoice)
        return invoice

    async def get_by_id(
        self, invoice_id: str, owner_id: str, for_update: bool = False
    ) -> Optional[Invoice]:
        """
        Retrieve invoice by ID, scoped to its owner

        Args:
            invoice_id: Invoice ID
            owner_id: Account that must own the invoice
            for_update: If True, locks the row with SELECT FOR UPDATE

        Returns:
            Invoice if found, None otherwise
        """
        stmt = select(Invoice).where(Invoice.id == invoice_id, Invoice.owner_id == owner_id)
        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_issued(
        self, limit: int = 100, after: Optional[Tuple[datetime, str]] = None
    ) -> List[Invoice]:
        """
        Retrieve a page of issued invoices across all accounts

        Args:
            limit: Maximum number of invoices to return
            after: (issued_at, id) of the last invoice already seen

        Returns:
            List of issued invoices ordered by (issued_at, id)
        """
        stmt = select(Invoice).where(Invoice.is_issued == True)  # noqa: E712
        if after is not None:
            last_issued_at, last_id = after
            stmt = stmt.where(
                or_(
                    Invoice.issued_at > last_issued_at,
                    and_(Invoice.issued_at == last_issued_at, Invoice.id > last_id),
                )
            )

        stmt = stmt.order_by(Invoice.issued_at, Invoice.id).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update(self, invoice: Invoice) -> Invoice:
        """
        Update an existing invoice

        Args:
            invoice: Invoice entity with updated values

        Returns:
            Updated Invoice
        """
        invoice.updated_at = datetime.utcnow()
        self.session.add(invoice)
        await self.session.flush()
        await self.session.refresh(invoice)
        return invoice

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

        The update runs in a savepoint so a number collision leaves the outer
        transaction (and the drawn sequence value) usable for a retry.

        Returns:
            True if this call issued the invoice, False if it was already issued

        Raises:
            DuplicateDocumentNumberError: If invoice_number is taken for the owner
        """
        stmt = (
            update(Invoice)
            .where(
                Invoice.id == invoice_id,
                Invoice.owner_id == owner_id,
                Invoice.is_issued == False,  # noqa: E712
            )
            .values(
                invoice_number=invoice_number,
                issued_at=issued_at,
                invoice_hash=invoice_hash,
                is_issued=True,
                status=InvoiceStatus.SENT,
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session=False)
        )

        try:
            async with self.session.begin_nested():
                result = await self.session.execute(stmt)
        except IntegrityError as e:
            raise DuplicateDocumentNumberError(invoice_number) from e

        if result.rowcount != 1:
            return False

        # Reload so the in-session instance reflects the issued row
        await self.session.get(Invoice, invoice_id, populate_existing=True)
        return True
