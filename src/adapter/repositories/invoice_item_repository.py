"""SQLAlchemy InvoiceItem Repository Implementation"""

from typing import List
from sqlalchemy import delete
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.invoice_item_repository import InvoiceItemRepository
from src.domain.invoice_item import InvoiceItem


class SqlAlchemyInvoiceItemRepository(InvoiceItemRepository):
    """SQLAlchemy implementation of InvoiceItemRepository"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_invoice_id(self, invoice_id: str) -> List[InvoiceItem]:
        stmt = (
            select(InvoiceItem)
            .where(InvoiceItem.invoice_id == invoice_id)
            .order_by(InvoiceItem.position, InvoiceItem.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create_many(self, items: List[InvoiceItem]) -> List[InvoiceItem]:
        self.session.add_all(items)
        await self.session.flush()
        for item in items:
            await self.session.refresh(item)
        return items

    async def delete_by_invoice_id(self, invoice_id: str) -> None:
        """
        Remove all items of an invoice

        Goes through the ORM so the issued-invoice guard sees every deleted row.
        """
        for item in await self.get_by_invoice_id(invoice_id):
            await self.session.delete(item)
        await self.session.flush()
