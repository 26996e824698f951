"""SQLAlchemy Credit Note Repository Implementations

Credit notes and their items are append-only: these repositories only
insert and read.
"""

from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.credit_note_repository import (
    CreditNoteRepository,
    CreditNoteItemRepository,
)
from src.domain.credit_note import CreditNote
from src.domain.credit_note_item import CreditNoteItem
from src.domain.exceptions import DuplicateDocumentNumberError


class SqlAlchemyCreditNoteRepository(CreditNoteRepository):
    """
    SQLAlchemy implementation of CreditNoteRepository

    Features:
    - Uniqueness of credit_note_number per owner enforced by constraint
    - Insert runs in a savepoint so a collision can be retried with another number
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, credit_note: CreditNote) -> CreditNote:
        """
        Create a new credit note header

        Raises:
            DuplicateDocumentNumberError: If credit_note_number is taken for the owner
        """
        try:
            async with self.session.begin_nested():
                self.session.add(credit_note)
                await self.session.flush()
        except IntegrityError as e:
            raise DuplicateDocumentNumberError(credit_note.credit_note_number) from e

        await self.session.refresh(credit_note)
        return credit_note

    async def get_by_id(self, credit_note_id: str, owner_id: str) -> Optional[CreditNote]:
        stmt = select(CreditNote).where(
            CreditNote.id == credit_note_id, CreditNote.owner_id == owner_id
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_invoice_id(self, invoice_id: str) -> List[CreditNote]:
        stmt = (
            select(CreditNote)
            .where(CreditNote.invoice_id == invoice_id)
            .order_by(CreditNote.created_at, CreditNote.credit_note_number)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


class SqlAlchemyCreditNoteItemRepository(CreditNoteItemRepository):
    """SQLAlchemy implementation of CreditNoteItemRepository"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_many(self, items: List[CreditNoteItem]) -> List[CreditNoteItem]:
        self.session.add_all(items)
        await self.session.flush()
        for item in items:
            await self.session.refresh(item)
        return items

    async def get_by_credit_note_id(self, credit_note_id: str) -> List[CreditNoteItem]:
        stmt = (
            select(CreditNoteItem)
            .where(CreditNoteItem.credit_note_id == credit_note_id)
            .order_by(CreditNoteItem.position, CreditNoteItem.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
