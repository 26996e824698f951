"""SQLAlchemy implementation of DocumentSequenceRepository

Document numbers come from a per-account counter row that is incremented
with a single UPDATE, so concurrent issuers serialize on the row lock instead
of racing on a "max + 1" scan.
"""

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.document_sequence_repository import DocumentSequenceRepository
from src.domain.document_counter import DocumentClass, DocumentCounter


class SqlAlchemyDocumentSequenceRepository(DocumentSequenceRepository):
    """SQLAlchemy implementation of DocumentSequenceRepository"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def next_sequence_number(
        self,
        account_id: str,
        document_class: DocumentClass,
        prefix: str,
        padding: int = 6,
    ) -> str:
        await self._ensure_counter(account_id, document_class, prefix)

        # Step 1: Atomic increment (takes the row lock until commit/rollback)
        await self.session.execute(
            update(DocumentCounter)
            .where(
                DocumentCounter.account_id == account_id,
                DocumentCounter.document_class == document_class,
            )
            .values(last_seq=DocumentCounter.last_seq + 1)
            .execution_options(synchronize_session=False)
        )

        # Step 2: Read back the value this transaction now owns
        result = await self.session.execute(
            select(DocumentCounter.last_seq).where(
                DocumentCounter.account_id == account_id,
                DocumentCounter.document_class == document_class,
            )
        )
        sequence = result.scalar_one()

        return f"{prefix}{sequence:0{padding}d}"

    async def _ensure_counter(
        self, account_id: str, document_class: DocumentClass, prefix: str
    ) -> None:
        """Create the counter row on first use; a concurrent creator wins harmlessly"""
        result = await self.session.execute(
            select(DocumentCounter.id).where(
                DocumentCounter.account_id == account_id,
                DocumentCounter.document_class == document_class,
            )
        )
        if result.scalar_one_or_none() is not None:
            return

        try:
            async with self.session.begin_nested():
                self.session.add(
                    DocumentCounter(
                        account_id=account_id,
                        document_class=document_class,
                        prefix=prefix,
                        last_seq=0,
                    )
                )
                await self.session.flush()
        except IntegrityError:
            # Another transaction created it first; the increment uses that row
            pass
