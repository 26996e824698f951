"""Document numbering

Hands out per-account invoice and credit note numbers from an atomic
counter, and provides the bounded suffix fallback used when an insert still
hits a uniqueness collision.
"""

import logging
from typing import Iterator

from src.app.repositories.document_sequence_repository import DocumentSequenceRepository
from src.domain.document_counter import DocumentClass

logger = logging.getLogger(__name__)

DEFAULT_PADDING = 6
DEFAULT_MAX_COLLISION_RETRIES = 2


class NumberingService:
    """
    Issues unique, monotonically increasing document numbers per account

    Invoice and credit note numbers are independent sequences. The counter
    increment joins the caller's transaction: committing the document commits
    the number, rolling back gives it back.
    """

    def __init__(
        self,
        sequence_repo: DocumentSequenceRepository,
        padding: int = DEFAULT_PADDING,
        max_collision_retries: int = DEFAULT_MAX_COLLISION_RETRIES,
    ):
        self.sequence_repo = sequence_repo
        self.padding = padding
        self.max_collision_retries = max_collision_retries

    async def next_number(
        self, account_id: str, document_class: DocumentClass, prefix: str
    ) -> str:
        """
        Draw the next number of a sequence

        Args:
            account_id: Account (tenant) identifier
            document_class: invoice or credit_note
            prefix: Number prefix (e.g., "INV-", "CN-")

        Returns:
            Formatted number (e.g., INV-000123)
        """
        number = await self.sequence_repo.next_sequence_number(
            account_id, document_class, prefix, self.padding
        )
        logger.debug(f"Allocated {document_class.value} number {number} for account {account_id}")
        return number

    def collision_candidates(self, number: str) -> Iterator[str]:
        """
        Yield the number, then its -R1 .. -Rn fallbacks

        Every fallback is a temporary mitigation for a collision that the
        atomic counter should have made impossible, so each one is logged.
        """
        yield number
        for attempt in range(1, self.max_collision_retries + 1):
            candidate = f"{number}-R{attempt}"
            logger.warning(
                f"Document number collision on {number}; retrying with {candidate} "
                f"(attempt {attempt}/{self.max_collision_retries})"
            )
            yield candidate
