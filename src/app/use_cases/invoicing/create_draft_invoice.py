"""CreateDraftInvoice Use Case

Creates a mutable draft invoice with its items.
"""

from typing import List

from src.libs.result import Result, Return, Error
from src.app.errors import ErrorCode
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_item_repository import InvoiceItemRepository
from src.app.services.invoice_lifecycle import draft_totals
from src.app.services.unit_of_work import UnitOfWork
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.invoice_item import InvoiceItem
from .dtos import CreateDraftInvoiceCommandDTO, InvoiceItemDTO, InvoiceResponseDTO
from .mappers import to_invoice_response


def build_invoice_items(invoice_id: str, items: List[InvoiceItemDTO]) -> List[InvoiceItem]:
    """Turn item inputs into InvoiceItem entities in the given order"""
    return [
        InvoiceItem(
            invoice_id=invoice_id,
            position=position,
            description=item.description,
            quantity=item.quantity,
            unit_price=item.unit_price,
            vat_rate=item.vat_rate,
            unit=item.unit,
        )
        for position, item in enumerate(items)
    ]


class CreateDraftInvoice:
    """
    Use Case: Create a draft invoice

    Business Rules:
    1. Drafts have no invoice number and no hash
    2. Header totals are derived from the items
    3. Invoice and items are written in one transaction

    Flow:
    1. Create invoice with status=draft and totals derived from the items
    2. Create items
    3. Commit transaction
    4. Return response
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        invoice_item_repo: InvoiceItemRepository,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.invoice_item_repo = invoice_item_repo

    async def execute(self, command: CreateDraftInvoiceCommandDTO) -> Result[InvoiceResponseDTO]:
        try:
            # Step 1: Create invoice with status=draft
            invoice = Invoice(
                owner_id=command.account_id,
                customer_id=command.customer_id,
                invoice_date=command.invoice_date,
                due_date=command.due_date,
                vat_rate=command.vat_rate,
                status=InvoiceStatus.DRAFT,
                is_issued=False,
            )
            items = build_invoice_items(invoice.id, command.items)
            invoice.amount, invoice.vat_amount, invoice.total_amount = draft_totals(
                items, command.vat_rate
            )

            created_invoice = await self.invoice_repo.create(invoice)

            # Step 2: Create items
            created_items = await self.invoice_item_repo.create_many(items) if items else []

            # Step 3: Commit transaction
            await self.uow.commit()

            return Return.ok(to_invoice_response(created_invoice, created_items))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code=ErrorCode.CREATE_INVOICE_FAILED,
                    message="Failed to create invoice",
                    reason=str(e),
                )
            )
