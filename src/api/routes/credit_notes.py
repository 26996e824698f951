"""Credit Note API Routes

Corrections of issued invoices and their read side.
"""

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.api.schemas.invoice_request import CreateCreditNoteRequestSchema
from src.app.use_cases.invoicing.dtos import (
    CreateCreditNoteCommandDTO,
    CreditNoteListResponseDTO,
    CreditNoteResponseDTO,
)
from src.app.use_cases.invoicing.create_credit_note import (
    CreateCreditNote,
    CreateCreditNoteFromInvoice,
)
from src.app.use_cases.invoicing.get_credit_notes import GetCreditNote, ListInvoiceCreditNotes
from src.adapter.repositories.invoice_repository import SqlAlchemyInvoiceRepository
from src.adapter.repositories.invoice_item_repository import SqlAlchemyInvoiceItemRepository
from src.adapter.repositories.credit_note_repository import (
    SqlAlchemyCreditNoteRepository,
    SqlAlchemyCreditNoteItemRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import (
    build_audit_writer,
    build_numbering_service,
    get_account_id,
    get_session,
    get_user_id,
)
from src.api.error import ClientError

router = APIRouter(prefix="/invoices/{invoice_id}/credit-notes", tags=["Credit Notes"])

PRECONDITION_RESPONSE = {
    "description": "Invoice cannot be credited",
    "content": {
        "application/json": {
            "example": {
                "error": {
                    "code": "INVOICE_NOT_ISSUED",
                    "message": "Can only create credit notes for issued invoices. "
                               "Edit the draft invoice directly instead."
                }
            }
        }
    }
}


def _use_case_args(session: AsyncSession) -> dict:
    return dict(
        uow=SqlAlchemyUnitOfWork(session),
        invoice_repo=SqlAlchemyInvoiceRepository(session),
        invoice_item_repo=SqlAlchemyInvoiceItemRepository(session),
        credit_note_repo=SqlAlchemyCreditNoteRepository(session),
        credit_note_item_repo=SqlAlchemyCreditNoteItemRepository(session),
        numbering_service=build_numbering_service(session),
        audit_writer=build_audit_writer(session),
        credit_note_prefix=ApplicationConfig.CREDIT_NOTE_NUMBER_PREFIX,
        default_vat_rate=Decimal(str(ApplicationConfig.DEFAULT_VAT_RATE)),
    )


@router.post(
    "",
    response_model=CreditNoteResponseDTO,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"description": "Invoice not found"}, 422: PRECONDITION_RESPONSE}
)
async def create_credit_note_from_invoice(
    invoice_id: str,
    account_id: str = Depends(get_account_id),
    user_id: Optional[str] = Depends(get_user_id),
    session: AsyncSession = Depends(get_session),
):
    """
    Fully credit an issued invoice.

    The credited amount is recomputed from the invoice items and every item
    is mirrored onto the credit note.

    **Returns:**
    - 201: Credit note created
    - 404: Invoice not found
    - 409: Credit note number collision persisted after retries
    - 422: Invoice is a draft, paid, cancelled or has no items
    """
    use_case = CreateCreditNoteFromInvoice(**_use_case_args(session))
    result = await use_case.execute(invoice_id, account_id, user_id)

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value


@router.post(
    "/adjustments",
    response_model=CreditNoteResponseDTO,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"description": "Invoice not found"}, 422: PRECONDITION_RESPONSE}
)
async def create_credit_note_adjustment(
    invoice_id: str,
    request: CreateCreditNoteRequestSchema,
    account_id: str = Depends(get_account_id),
    user_id: Optional[str] = Depends(get_user_id),
    session: AsyncSession = Depends(get_session),
):
    """Partially credit an issued invoice with caller-supplied items"""
    command = CreateCreditNoteCommandDTO(
        invoice_id=invoice_id,
        account_id=account_id,
        reason=request.reason,
        items=request.items,
        user_id=user_id,
    )

    use_case = CreateCreditNote(**_use_case_args(session))
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value


@router.get(
    "",
    response_model=CreditNoteListResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={404: {"description": "Invoice not found"}}
)
async def list_invoice_credit_notes(
    invoice_id: str,
    account_id: str = Depends(get_account_id),
    session: AsyncSession = Depends(get_session),
):
    """Credit notes raised against the invoice, oldest first, with the total credited"""
    use_case = ListInvoiceCreditNotes(
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyCreditNoteRepository(session),
        SqlAlchemyCreditNoteItemRepository(session),
    )
    result = await use_case.execute(invoice_id, account_id)

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value


@router.get(
    "/{credit_note_id}",
    response_model=CreditNoteResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={404: {"description": "Invoice or credit note not found"}}
)
async def get_credit_note(
    invoice_id: str,
    credit_note_id: str,
    account_id: str = Depends(get_account_id),
    session: AsyncSession = Depends(get_session),
):
    use_case = GetCreditNote(
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyCreditNoteRepository(session),
        SqlAlchemyCreditNoteItemRepository(session),
    )
    result = await use_case.execute(invoice_id, credit_note_id, account_id)

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value
