"""Invoice API Routes

FastAPI routes for the invoice lifecycle: drafts, issuance, edit lock,
integrity verification, status changes and audit trail.
"""

from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.api.schemas.invoice_request import (
    CreateInvoiceRequestSchema,
    UpdateInvoiceRequestSchema,
    UpdateStatusRequestSchema,
)
from src.app.errors import ErrorCode
from src.app.use_cases.invoicing.dtos import (
    AuditTrailResponseDTO,
    CreateDraftInvoiceCommandDTO,
    EditCheckResponseDTO,
    IntegrityCheckResponseDTO,
    InvoiceResponseDTO,
    IssueInvoiceResponseDTO,
    UpdateDraftInvoiceCommandDTO,
    UpdateInvoiceStatusResponseDTO,
)
from src.app.use_cases.invoicing.create_draft_invoice import CreateDraftInvoice
from src.app.use_cases.invoicing.update_draft_invoice import UpdateDraftInvoice
from src.app.use_cases.invoicing.issue_invoice import IssueInvoice
from src.app.use_cases.invoicing.can_edit_invoice import CanEditInvoice
from src.app.use_cases.invoicing.verify_invoice_integrity import VerifyInvoiceIntegrity
from src.app.use_cases.invoicing.get_audit_trail import GetInvoiceAuditTrail
from src.app.use_cases.invoicing.update_invoice_status import UpdateInvoiceStatus
from src.adapter.repositories.invoice_repository import SqlAlchemyInvoiceRepository
from src.adapter.repositories.invoice_item_repository import SqlAlchemyInvoiceItemRepository
from src.adapter.repositories.audit_log_repository import SqlAlchemyAuditLogRepository
from src.adapter.services.compliance_alert_service import create_compliance_alert_service
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import (
    build_audit_writer,
    build_numbering_service,
    get_account_id,
    get_session,
    get_user_id,
)
from src.api.error import ClientError

router = APIRouter(prefix="/invoices", tags=["Invoices"])

NOT_FOUND_RESPONSE = {
    "description": "Invoice not found",
    "content": {
        "application/json": {
            "example": {
                "error": {
                    "code": "INVOICE_NOT_FOUND",
                    "message": "Invoice 5b0c7f0e-1b7e-4c5d-9d0a-1a2b3c4d5e6f not found"
                }
            }
        }
    }
}


@router.post(
    "",
    response_model=InvoiceResponseDTO,
    status_code=status.HTTP_201_CREATED,
)
async def create_invoice(
    request: CreateInvoiceRequestSchema,
    account_id: str = Depends(get_account_id),
    user_id: Optional[str] = Depends(get_user_id),
    session: AsyncSession = Depends(get_session),
):
    """
    Create a draft invoice.

    Drafts have no invoice number and no hash. Totals are derived from the items.

    **Returns:**
    - 201: Draft created
    - 400: Invalid request parameters
    """
    uow = SqlAlchemyUnitOfWork(session)
    invoice_repo = SqlAlchemyInvoiceRepository(session)
    invoice_item_repo = SqlAlchemyInvoiceItemRepository(session)

    command = CreateDraftInvoiceCommandDTO(
        account_id=account_id,
        customer_id=request.customer_id,
        invoice_date=request.invoice_date,
        due_date=request.due_date,
        vat_rate=request.vat_rate,
        items=request.items,
        user_id=user_id,
    )

    use_case = CreateDraftInvoice(uow, invoice_repo, invoice_item_repo)
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value


@router.patch(
    "/{invoice_id}",
    response_model=InvoiceResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={
        404: NOT_FOUND_RESPONSE,
        409: {
            "description": "Invoice is issued and can no longer be edited",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "INVOICE_NOT_EDITABLE",
                            "message": "Invoice INV-000001 has been issued and cannot be edited. "
                                       "To make corrections, please create a credit note."
                        }
                    }
                }
            }
        }
    }
)
async def update_invoice(
    invoice_id: str,
    request: UpdateInvoiceRequestSchema,
    account_id: str = Depends(get_account_id),
    user_id: Optional[str] = Depends(get_user_id),
    session: AsyncSession = Depends(get_session),
):
    """
    Edit a draft invoice. Issued invoices are refused with 409.
    """
    uow = SqlAlchemyUnitOfWork(session)
    use_case = UpdateDraftInvoice(
        uow,
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoiceItemRepository(session),
        build_audit_writer(session),
    )

    command = UpdateDraftInvoiceCommandDTO(**request.model_dump(exclude_unset=True))
    result = await use_case.execute(invoice_id, account_id, command, user_id)

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value


@router.post(
    "/{invoice_id}/issue",
    response_model=IssueInvoiceResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={
        404: NOT_FOUND_RESPONSE,
        409: {"description": "Invoice number collision persisted after retries"},
    }
)
async def issue_invoice(
    invoice_id: str,
    account_id: str = Depends(get_account_id),
    user_id: Optional[str] = Depends(get_user_id),
    session: AsyncSession = Depends(get_session),
):
    """
    Fiscally issue an invoice (Malta VAT).

    Assigns the next invoice number (if the draft has none), computes the
    SHA-256 hash over the frozen content and sets status to `sent`.
    Issuing an already issued invoice is not an error: the response is 200
    with an `info` object carrying `INVOICE_ALREADY_ISSUED`.

    **Example response:**
    ```json
    {
      "invoice_id": "5b0c7f0e-1b7e-4c5d-9d0a-1a2b3c4d5e6f",
      "invoice_number": "INV-000123",
      "status": "sent",
      "is_issued": true,
      "issued_at": "2024-02-01T09:30:00",
      "invoice_hash": "9f2c...e1",
      "message": "Invoice INV-000123 is now immutable and compliant with Malta VAT regulations.",
      "warnings": []
    }
    ```
    """
    uow = SqlAlchemyUnitOfWork(session)
    use_case = IssueInvoice(
        uow,
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoiceItemRepository(session),
        build_numbering_service(session),
        build_audit_writer(session),
        invoice_prefix=ApplicationConfig.INVOICE_NUMBER_PREFIX,
    )
    result = await use_case.execute(invoice_id, account_id, user_id)

    if result.is_err():
        if result.error.code == ErrorCode.INVOICE_ALREADY_ISSUED:
            return JSONResponse(
                status_code=status.HTTP_200_OK,
                content={"info": {"code": result.error.code, "message": result.error.message}},
            )
        raise ClientError.from_error(result.error)

    return result.value


@router.get(
    "/{invoice_id}/editable",
    response_model=EditCheckResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={404: NOT_FOUND_RESPONSE}
)
async def can_edit_invoice(
    invoice_id: str,
    account_id: str = Depends(get_account_id),
    session: AsyncSession = Depends(get_session),
):
    """Report whether the invoice can still be edited, and why not"""
    use_case = CanEditInvoice(SqlAlchemyInvoiceRepository(session))
    result = await use_case.execute(invoice_id, account_id)

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value


@router.get(
    "/{invoice_id}/integrity",
    response_model=IntegrityCheckResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={404: NOT_FOUND_RESPONSE}
)
async def verify_invoice_integrity(
    invoice_id: str,
    account_id: str = Depends(get_account_id),
    session: AsyncSession = Depends(get_session),
):
    """
    Recompute the fiscal hash and compare it with the stored one.

    A mismatch is reported with `integrity_warning: true` (and alerted),
    not as an HTTP error.
    """
    use_case = VerifyInvoiceIntegrity(
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoiceItemRepository(session),
        create_compliance_alert_service(ApplicationConfig.INTEGRITY_ALERT_WEBHOOK),
    )
    result = await use_case.execute(invoice_id, account_id)

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value


@router.get(
    "/{invoice_id}/audit-trail",
    response_model=AuditTrailResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={404: NOT_FOUND_RESPONSE}
)
async def get_invoice_audit_trail(
    invoice_id: str,
    account_id: str = Depends(get_account_id),
    session: AsyncSession = Depends(get_session),
):
    """Audit trail of the invoice, oldest entry first"""
    use_case = GetInvoiceAuditTrail(
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyAuditLogRepository(session),
    )
    result = await use_case.execute(invoice_id, account_id)

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value


@router.post(
    "/{invoice_id}/status",
    response_model=UpdateInvoiceStatusResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={
        404: NOT_FOUND_RESPONSE,
        422: {"description": "Transition not allowed from the current status"},
    }
)
async def update_invoice_status(
    invoice_id: str,
    request: UpdateStatusRequestSchema,
    account_id: str = Depends(get_account_id),
    user_id: Optional[str] = Depends(get_user_id),
    session: AsyncSession = Depends(get_session),
):
    """Move an issued invoice to paid, overdue or cancelled"""
    uow = SqlAlchemyUnitOfWork(session)
    use_case = UpdateInvoiceStatus(
        uow,
        SqlAlchemyInvoiceRepository(session),
        build_audit_writer(session),
    )
    result = await use_case.execute(invoice_id, account_id, request.status, user_id)

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value
