"""AuditInvoiceIntegrity Use Case

Re-verifies the fiscal hash of every issued invoice.
"""

import logging
import time
from datetime import datetime
from typing import List, Optional

from src.libs.result import Result, Return, Error
from src.app.errors import ErrorCode
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_item_repository import InvoiceItemRepository
from src.app.services.compliance_alert_service import ComplianceAlertService, IntegrityAlert
from src.app.services.invoice_hasher import compute_invoice_hash
from .dtos import IntegrityAuditResultDTO, IntegrityMismatchDTO

logger = logging.getLogger(__name__)


class AuditInvoiceIntegrity:
    """
    Use Case: Batch integrity audit of issued invoices

    Business Rules:
    1. Walks all issued invoices page by page, keyed on (issued_at, id)
    2. Recomputes each hash from the stored values and compares
    3. Reports and alerts on mismatches
    4. Does NOT modify any data

    Flow:
    1. Page through issued invoices
    2. For each invoice:
       a. Load items
       b. Recompute hash
       c. Record mismatch and alert
    3. Return audit result
    """

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        invoice_item_repo: InvoiceItemRepository,
        alert_service: Optional[ComplianceAlertService] = None,
        page_size: int = 100,
    ):
        self.invoice_repo = invoice_repo
        self.invoice_item_repo = invoice_item_repo
        self.alert_service = alert_service
        self.page_size = page_size

    async def execute(self) -> Result[IntegrityAuditResultDTO]:
        start_time = time.time()
        audit_time = datetime.utcnow()

        try:
            logger.info("Starting invoice integrity audit")

            checked = 0
            mismatches: List[IntegrityMismatchDTO] = []
            after = None

            while True:
                invoices = await self.invoice_repo.get_issued(limit=self.page_size, after=after)
                if not invoices:
                    break

                for invoice in invoices:
                    checked += 1
                    items = await self.invoice_item_repo.get_by_invoice_id(invoice.id)
                    calculated_hash = compute_invoice_hash(invoice, items)

                    if calculated_hash != invoice.invoice_hash:
                        mismatch = IntegrityMismatchDTO(
                            invoice_id=invoice.id,
                            owner_id=invoice.owner_id,
                            invoice_number=invoice.invoice_number,
                            stored_hash=invoice.invoice_hash or "",
                            calculated_hash=calculated_hash,
                        )
                        mismatches.append(mismatch)
                        logger.warning(
                            f"Integrity mismatch on invoice {invoice.id} ({invoice.invoice_number}), "
                            f"account {invoice.owner_id}"
                        )
                        await self._alert(mismatch)

                if len(invoices) < self.page_size:
                    break
                last = invoices[-1]
                after = (last.issued_at, last.id)

            execution_time_ms = int((time.time() - start_time) * 1000)
            logger.info(
                f"Integrity audit complete: {checked} invoices checked, "
                f"{len(mismatches)} mismatches in {execution_time_ms}ms"
            )

            return Return.ok(
                IntegrityAuditResultDTO(
                    total_invoices_checked=checked,
                    mismatches_found=len(mismatches),
                    mismatches=mismatches,
                    audit_time=audit_time,
                    execution_time_ms=execution_time_ms,
                )
            )

        except Exception as e:
            logger.error(f"Invoice integrity audit failed: {e}")
            return Return.err(
                Error(
                    code=ErrorCode.AUDIT_INTEGRITY_FAILED,
                    message="Failed to audit invoice integrity",
                    reason=str(e),
                )
            )

    async def _alert(self, mismatch: IntegrityMismatchDTO) -> None:
        if not self.alert_service:
            return
        try:
            await self.alert_service.send_integrity_alert(
                IntegrityAlert(
                    invoice_id=mismatch.invoice_id,
                    owner_id=mismatch.owner_id,
                    invoice_number=mismatch.invoice_number,
                    stored_hash=mismatch.stored_hash,
                    calculated_hash=mismatch.calculated_hash,
                    detected_at=datetime.utcnow(),
                )
            )
        except Exception as e:
            logger.error(f"Failed to send integrity alert for invoice {mismatch.invoice_id}: {e}")
