"""Invoice Integrity Audit Background Worker

Periodically recomputes the fiscal hash of every issued invoice and alerts
on mismatches. Can be run as a standalone script or integrated with a
scheduler.
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.repositories.invoice_repository import SqlAlchemyInvoiceRepository
from src.adapter.repositories.invoice_item_repository import SqlAlchemyInvoiceItemRepository
from src.adapter.services.compliance_alert_service import create_compliance_alert_service
from src.app.services.compliance_alert_service import ComplianceAlertService
from src.app.use_cases.invoicing import AuditInvoiceIntegrity, IntegrityAuditResultDTO
from src.depends import create_engine

logger = logging.getLogger(__name__)


class IntegrityAuditorWorker:
    """
    Background worker for invoice integrity audits

    Features:
    - Recomputes hashes of all issued invoices
    - Alerts (log + optional webhook) on every mismatch
    - Read-only: never repairs or rewrites an invoice
    - Can run once or continuously

    Usage:
        worker = IntegrityAuditorWorker()
        result = await worker.run_once()

        await worker.run_forever(interval_seconds=86400)
    """

    def __init__(
        self,
        db_uri: Optional[str] = None,
        alert_service: Optional[ComplianceAlertService] = None,
    ):
        """
        Args:
            db_uri: Database URI (defaults to ApplicationConfig.DB_URI)
            alert_service: Alert channel (defaults to log + configured webhook)
        """
        self.db_uri = db_uri or ApplicationConfig.DB_URI
        self.alert_service = alert_service or create_compliance_alert_service(
            ApplicationConfig.INTEGRITY_ALERT_WEBHOOK
        )

        self.engine = create_engine(self.db_uri)
        self.async_session_factory = sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
        )

        logger.info("IntegrityAuditorWorker initialized")

    async def run_once(self) -> IntegrityAuditResultDTO:
        """
        Run one integrity audit

        Returns:
            IntegrityAuditResultDTO with audit results
        """
        if not ApplicationConfig.INTEGRITY_AUDIT_ENABLED:
            logger.info("Invoice integrity audit is disabled, skipping")
            return IntegrityAuditResultDTO(
                total_invoices_checked=0,
                mismatches_found=0,
                mismatches=[],
                audit_time=datetime.utcnow(),
                execution_time_ms=0,
            )

        async with self.async_session_factory() as session:
            use_case = AuditInvoiceIntegrity(
                invoice_repo=SqlAlchemyInvoiceRepository(session),
                invoice_item_repo=SqlAlchemyInvoiceItemRepository(session),
                alert_service=self.alert_service,
            )

            result = await use_case.execute()

            if result.is_err():
                logger.error(f"Integrity audit failed: {result.error.message}")
                raise RuntimeError(f"Integrity audit failed: {result.error.message}")

            response = result.value

            if response.mismatches_found > 0:
                logger.error(
                    f"ALERT: {response.mismatches_found} issued invoices failed integrity verification!"
                )

            return response

    async def run_forever(self, interval_seconds: int = 86400):
        """
        Run the audit continuously at the given interval

        Args:
            interval_seconds: Seconds between runs (default: 24 hours)
        """
        logger.info(f"Starting continuous integrity audit with {interval_seconds}s interval")

        while True:
            try:
                result = await self.run_once()
                logger.info(
                    f"Integrity audit cycle complete. "
                    f"Checked {result.total_invoices_checked} invoices, "
                    f"found {result.mismatches_found} mismatches "
                    f"in {result.execution_time_ms}ms"
                )
            except Exception as e:
                logger.error(f"Integrity audit cycle failed: {e}")

            await asyncio.sleep(interval_seconds)

    async def shutdown(self):
        """Cleanup resources"""
        await self.engine.dispose()
        logger.info("IntegrityAuditorWorker shutdown complete")


async def main():
    """
    Entry point for running the worker as a standalone script

    Usage:
        python -m src.worker.integrity_auditor --once
        python -m src.worker.integrity_auditor --interval 3600
    """
    import argparse

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Invoice Integrity Audit Worker")
    parser.add_argument("--once", action="store_true", help="Run once and exit")
    parser.add_argument(
        "--interval", type=int, default=ApplicationConfig.INTEGRITY_AUDIT_INTERVAL_SECONDS,
        help="Interval between runs in seconds (default: 86400 = 24 hours)"
    )
    args = parser.parse_args()

    worker = IntegrityAuditorWorker()

    try:
        if args.once:
            result = await worker.run_once()
            print("Integrity audit complete:")
            print(f"  Total invoices checked: {result.total_invoices_checked}")
            print(f"  Mismatches found: {result.mismatches_found}")
            print(f"  Execution time: {result.execution_time_ms}ms")
            for m in result.mismatches:
                print(
                    f"  - {m.invoice_number} ({m.invoice_id}, account {m.owner_id}): "
                    f"stored={m.stored_hash}, calculated={m.calculated_hash}"
                )
        else:
            await worker.run_forever(interval_seconds=args.interval)
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
