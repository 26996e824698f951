"""Audit Log Writer

Best-effort append of invoice audit entries. Runs after the primary
transition has committed and reports failures as warnings instead of raising.
"""

import json
import logging
from typing import Any, Dict, Optional

from src.app.repositories.audit_log_repository import AuditLogRepository
from src.app.services.unit_of_work import UnitOfWork
from src.domain.audit_log import AuditAction, InvoiceAuditLog

logger = logging.getLogger(__name__)


def to_audit_snapshot(data: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """JSON-safe copy of a snapshot (decimals and dates become strings)"""
    if data is None:
        return None
    return json.loads(json.dumps(data, default=str))


class AuditLogWriter:
    """
    Appends one immutable audit entry per lifecycle action

    The entry is committed in its own unit of work. A failure is logged,
    rolled back and returned as a warning message; it never undoes or fails
    the action being audited.
    """

    def __init__(self, uow: UnitOfWork, audit_repo: AuditLogRepository):
        self.uow = uow
        self.audit_repo = audit_repo

    async def record(
        self,
        invoice_id: str,
        user_id: Optional[str],
        action: AuditAction,
        new_data: Dict[str, Any],
        old_data: Optional[Dict[str, Any]] = None,
    ) -> Optional[str]:
        """
        Append an audit entry

        Args:
            invoice_id: Invoice the action applies to
            user_id: Acting user
            action: Audited action
            new_data: Snapshot after the action
            old_data: Snapshot before the action, if meaningful

        Returns:
            None on success, a warning message if the entry was not written
        """
        try:
            entry = InvoiceAuditLog(
                invoice_id=invoice_id,
                user_id=user_id,
                action=action,
                new_data=to_audit_snapshot(new_data),
                old_data=to_audit_snapshot(old_data),
            )
            await self.audit_repo.append(entry)
            await self.uow.commit()
            return None

        except Exception as e:
            try:
                await self.uow.rollback()
            except Exception as rollback_error:
                logger.error(f"Rollback after audit failure also failed: {rollback_error}")

            logger.warning(
                f"Audit log write failed for invoice {invoice_id} (action={action.value}): {e}"
            )
            return f"Audit log entry '{action.value}' for invoice {invoice_id} was not recorded"
