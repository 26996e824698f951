from .unit_of_work import UnitOfWork
from .compliance_alert_service import ComplianceAlertService, IntegrityAlert
from .audit_log_writer import AuditLogWriter
from .numbering_service import NumberingService
from .invoice_hasher import compute_invoice_hash

__all__ = [
    "UnitOfWork",
    "ComplianceAlertService",
    "IntegrityAlert",
    "AuditLogWriter",
    "NumberingService",
    "compute_invoice_hash",
]
