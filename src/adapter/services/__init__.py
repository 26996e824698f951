from .unit_of_work import SqlAlchemyUnitOfWork
from .compliance_alert_service import (
    LoggingComplianceAlertService,
    WebhookComplianceAlertService,
    CompositeComplianceAlertService,
    create_compliance_alert_service,
)

__all__ = [
    "SqlAlchemyUnitOfWork",
    "LoggingComplianceAlertService",
    "WebhookComplianceAlertService",
    "CompositeComplianceAlertService",
    "create_compliance_alert_service",
]
