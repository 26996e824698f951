"""Compliance Alert Service Implementations

Delivery channels for invoice integrity (tamper) alerts.
"""

import logging
from typing import List, Optional
import httpx
from src.app.services.compliance_alert_service import ComplianceAlertService, IntegrityAlert

logger = logging.getLogger(__name__)


class LoggingComplianceAlertService(ComplianceAlertService):
    """
    Alert service that logs integrity alerts

    Always configured, so a mismatch is at least visible in the logs.
    """

    async def send_integrity_alert(self, alert: IntegrityAlert) -> bool:
        logger.error(
            f"[INTEGRITY ALERT] Account: {alert.owner_id}, "
            f"Invoice: {alert.invoice_number} ({alert.invoice_id}), "
            f"Stored hash: {alert.stored_hash}, "
            f"Calculated hash: {alert.calculated_hash}, "
            f"Detected at: {alert.detected_at.isoformat()}"
        )
        return True


class WebhookComplianceAlertService(ComplianceAlertService):
    """
    Alert service that POSTs integrity alerts to a webhook

    Sends JSON payload to configured webhook URL.
    """

    def __init__(self, webhook_url: str, timeout: float = 10.0):
        """
        Args:
            webhook_url: URL to POST alerts to
            timeout: Request timeout in seconds
        """
        self.webhook_url = webhook_url
        self.timeout = timeout

    async def send_integrity_alert(self, alert: IntegrityAlert) -> bool:
        """
        Send integrity alert via webhook

        Returns:
            True if webhook call succeeded, False otherwise
        """
        payload = {
            "type": "invoice_integrity_alert",
            "invoice_id": alert.invoice_id,
            "account_id": alert.owner_id,
            "invoice_number": alert.invoice_number,
            "stored_hash": alert.stored_hash,
            "calculated_hash": alert.calculated_hash,
            "detected_at": alert.detected_at.isoformat(),
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.webhook_url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
                response.raise_for_status()
                logger.info(
                    f"Integrity alert sent for invoice {alert.invoice_id} to {self.webhook_url}"
                )
                return True
        except httpx.HTTPError as e:
            logger.error(f"Failed to send integrity alert for invoice {alert.invoice_id}: {e}")
            return False


class CompositeComplianceAlertService(ComplianceAlertService):
    """Delivers each alert to every configured channel"""

    def __init__(self, services: List[ComplianceAlertService]):
        self.services = services

    async def send_integrity_alert(self, alert: IntegrityAlert) -> bool:
        """
        Returns:
            True if at least one channel succeeded, False otherwise
        """
        delivered = False
        for service in self.services:
            try:
                if await service.send_integrity_alert(alert):
                    delivered = True
            except Exception as e:
                logger.error(f"Alert channel {type(service).__name__} failed: {e}")
        return delivered


def create_compliance_alert_service(webhook_url: Optional[str] = None) -> ComplianceAlertService:
    """
    Factory function to create the configured alert service

    Args:
        webhook_url: Optional webhook URL. If provided, alerts are both logged
                     and posted. Otherwise they are only logged.
    """
    services: List[ComplianceAlertService] = [LoggingComplianceAlertService()]

    if webhook_url:
        services.append(WebhookComplianceAlertService(webhook_url))

    if len(services) == 1:
        return services[0]

    return CompositeComplianceAlertService(services)
