"""Compliance Alert Service Interface

Defines the contract for raising integrity (tamper) alerts.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class IntegrityAlert:
    """Hash mismatch detected on an issued invoice"""
    invoice_id: str
    owner_id: str
    invoice_number: Optional[str]
    stored_hash: str
    calculated_hash: str
    detected_at: datetime


class ComplianceAlertService(ABC):
    """
    Abstract alert service for compliance warnings

    Implementations can send alerts via:
    - Logging
    - Webhook (HTTP POST)
    - etc.
    """

    @abstractmethod
    async def send_integrity_alert(self, alert: IntegrityAlert) -> bool:
        """
        Send alert for an invoice whose stored hash no longer matches

        Args:
            alert: IntegrityAlert to send

        Returns:
            True if the alert was delivered, False otherwise
        """
        pass
