"""Invoice Audit Log Domain Entity

Immutable append-only trail of lifecycle-affecting actions on invoices.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import JSON, BigInteger, Integer, String
from src.domain.base import BaseModel


class AuditAction(str, Enum):
    """Audited invoice actions"""
    ISSUED = "issued"                            # Fiscal issuance
    CREDIT_NOTE_CREATED = "credit_note_created"  # Correction via credit note
    MODIFIED = "modified"                        # Draft edited
    STATUS_CHANGED = "status_changed"            # Domain status moved forward


class InvoiceAuditLog(BaseModel, table=True):
    """
    Invoice Audit Log - Append-only record of one lifecycle event

    Domain Rules:
    - Rows are never updated or deleted
    - id is monotonically increasing, so (timestamp, id) is a total order
    - Written after the primary transition commits; a failed write never
      undoes that transition
    """

    __tablename__ = "invoice_audit_log"
    __table_args__ = (
        Index("ix_invoice_audit_log_invoice_id", "invoice_id"),
        Index("ix_invoice_audit_log_timestamp", "timestamp"),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(
            BigInteger().with_variant(Integer, "sqlite"),
            primary_key=True,
            autoincrement=True,
        ),
        description="Append order (auto-increment)"
    )

    invoice_id: str = Field(
        sa_column=Column(String(36), nullable=False),
        description="Invoice the action applies to"
    )

    user_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(64), nullable=True),
        description="User who performed the action"
    )

    action: AuditAction = Field(
        description="Audited action"
    )

    old_data: Optional[Dict[str, Any]] = Field(
        default=None,
        sa_column=Column(JSON, nullable=True),
        description="Snapshot before the action, where meaningful"
    )

    new_data: Dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
        description="Snapshot after the action"
    )

    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="Time the entry was appended (immutable)"
    )
