"""Document Counter Domain Entity

Per-account sequence backing invoice and credit note numbering.
"""

from enum import Enum
from sqlmodel import Field, Column
from sqlalchemy import BigInteger, Integer, String, UniqueConstraint
from src.domain.base import BaseModel, generate_uuid


class DocumentClass(str, Enum):
    """Independently numbered document classes"""
    INVOICE = "invoice"
    CREDIT_NOTE = "credit_note"


class DocumentCounter(BaseModel, table=True):
    """
    Document Counter - Last issued sequence value per account and class

    Domain Rules:
    - One row per (account_id, document_class)
    - last_seq only ever increases, and only through an atomic
      UPDATE ... SET last_seq = last_seq + 1
    """

    __tablename__ = "document_counters"
    __table_args__ = (
        UniqueConstraint("account_id", "document_class", name="uq_document_counters_account_class"),
    )

    id: str = Field(
        default_factory=generate_uuid,
        sa_column=Column(String(36), primary_key=True),
    )

    account_id: str = Field(
        sa_column=Column(String(64), nullable=False),
        description="Account (tenant) the sequence belongs to"
    )

    document_class: DocumentClass = Field(
        description="Numbered document class"
    )

    prefix: str = Field(
        sa_column=Column(String(16), nullable=False),
        description="Prefix used when the counter was created"
    )

    last_seq: int = Field(
        default=0,
        sa_column=Column(BigInteger().with_variant(Integer, "sqlite"), nullable=False, default=0),
        description="Last sequence value handed out"
    )
