"""Fiscal hash of an invoice

The digest covers an explicit, ordered field set. Nothing time-dependent is
read at hash time: issued_at is the value stored once at issuance, so the
same stored invoice always hashes to the same digest.
"""

import hashlib
import json
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from src.domain.invoice import Invoice
from src.domain.invoice_item import InvoiceItem


def _canonical_decimal(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    # 500, 500.00 and 500.000000 must serialize identically
    return format(value.normalize(), "f")


def _canonical_temporal(value: Optional[date]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat()


def build_hash_payload(
    invoice: Invoice,
    items: Sequence[InvoiceItem],
    invoice_number: Optional[str] = None,
    issued_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Build the ordered payload that the fiscal hash is computed over

    Args:
        invoice: Invoice whose stored values are hashed
        items: Invoice items
        invoice_number: Overrides invoice.invoice_number (value about to be persisted)
        issued_at: Overrides invoice.issued_at (value about to be persisted)

    Returns:
        Payload dict in canonical field order
    """
    ordered_items: List[InvoiceItem] = sorted(items, key=lambda item: item.position or 0)

    return {
        "invoice_number": invoice_number if invoice_number is not None else invoice.invoice_number,
        "invoice_date": _canonical_temporal(invoice.invoice_date),
        "customer_id": invoice.customer_id,
        "amount": _canonical_decimal(invoice.amount),
        "vat_rate": _canonical_decimal(invoice.vat_rate),
        "total_amount": _canonical_decimal(invoice.total_amount),
        "issued_at": _canonical_temporal(issued_at if issued_at is not None else invoice.issued_at),
        "items": [
            {
                "description": item.description,
                "quantity": _canonical_decimal(item.quantity),
                "unit_price": _canonical_decimal(item.unit_price),
                "vat_rate": _canonical_decimal(item.vat_rate),
            }
            for item in ordered_items
        ],
    }


def compute_invoice_hash(
    invoice: Invoice,
    items: Sequence[InvoiceItem],
    invoice_number: Optional[str] = None,
    issued_at: Optional[datetime] = None,
) -> str:
    """
    Compute the SHA-256 fiscal hash of an invoice

    Returns:
        64-character lowercase hex digest
    """
    payload = build_hash_payload(invoice, items, invoice_number, issued_at)
    encoded = json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()
