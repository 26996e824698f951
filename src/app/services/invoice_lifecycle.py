"""Invoice lifecycle rules

Single place where the edit lock, credit note eligibility and forward-only
status transitions are defined. Use cases consult these rules; they never
re-derive them.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, FrozenSet, Iterable, Optional, Sequence, Tuple

from src.libs.result import Error
from src.app.errors import ErrorCode
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.invoice_item import InvoiceItem

CENT = Decimal("0.01")

NON_CREDITABLE_STATUSES: FrozenSet[InvoiceStatus] = frozenset({
    InvoiceStatus.DRAFT,
    InvoiceStatus.PAID,
    InvoiceStatus.CANCELLED,
})

# draft -> sent happens only through issuance
STATUS_TRANSITIONS: Dict[InvoiceStatus, FrozenSet[InvoiceStatus]] = {
    InvoiceStatus.DRAFT: frozenset(),
    InvoiceStatus.SENT: frozenset({InvoiceStatus.PAID, InvoiceStatus.OVERDUE, InvoiceStatus.CANCELLED}),
    InvoiceStatus.OVERDUE: frozenset({InvoiceStatus.PAID, InvoiceStatus.CANCELLED}),
    InvoiceStatus.PAID: frozenset(),
    InvoiceStatus.CANCELLED: frozenset(),
}


@dataclass(frozen=True)
class EditCheck:
    """Outcome of the edit lock check"""
    can_edit: bool
    reason: Optional[str] = None


def check_can_edit(invoice: Invoice) -> EditCheck:
    """
    Decide whether an invoice's header and items may still be changed

    Only drafts are editable. Issued documents are corrected with credit notes.
    """
    if invoice.status == InvoiceStatus.DRAFT and not invoice.is_issued:
        return EditCheck(can_edit=True)

    return EditCheck(
        can_edit=False,
        reason=(
            f"Invoice {invoice.invoice_number or 'Draft'} has been issued and cannot be edited. "
            f"To make corrections, please create a credit note."
        ),
    )


def credit_note_precondition_error(
    invoice: Invoice, items: Sequence[InvoiceItem]
) -> Optional[Error]:
    """
    Check whether a credit note may be raised against an invoice

    Rules are checked in order: issued, status, items.

    Returns:
        Error describing the first violated rule, or None if eligible
    """
    if not invoice.is_issued:
        return Error(
            code=ErrorCode.INVOICE_NOT_ISSUED,
            message="Can only create credit notes for issued invoices. "
                    "Edit the draft invoice directly instead.",
            reason=f"invoice_id={invoice.id}, is_issued=False",
        )

    if invoice.status in NON_CREDITABLE_STATUSES:
        return Error(
            code=ErrorCode.INELIGIBLE_INVOICE_STATUS,
            message=f"Cannot create a credit note for invoice {invoice.invoice_number} "
                    f"with status '{invoice.status.value}'",
            reason=f"status={invoice.status.value}",
        )

    if not items:
        return Error(
            code=ErrorCode.INVOICE_HAS_NO_ITEMS,
            message=f"Invoice {invoice.invoice_number} has no line items to credit",
            reason="item_count=0",
        )

    return None


def can_transition(current: InvoiceStatus, new: InvoiceStatus) -> bool:
    """Forward-only domain status transitions of an issued invoice"""
    return new in STATUS_TRANSITIONS.get(current, frozenset())


def net_amount_from_items(items: Iterable) -> Decimal:
    """Sum of quantity * unit_price over the given items"""
    total = Decimal("0")
    for item in items:
        total += Decimal(item.quantity or 0) * Decimal(item.unit_price or 0)
    return total


def draft_totals(
    items: Sequence[InvoiceItem], default_vat_rate: Optional[Decimal]
) -> Tuple[Decimal, Decimal, Decimal]:
    """
    Derive draft header totals from its items

    VAT is computed per item at the item's rate (header rate as fallback) and
    rounded to cents once, on the sum.

    Returns:
        (net amount, VAT amount, total amount)
    """
    net = Decimal("0")
    vat = Decimal("0")
    for item in items:
        line_net = item.net_amount
        rate = item.vat_rate if item.vat_rate is not None else default_vat_rate
        net += line_net
        if rate:
            vat += line_net * Decimal(rate) / Decimal("100")

    net = net.quantize(CENT, rounding=ROUND_HALF_UP)
    vat = vat.quantize(CENT, rounding=ROUND_HALF_UP)
    return net, vat, net + vat
