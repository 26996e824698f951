"""Storage-level immutability guards

Mapper events that reject writes to fiscally frozen or append-only rows at
flush time, independently of the use case layer:

- issued invoices: frozen fields cannot change, the row cannot be deleted
- items of an issued invoice: no insert, update or delete
- audit log entries, credit notes, credit note items: no update or delete
"""

from sqlalchemy import event, inspect, select
from src.domain.audit_log import InvoiceAuditLog
from src.domain.credit_note import CreditNote
from src.domain.credit_note_item import CreditNoteItem
from src.domain.exceptions import ImmutableRecordError
from src.domain.invoice import Invoice
from src.domain.invoice_item import InvoiceItem

FROZEN_INVOICE_FIELDS = (
    "owner_id",
    "customer_id",
    "invoice_number",
    "invoice_date",
    "amount",
    "vat_rate",
    "vat_amount",
    "total_amount",
    "is_issued",
    "issued_at",
    "invoice_hash",
)


def _was_issued(invoice: Invoice) -> bool:
    """is_issued as loaded from the database, ignoring pending changes"""
    history = inspect(invoice).attrs.is_issued.history
    loaded = history.deleted or history.unchanged
    return bool(loaded[0]) if loaded else False


def _parent_is_issued(connection, invoice_id: str) -> bool:
    result = connection.execute(select(Invoice.is_issued).where(Invoice.id == invoice_id))
    return bool(result.scalar_one_or_none())


@event.listens_for(Invoice, "before_update")
def _guard_issued_invoice_update(mapper, connection, target):
    if not _was_issued(target):
        return

    state = inspect(target)
    changed = [name for name in FROZEN_INVOICE_FIELDS if state.attrs[name].history.has_changes()]
    if changed:
        raise ImmutableRecordError(
            f"Invoice {target.invoice_number} has been issued; "
            f"fields {', '.join(changed)} cannot be modified"
        )


@event.listens_for(Invoice, "before_delete")
def _guard_issued_invoice_delete(mapper, connection, target):
    if _was_issued(target):
        raise ImmutableRecordError(
            f"Invoice {target.invoice_number} has been issued and cannot be deleted"
        )


@event.listens_for(InvoiceItem, "before_insert")
@event.listens_for(InvoiceItem, "before_update")
@event.listens_for(InvoiceItem, "before_delete")
def _guard_issued_invoice_items(mapper, connection, target):
    if _parent_is_issued(connection, target.invoice_id):
        raise ImmutableRecordError(
            f"Items of issued invoice {target.invoice_id} cannot be modified"
        )


@event.listens_for(InvoiceAuditLog, "before_update")
@event.listens_for(InvoiceAuditLog, "before_delete")
@event.listens_for(CreditNote, "before_update")
@event.listens_for(CreditNote, "before_delete")
@event.listens_for(CreditNoteItem, "before_update")
@event.listens_for(CreditNoteItem, "before_delete")
def _guard_append_only(mapper, connection, target):
    raise ImmutableRecordError(
        f"{type(target).__name__} {target.id} is append-only and cannot be modified or deleted"
    )
