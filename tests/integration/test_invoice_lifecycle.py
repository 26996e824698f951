"""Integration tests for the invoice lifecycle against a real database

Tests cover:
- End-to-end: draft -> issue -> verify -> credit note -> audit trail
- Idempotent issuance
- Per-account, per-class numbering and collision fallback
- Credit note amount recomputed from items
- Tamper detection after a raw database change
- Concurrent issuance from separate sessions
- Keyset paging of issued invoices
"""

import asyncio
import re
from datetime import date, datetime
from decimal import Decimal

import pytest
from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories import (
    SqlAlchemyAuditLogRepository,
    SqlAlchemyCreditNoteItemRepository,
    SqlAlchemyCreditNoteRepository,
    SqlAlchemyDocumentSequenceRepository,
    SqlAlchemyInvoiceItemRepository,
    SqlAlchemyInvoiceRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.errors import ErrorCode
from src.app.services.audit_log_writer import AuditLogWriter
from src.app.services.invoice_hasher import compute_invoice_hash
from src.app.services.numbering_service import NumberingService
from src.app.use_cases.invoicing import (
    AuditInvoiceIntegrity,
    CanEditInvoice,
    CreateCreditNoteFromInvoice,
    CreateDraftInvoice,
    CreateDraftInvoiceCommandDTO,
    GetInvoiceAuditTrail,
    InvoiceItemDTO,
    IssueInvoice,
    UpdateDraftInvoice,
    UpdateDraftInvoiceCommandDTO,
    UpdateInvoiceStatus,
    VerifyInvoiceIntegrity,
)
from src.domain.credit_note_item import CreditNoteItem
from src.domain.document_counter import DocumentClass, DocumentCounter
from src.domain.invoice import Invoice, InvoiceStatus


class InvoicingServices:
    """Use cases wired to one session, as the API routes wire them"""

    def __init__(self, session: AsyncSession):
        self.session = session
        uow = SqlAlchemyUnitOfWork(session)
        invoice_repo = SqlAlchemyInvoiceRepository(session)
        item_repo = SqlAlchemyInvoiceItemRepository(session)
        audit_repo = SqlAlchemyAuditLogRepository(session)
        numbering = NumberingService(SqlAlchemyDocumentSequenceRepository(session))
        audit_writer = AuditLogWriter(uow, audit_repo)

        self.invoice_repo = invoice_repo
        self.create_draft = CreateDraftInvoice(uow, invoice_repo, item_repo)
        self.update_draft = UpdateDraftInvoice(uow, invoice_repo, item_repo, audit_writer)
        self.issue = IssueInvoice(uow, invoice_repo, item_repo, numbering, audit_writer)
        self.can_edit = CanEditInvoice(invoice_repo)
        self.verify = VerifyInvoiceIntegrity(invoice_repo, item_repo)
        self.audit_trail = GetInvoiceAuditTrail(invoice_repo, audit_repo)
        self.update_status = UpdateInvoiceStatus(uow, invoice_repo, audit_writer)
        self.credit_note = CreateCreditNoteFromInvoice(
            uow,
            invoice_repo,
            item_repo,
            SqlAlchemyCreditNoteRepository(session),
            SqlAlchemyCreditNoteItemRepository(session),
            numbering,
            audit_writer,
            default_vat_rate=Decimal("18"),
        )
        self.audit_integrity = AuditInvoiceIntegrity(invoice_repo, item_repo)

    async def draft(self, account_id="acct_1", quantity="5", unit_price="100.00", vat_rate="18"):
        result = await self.create_draft.execute(
            CreateDraftInvoiceCommandDTO(
                account_id=account_id,
                customer_id="cust_1",
                invoice_date=date(2024, 2, 1),
                vat_rate=Decimal(vat_rate),
                items=[
                    InvoiceItemDTO(
                        description="Consulting services",
                        quantity=Decimal(quantity),
                        unit_price=Decimal(unit_price),
                        vat_rate=Decimal(vat_rate),
                    )
                ],
            )
        )
        assert result.is_ok(), result.error
        return result.value


@pytest.fixture
def services(db_session):
    return InvoicingServices(db_session)


@pytest.mark.asyncio
class TestInvoiceLifecycleEndToEnd:

    async def test_issue_verify_credit_and_audit(self, services, db_session):
        draft = await services.draft()
        assert draft.total_amount == Decimal("590.00")

        issued = await services.issue.execute(draft.invoice_id, "acct_1", user_id="user_1")
        assert issued.is_ok(), issued.error
        assert re.fullmatch(r"INV-\d{6}", issued.value.invoice_number)
        assert issued.value.status == "sent"
        assert re.fullmatch(r"[0-9a-f]{64}", issued.value.invoice_hash)

        stored = await services.invoice_repo.get_by_id(draft.invoice_id, "acct_1")
        assert stored.is_issued is True
        assert stored.status == InvoiceStatus.SENT
        assert stored.invoice_hash == issued.value.invoice_hash

        verification = await services.verify.execute(draft.invoice_id, "acct_1")
        assert verification.value.is_valid is True

        edit = await services.can_edit.execute(draft.invoice_id, "acct_1")
        assert edit.value.can_edit is False
        assert issued.value.invoice_number in edit.value.reason

        credit_note = await services.credit_note.execute(draft.invoice_id, "acct_1", user_id="user_1")
        assert credit_note.is_ok(), credit_note.error
        assert credit_note.value.amount == Decimal("500.00")
        assert credit_note.value.invoice_id == draft.invoice_id
        assert credit_note.value.credit_note_number == "CN-000001"
        assert len(credit_note.value.items) == 1

        items = (
            await db_session.execute(
                select(CreditNoteItem).where(CreditNoteItem.credit_note_id == credit_note.value.credit_note_id)
            )
        ).scalars().all()
        assert len(items) == 1
        assert items[0].quantity == Decimal("5")

        trail = await services.audit_trail.execute(draft.invoice_id, "acct_1")
        assert [entry.action for entry in trail.value.entries] == ["issued", "credit_note_created"]
        assert trail.value.entries[0].entry_id < trail.value.entries[1].entry_id
        assert trail.value.entries[0].user_id == "user_1"

        # Issuance content is untouched by the credit note
        verification = await services.verify.execute(draft.invoice_id, "acct_1")
        assert verification.value.is_valid is True

    async def test_second_issue_is_benign_and_consumes_no_number(self, services, db_session):
        draft = await services.draft()
        first = await services.issue.execute(draft.invoice_id, "acct_1")

        second = await services.issue.execute(draft.invoice_id, "acct_1")

        assert second.is_err()
        assert second.error.code == ErrorCode.INVOICE_ALREADY_ISSUED
        stored = await services.invoice_repo.get_by_id(draft.invoice_id, "acct_1")
        assert stored.invoice_number == first.value.invoice_number
        assert stored.invoice_hash == first.value.invoice_hash

        last_seq = (
            await db_session.execute(
                select(DocumentCounter.last_seq).where(
                    DocumentCounter.account_id == "acct_1",
                    DocumentCounter.document_class == DocumentClass.INVOICE,
                )
            )
        ).scalar_one()
        assert last_seq == 1

    async def test_stored_naive_timestamp_reproduces_hash(self, services, session_factory):
        draft = await services.draft()
        issued = await services.issue.execute(draft.invoice_id, "acct_1")
        await services.session.close()

        async with session_factory() as fresh_session:
            stored = await SqlAlchemyInvoiceRepository(fresh_session).get_by_id(draft.invoice_id, "acct_1")
            items = await SqlAlchemyInvoiceItemRepository(fresh_session).get_by_invoice_id(draft.invoice_id)

        assert stored.issued_at.tzinfo is None
        assert stored.issued_at == issued.value.issued_at
        assert compute_invoice_hash(stored, items) == issued.value.invoice_hash

    async def test_issue_with_other_account_is_not_found(self, services):
        draft = await services.draft(account_id="acct_1")

        result = await services.issue.execute(draft.invoice_id, "acct_2")

        assert result.error.code == ErrorCode.INVOICE_NOT_FOUND


@pytest.mark.asyncio
class TestNumbering:

    async def test_sequential_numbers_per_account(self, services):
        numbers = []
        for _ in range(3):
            draft = await services.draft(account_id="acct_1")
            numbers.append((await services.issue.execute(draft.invoice_id, "acct_1")).value.invoice_number)

        other = await services.draft(account_id="acct_2")
        other_number = (await services.issue.execute(other.invoice_id, "acct_2")).value.invoice_number

        assert numbers == ["INV-000001", "INV-000002", "INV-000003"]
        assert other_number == "INV-000001"

    async def test_credit_note_sequence_is_independent(self, services):
        first = await services.draft()
        second = await services.draft()
        await services.issue.execute(first.invoice_id, "acct_1")
        await services.issue.execute(second.invoice_id, "acct_1")

        credit_note = await services.credit_note.execute(second.invoice_id, "acct_1")

        assert credit_note.value.credit_note_number == "CN-000001"

    async def test_rolled_back_draw_is_given_back(self, db_session):
        sequence_repo = SqlAlchemyDocumentSequenceRepository(db_session)

        await sequence_repo.next_sequence_number("acct_1", DocumentClass.INVOICE, "INV-")
        await db_session.commit()
        await sequence_repo.next_sequence_number("acct_1", DocumentClass.INVOICE, "INV-")
        await db_session.rollback()
        number = await sequence_repo.next_sequence_number("acct_1", DocumentClass.INVOICE, "INV-")

        assert number == "INV-000002"

    async def test_collision_with_existing_number_falls_back_to_suffix(self, services, db_session):
        # A legacy draft already carries the number the counter will hand out next
        legacy = Invoice(
            owner_id="acct_1",
            customer_id="cust_legacy",
            invoice_number="INV-000001",
            invoice_date=date(2023, 12, 1),
        )
        db_session.add(legacy)
        await db_session.commit()

        draft = await services.draft()
        result = await services.issue.execute(draft.invoice_id, "acct_1")

        assert result.is_ok(), result.error
        assert result.value.invoice_number == "INV-000001-R1"


@pytest.mark.asyncio
class TestCreditNotes:

    async def test_amount_comes_from_items_not_header(self, services, db_session):
        draft = await services.draft(quantity="1", unit_price="95.00")
        invoice = await services.invoice_repo.get_by_id(draft.invoice_id, "acct_1")
        invoice.amount = Decimal("100.00")
        await services.invoice_repo.update(invoice)
        await db_session.commit()
        await services.issue.execute(draft.invoice_id, "acct_1")

        credit_note = await services.credit_note.execute(draft.invoice_id, "acct_1")

        assert credit_note.value.amount == Decimal("95.00")

    async def test_draft_cannot_be_credited(self, services):
        draft = await services.draft()

        result = await services.credit_note.execute(draft.invoice_id, "acct_1")

        assert result.error.code == ErrorCode.INVOICE_NOT_ISSUED

    async def test_paid_invoice_cannot_be_credited(self, services):
        draft = await services.draft()
        await services.issue.execute(draft.invoice_id, "acct_1")
        await services.update_status.execute(draft.invoice_id, "acct_1", InvoiceStatus.PAID)

        result = await services.credit_note.execute(draft.invoice_id, "acct_1")

        assert result.error.code == ErrorCode.INELIGIBLE_INVOICE_STATUS


@pytest.mark.asyncio
class TestDraftEditingAndStatus:

    async def test_draft_edit_then_lock_after_issue(self, services):
        draft = await services.draft()

        edited = await services.update_draft.execute(
            draft.invoice_id,
            "acct_1",
            UpdateDraftInvoiceCommandDTO(
                items=[InvoiceItemDTO(description="Workshop", quantity=Decimal("2"), unit_price=Decimal("300.00"))]
            ),
        )
        assert edited.is_ok(), edited.error
        assert edited.value.amount == Decimal("600.00")
        assert len(edited.value.items) == 1

        await services.issue.execute(draft.invoice_id, "acct_1")
        refused = await services.update_draft.execute(
            draft.invoice_id, "acct_1", UpdateDraftInvoiceCommandDTO(customer_id="cust_2")
        )

        assert refused.error.code == ErrorCode.INVOICE_NOT_EDITABLE

    async def test_status_change_keeps_integrity(self, services):
        draft = await services.draft()
        await services.issue.execute(draft.invoice_id, "acct_1")

        changed = await services.update_status.execute(draft.invoice_id, "acct_1", InvoiceStatus.OVERDUE)
        verification = await services.verify.execute(draft.invoice_id, "acct_1")
        trail = await services.audit_trail.execute(draft.invoice_id, "acct_1")

        assert changed.is_ok(), changed.error
        assert verification.value.is_valid is True
        assert [e.action for e in trail.value.entries] == ["issued", "status_changed"]


@pytest.mark.asyncio
class TestTamperDetection:

    async def test_raw_change_is_detected(self, services, session_factory):
        draft = await services.draft()
        await services.issue.execute(draft.invoice_id, "acct_1")
        await services.session.close()

        # Out-of-band write that bypasses the ORM guards
        async with session_factory() as raw_session:
            await raw_session.execute(
                update(Invoice).where(Invoice.id == draft.invoice_id).values(amount=Decimal("1.00"))
            )
            await raw_session.commit()

        async with session_factory() as fresh_session:
            fresh = InvoicingServices(fresh_session)
            verification = await fresh.verify.execute(draft.invoice_id, "acct_1")
            audit = await fresh.audit_integrity.execute()

        assert verification.value.is_valid is False
        assert verification.value.integrity_warning is True
        assert audit.value.mismatches_found == 1
        assert audit.value.mismatches[0].invoice_id == draft.invoice_id


async def issue_in_own_session(session_factory, invoice_id, account_id="acct_1"):
    async with session_factory() as session:
        return await InvoicingServices(session).issue.execute(invoice_id, account_id)


@pytest.mark.asyncio
class TestConcurrentIssuance:

    async def test_distinct_invoices_get_distinct_numbers(self, session_factory):
        async with session_factory() as session:
            setup = InvoicingServices(session)
            drafts = [await setup.draft() for _ in range(5)]

        results = await asyncio.gather(
            *(issue_in_own_session(session_factory, draft.invoice_id) for draft in drafts)
        )

        assert all(result.is_ok() for result in results), [r.error for r in results if r.is_err()]
        numbers = sorted(result.value.invoice_number for result in results)
        assert numbers == [f"INV-{seq:06d}" for seq in range(1, 6)]

    async def test_same_invoice_race_has_one_winner(self, session_factory):
        async with session_factory() as session:
            draft = await InvoicingServices(session).draft()

        results = await asyncio.gather(
            issue_in_own_session(session_factory, draft.invoice_id),
            issue_in_own_session(session_factory, draft.invoice_id),
        )

        winners = [result for result in results if result.is_ok()]
        losers = [result for result in results if result.is_err()]
        assert len(winners) == 1
        assert len(losers) == 1
        assert losers[0].error.code == ErrorCode.INVOICE_ALREADY_ISSUED

        async with session_factory() as session:
            last_seq = (
                await session.execute(
                    select(DocumentCounter.last_seq).where(
                        DocumentCounter.account_id == "acct_1",
                        DocumentCounter.document_class == DocumentClass.INVOICE,
                    )
                )
            ).scalar_one()
        assert last_seq == 1


@pytest.mark.asyncio
class TestIssuedInvoicePaging:

    async def test_invoice_issued_mid_audit_does_not_shift_pages(self, db_session):
        def issued_invoice(invoice_id, issued_at):
            return Invoice(
                id=invoice_id,
                owner_id="acct_1",
                customer_id="cust_1",
                invoice_number=f"INV-{invoice_id}",
                invoice_date=date(2024, 2, 1),
                status=InvoiceStatus.SENT,
                is_issued=True,
                issued_at=issued_at,
                invoice_hash="0" * 64,
            )

        same_moment = datetime(2024, 2, 1, 10, 0)
        db_session.add_all([
            issued_invoice("a", same_moment),
            issued_invoice("b", same_moment),
            issued_invoice("c", datetime(2024, 2, 2, 10, 0)),
        ])
        await db_session.commit()
        invoice_repo = SqlAlchemyInvoiceRepository(db_session)

        first_page = await invoice_repo.get_issued(limit=2)
        db_session.add(issued_invoice("0", datetime(2024, 1, 31, 10, 0)))
        await db_session.commit()
        last = first_page[-1]
        second_page = await invoice_repo.get_issued(limit=2, after=(last.issued_at, last.id))

        assert [invoice.id for invoice in first_page] == ["a", "b"]
        assert [invoice.id for invoice in second_page] == ["c"]
