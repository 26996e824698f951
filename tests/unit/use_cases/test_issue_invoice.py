"""Unit tests for IssueInvoice use case

Tests cover:
- Successful issuance: number, hash, status, audit
- Idempotency: issuing an issued invoice is a benign no-op
- Existing draft numbers are kept
- Collision fallbacks and their exhaustion
- Losing a concurrent issuance race
- Audit failure never undoes issuance
"""

import logging
import re
from datetime import date
from decimal import Decimal

import pytest
from unittest.mock import AsyncMock, MagicMock

from src.app.errors import ErrorCode
from src.app.services.invoice_hasher import compute_invoice_hash
from src.app.services.numbering_service import NumberingService
from src.app.use_cases.invoicing.issue_invoice import IssueInvoice
from src.domain.audit_log import AuditAction
from src.domain.document_counter import DocumentClass
from src.domain.exceptions import DuplicateDocumentNumberError
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.invoice_item import InvoiceItem


@pytest.fixture
def draft_invoice():
    return Invoice(
        id="inv-1",
        owner_id="acct_1",
        customer_id="cust_1",
        invoice_date=date(2024, 2, 1),
        amount=Decimal("500.00"),
        vat_rate=Decimal("18"),
        vat_amount=Decimal("90.00"),
        total_amount=Decimal("590.00"),
        status=InvoiceStatus.DRAFT,
        is_issued=False,
    )


@pytest.fixture
def invoice_items():
    return [
        InvoiceItem(
            id="item-1",
            invoice_id="inv-1",
            position=0,
            description="Consulting services",
            quantity=Decimal("5"),
            unit_price=Decimal("100.00"),
            vat_rate=Decimal("18"),
        )
    ]


@pytest.fixture
def mock_invoice_repo(draft_invoice):
    repo = MagicMock()
    repo.get_by_id = AsyncMock(return_value=draft_invoice)
    repo.mark_issued = AsyncMock(return_value=True)
    return repo


@pytest.fixture
def mock_invoice_item_repo(invoice_items):
    repo = MagicMock()
    repo.get_by_invoice_id = AsyncMock(return_value=invoice_items)
    return repo


@pytest.fixture
def mock_sequence_repo():
    repo = MagicMock()
    repo.next_sequence_number = AsyncMock(return_value="INV-000001")
    return repo


@pytest.fixture
def issue_use_case(mock_uow, mock_invoice_repo, mock_invoice_item_repo, mock_sequence_repo, mock_audit_writer):
    return IssueInvoice(
        uow=mock_uow,
        invoice_repo=mock_invoice_repo,
        invoice_item_repo=mock_invoice_item_repo,
        numbering_service=NumberingService(mock_sequence_repo),
        audit_writer=mock_audit_writer,
    )


@pytest.mark.asyncio
class TestIssueInvoiceSuccess:

    async def test_issue_draft(
        self, issue_use_case, mock_invoice_repo, mock_uow, draft_invoice, invoice_items
    ):
        result = await issue_use_case.execute("inv-1", "acct_1", user_id="user_1")

        assert result.is_ok()
        response = result.value
        assert response.invoice_number == "INV-000001"
        assert response.status == "sent"
        assert response.is_issued is True
        assert re.fullmatch(r"[0-9a-f]{64}", response.invoice_hash)
        assert "INV-000001" in response.message
        assert "Malta VAT" in response.message
        assert response.warnings == []
        mock_uow.commit.assert_called_once()

    async def test_hash_covers_final_number_and_issued_at(
        self, issue_use_case, mock_invoice_repo, draft_invoice, invoice_items
    ):
        result = await issue_use_case.execute("inv-1", "acct_1")

        response = result.value
        expected = compute_invoice_hash(
            draft_invoice, invoice_items, invoice_number="INV-000001", issued_at=response.issued_at
        )
        assert response.invoice_hash == expected

        kwargs = mock_invoice_repo.mark_issued.call_args.kwargs
        assert kwargs["invoice_number"] == "INV-000001"
        assert kwargs["invoice_hash"] == expected
        assert kwargs["issued_at"] == response.issued_at

    async def test_locks_invoice_and_scopes_to_account(self, issue_use_case, mock_invoice_repo):
        await issue_use_case.execute("inv-1", "acct_1")

        mock_invoice_repo.get_by_id.assert_called_once_with("inv-1", "acct_1", for_update=True)

    async def test_draws_from_invoice_sequence(self, issue_use_case, mock_sequence_repo):
        await issue_use_case.execute("inv-1", "acct_1")

        mock_sequence_repo.next_sequence_number.assert_called_once_with(
            "acct_1", DocumentClass.INVOICE, "INV-", 6
        )

    async def test_records_issued_audit_entry(self, issue_use_case, mock_audit_writer):
        result = await issue_use_case.execute("inv-1", "acct_1", user_id="user_1")

        mock_audit_writer.record.assert_called_once()
        kwargs = mock_audit_writer.record.call_args.kwargs
        assert kwargs["invoice_id"] == "inv-1"
        assert kwargs["user_id"] == "user_1"
        assert kwargs["action"] == AuditAction.ISSUED
        assert kwargs["new_data"]["invoice_number"] == "INV-000001"
        assert kwargs["new_data"]["invoice_hash"] == result.value.invoice_hash

    async def test_keeps_existing_draft_number(
        self, issue_use_case, mock_invoice_repo, mock_sequence_repo, draft_invoice
    ):
        draft_invoice.invoice_number = "INV-LEGACY-7"

        result = await issue_use_case.execute("inv-1", "acct_1")

        assert result.value.invoice_number == "INV-LEGACY-7"
        mock_sequence_repo.next_sequence_number.assert_not_called()

    async def test_audit_failure_is_a_warning(self, issue_use_case, mock_audit_writer, mock_uow):
        mock_audit_writer.record = AsyncMock(return_value="Audit log entry 'issued' was not recorded")

        result = await issue_use_case.execute("inv-1", "acct_1")

        assert result.is_ok()
        assert result.value.warnings == ["Audit log entry 'issued' was not recorded"]
        mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
class TestIssueInvoiceAlreadyIssued:

    async def test_already_issued_is_benign_noop(
        self, issue_use_case, mock_invoice_repo, mock_sequence_repo, mock_uow, mock_audit_writer, draft_invoice
    ):
        draft_invoice.is_issued = True
        draft_invoice.invoice_number = "INV-000005"
        draft_invoice.status = InvoiceStatus.SENT

        result = await issue_use_case.execute("inv-1", "acct_1")

        assert result.is_err()
        assert result.error.code == ErrorCode.INVOICE_ALREADY_ISSUED
        assert "INV-000005" in result.error.message
        assert "credit note" in result.error.message
        mock_invoice_repo.mark_issued.assert_not_called()
        mock_sequence_repo.next_sequence_number.assert_not_called()
        mock_uow.commit.assert_not_called()
        mock_audit_writer.record.assert_not_called()

    async def test_lost_race_is_reported_as_already_issued(
        self, issue_use_case, mock_invoice_repo, mock_uow, mock_audit_writer
    ):
        mock_invoice_repo.mark_issued = AsyncMock(return_value=False)

        result = await issue_use_case.execute("inv-1", "acct_1")

        assert result.is_err()
        assert result.error.code == ErrorCode.INVOICE_ALREADY_ISSUED
        mock_uow.rollback.assert_called_once()
        mock_uow.commit.assert_not_called()
        mock_audit_writer.record.assert_not_called()


@pytest.mark.asyncio
class TestIssueInvoiceCollisions:

    async def test_collision_falls_back_to_suffix(self, issue_use_case, mock_invoice_repo, caplog):
        mock_invoice_repo.mark_issued = AsyncMock(
            side_effect=[DuplicateDocumentNumberError("INV-000001"), True]
        )

        with caplog.at_level(logging.WARNING):
            result = await issue_use_case.execute("inv-1", "acct_1")

        assert result.is_ok()
        assert result.value.invoice_number == "INV-000001-R1"
        assert mock_invoice_repo.mark_issued.call_count == 2
        assert any("INV-000001-R1" in r.getMessage() for r in caplog.records)

    async def test_exhausted_collisions_fail_loudly(
        self, issue_use_case, mock_invoice_repo, mock_uow, mock_audit_writer
    ):
        mock_invoice_repo.mark_issued = AsyncMock(
            side_effect=DuplicateDocumentNumberError("INV-000001")
        )

        result = await issue_use_case.execute("inv-1", "acct_1")

        assert result.is_err()
        assert result.error.code == ErrorCode.DOCUMENT_NUMBER_COLLISION
        assert mock_invoice_repo.mark_issued.call_count == 3
        mock_uow.rollback.assert_called_once()
        mock_uow.commit.assert_not_called()
        mock_audit_writer.record.assert_not_called()

    async def test_existing_number_collision_is_not_suffixed(
        self, issue_use_case, mock_invoice_repo, draft_invoice
    ):
        draft_invoice.invoice_number = "INV-000010"
        mock_invoice_repo.mark_issued = AsyncMock(
            side_effect=DuplicateDocumentNumberError("INV-000010")
        )

        result = await issue_use_case.execute("inv-1", "acct_1")

        assert result.error.code == ErrorCode.DOCUMENT_NUMBER_COLLISION
        assert mock_invoice_repo.mark_issued.call_count == 1


@pytest.mark.asyncio
class TestIssueInvoiceErrors:

    async def test_invoice_not_found(self, issue_use_case, mock_invoice_repo, mock_uow):
        mock_invoice_repo.get_by_id = AsyncMock(return_value=None)

        result = await issue_use_case.execute("missing", "acct_1")

        assert result.is_err()
        assert result.error.code == ErrorCode.INVOICE_NOT_FOUND
        mock_uow.commit.assert_not_called()

    async def test_database_error_rolls_back(self, issue_use_case, mock_invoice_repo, mock_uow):
        mock_invoice_repo.mark_issued = AsyncMock(side_effect=Exception("connection lost"))

        result = await issue_use_case.execute("inv-1", "acct_1")

        assert result.is_err()
        assert result.error.code == ErrorCode.ISSUE_INVOICE_FAILED
        assert "connection lost" in result.error.reason
        mock_uow.rollback.assert_called_once()
