"""Unit tests for the invoice fiscal hash

Tests cover:
- Deterministic digest for the same stored content
- Decimal representation independence
- Item ordering by position
- Sensitivity to every hashed field
- Overrides for values about to be persisted
"""

import re
from datetime import date, datetime
from decimal import Decimal

import pytest

from src.app.services.invoice_hasher import build_hash_payload, compute_invoice_hash
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.invoice_item import InvoiceItem


@pytest.fixture
def issued_invoice():
    return Invoice(
        id="inv-1",
        owner_id="acct_1",
        customer_id="cust_1",
        invoice_number="INV-000001",
        invoice_date=date(2024, 2, 1),
        amount=Decimal("500.00"),
        vat_rate=Decimal("18"),
        vat_amount=Decimal("90.00"),
        total_amount=Decimal("590.00"),
        status=InvoiceStatus.SENT,
        is_issued=True,
        issued_at=datetime(2024, 2, 1, 9, 30, 0, 123456),
    )


@pytest.fixture
def items():
    return [
        InvoiceItem(
            id="item-1",
            invoice_id="inv-1",
            position=0,
            description="Consulting services",
            quantity=Decimal("5"),
            unit_price=Decimal("100.00"),
            vat_rate=Decimal("18"),
        ),
        InvoiceItem(
            id="item-2",
            invoice_id="inv-1",
            position=1,
            description="Travel",
            quantity=Decimal("1"),
            unit_price=Decimal("0"),
            vat_rate=None,
        ),
    ]


class TestComputeInvoiceHash:

    def test_digest_is_64_lowercase_hex(self, issued_invoice, items):
        digest = compute_invoice_hash(issued_invoice, items)

        assert re.fullmatch(r"[0-9a-f]{64}", digest)

    def test_same_content_hashes_identically(self, issued_invoice, items):
        assert compute_invoice_hash(issued_invoice, items) == compute_invoice_hash(issued_invoice, items)

    def test_decimal_scale_does_not_change_digest(self, issued_invoice, items):
        """Values read back as Numeric(18,6) must hash like the values written"""
        before = compute_invoice_hash(issued_invoice, items)

        issued_invoice.amount = Decimal("500.000000")
        issued_invoice.total_amount = Decimal("590.000000")
        issued_invoice.vat_rate = Decimal("18.0000")
        items[0].unit_price = Decimal("100.000000")
        items[0].quantity = Decimal("5.000000")

        assert compute_invoice_hash(issued_invoice, items) == before

    def test_items_are_hashed_in_position_order(self, issued_invoice, items):
        assert compute_invoice_hash(issued_invoice, items) == compute_invoice_hash(
            issued_invoice, list(reversed(items))
        )

    @pytest.mark.parametrize(
        "field, value",
        [
            ("invoice_number", "INV-000002"),
            ("invoice_date", date(2024, 2, 2)),
            ("customer_id", "cust_2"),
            ("amount", Decimal("499.99")),
            ("vat_rate", Decimal("7")),
            ("total_amount", Decimal("589.99")),
            ("issued_at", datetime(2024, 2, 1, 9, 30, 1)),
        ],
    )
    def test_changing_a_hashed_field_changes_digest(self, issued_invoice, items, field, value):
        before = compute_invoice_hash(issued_invoice, items)

        setattr(issued_invoice, field, value)

        assert compute_invoice_hash(issued_invoice, items) != before

    def test_changing_an_item_changes_digest(self, issued_invoice, items):
        before = compute_invoice_hash(issued_invoice, items)

        items[0].unit_price = Decimal("90.00")

        assert compute_invoice_hash(issued_invoice, items) != before

    def test_status_is_not_part_of_digest(self, issued_invoice, items):
        before = compute_invoice_hash(issued_invoice, items)

        issued_invoice.status = InvoiceStatus.PAID

        assert compute_invoice_hash(issued_invoice, items) == before

    def test_overrides_match_hash_of_persisted_values(self, issued_invoice, items):
        issued_at = datetime(2024, 3, 1, 12, 0, 0)
        draft = Invoice(
            id="inv-1",
            owner_id="acct_1",
            customer_id="cust_1",
            invoice_date=date(2024, 2, 1),
            amount=Decimal("500.00"),
            vat_rate=Decimal("18"),
            vat_amount=Decimal("90.00"),
            total_amount=Decimal("590.00"),
        )

        at_issue = compute_invoice_hash(draft, items, invoice_number="INV-000009", issued_at=issued_at)

        issued_invoice.invoice_number = "INV-000009"
        issued_invoice.issued_at = issued_at
        assert compute_invoice_hash(issued_invoice, items) == at_issue


class TestBuildHashPayload:

    def test_payload_field_order(self, issued_invoice, items):
        payload = build_hash_payload(issued_invoice, items)

        assert list(payload.keys()) == [
            "invoice_number",
            "invoice_date",
            "customer_id",
            "amount",
            "vat_rate",
            "total_amount",
            "issued_at",
            "items",
        ]
        assert list(payload["items"][0].keys()) == ["description", "quantity", "unit_price", "vat_rate"]

    def test_payload_canonical_values(self, issued_invoice, items):
        payload = build_hash_payload(issued_invoice, items)

        assert payload["amount"] == "500"
        assert payload["vat_rate"] == "18"
        assert payload["invoice_date"] == "2024-02-01"
        assert payload["issued_at"] == "2024-02-01T09:30:00.123456"
        assert payload["items"][1]["vat_rate"] is None
        assert payload["items"][1]["unit_price"] == "0"
