"""Unit tests for the plain-text invoice preview."""

import random
from datetime import datetime
from decimal import Decimal

import pytest

from invoicing.display.preview import format_invoice_preview, unconfigured_business_fields
from invoicing.drafting.schema import Address, CustomAmount, InvoiceDraft, LineItem, Party
from invoicing.payload.builder import PayloadBuilder
from invoicing.payload.schema import InvoicePayload


@pytest.fixture
def business() -> Party:
    return Party(
        given_name="Digital Marketing",
        surname="Services",
        email="billing@example.com",
        business_name="Digital Marketing Services",
    )


@pytest.fixture
def payload(business: Party) -> InvoicePayload:
    draft = InvoiceDraft(
        customer=Party(
            given_name="Ada",
            surname="Lovelace",
            email="ada@example.com",
            address=Address(line1="1 Main St", city="Springfield", state="IL", postal_code="62701"),
        ),
        business=business,
        items=[
            LineItem(
                name="Guest Post Publication #1",
                description="Guest Post Publication #1\nPublished URL: https://blog.example.com/p",
                unit_amount=Decimal("50"),
                currency_code="USD",
            ),
            LineItem(
                name="Link Insertion Service #2",
                unit_amount=Decimal("40"),
                quantity=Decimal("2"),
                currency_code="USD",
            ),
            LineItem(kind="adjustment", name="Discount", unit_amount=Decimal("-10"), currency_code="USD"),
        ],
        note="Thank you",
        terms="Payment due within 3 days.",
        invoice_number="INV-00000001-001",
    )
    builder = PayloadBuilder(clock=lambda: datetime(2024, 1, 10), rng=random.Random(0))
    return builder.build(draft)


def test_header_and_dates(payload: InvoicePayload) -> None:
    text = format_invoice_preview(payload)

    assert "INVOICE PREVIEW" in text
    assert "Invoice Number: INV-00000001-001" in text
    assert "Invoice Date: 2024-01-10" in text
    assert "Due Date: 2024-01-13" in text
    assert "Currency: USD" in text


def test_parties(payload: InvoicePayload) -> None:
    text = format_invoice_preview(payload)

    assert "FROM:\nDigital Marketing Services\nDigital Marketing Services" in text
    assert "TO:\nAda Lovelace\nada@example.com\n1 Main St\nSpringfield, IL 62701\nUS" in text


def test_items_and_total(payload: InvoicePayload) -> None:
    text = format_invoice_preview(payload)

    assert "USD 80.00" in text
    assert "TOTAL: USD 120.00" in text
    assert "USD -10.00" in text
    assert "Published URL" not in text


def test_note_and_terms(payload: InvoicePayload) -> None:
    text = format_invoice_preview(payload)

    assert "Note: Thank you" in text
    assert "Terms: Payment due within 3 days." in text


def test_missing_business_fields_are_listed(payload: InvoicePayload) -> None:
    text = format_invoice_preview(payload, ["address", "website"])

    assert "(business address, website not configured)" in text


def test_custom_amount_line(payload: InvoicePayload, business: Party) -> None:
    draft = InvoiceDraft(
        customer=Party(given_name="Ada", surname="Lovelace", email="ada@example.com"),
        business=business,
        items=[LineItem(name="Guest Post Publication", unit_amount=Decimal("40"), currency_code="USD")],
        custom_amount=CustomAmount(label="Rush fee", amount=Decimal("5")),
    )
    builder = PayloadBuilder(clock=lambda: datetime(2024, 1, 10), rng=random.Random(0))

    text = format_invoice_preview(builder.build(draft))

    assert "Rush fee: USD 5.00" in text


def test_unconfigured_business_fields(business: Party) -> None:
    assert unconfigured_business_fields(business) == ["address", "phone", "website"]

    complete = business.model_copy(
        update={
            "address": Address(line1="12 MG Road", city="Bengaluru"),
            "phone": "+91 80 1234 5678",
            "website": "https://example.com",
        }
    )
    assert unconfigured_business_fields(complete) == []
