"""Unit tests for invoice draft validation."""

from decimal import Decimal

import pytest

from invoicing.drafting.schema import Address, InvoiceDraft, LineItem, Party
from invoicing.validation.validator import (
    ValidationResult,
    is_country_code,
    is_currency_code,
    is_valid_email,
    validate_business_info,
    validate_customer_info,
    validate_invoice,
    validate_invoice_items,
)


@pytest.fixture
def customer() -> Party:
    return Party(given_name="Ada", surname="Lovelace", email="ada@example.com")


@pytest.fixture
def business() -> Party:
    return Party(
        given_name="Digital Marketing",
        surname="Services",
        email="billing@example.com",
        business_name="Digital Marketing Services",
    )


@pytest.fixture
def item() -> LineItem:
    return LineItem(name="Guest Post Publication", unit_amount=Decimal("40"), currency_code="USD")


class TestPrimitives:
    @pytest.mark.parametrize("value", ["ada@example.com", "a.b+tag@sub.example.org"])
    def test_valid_emails(self, value: str) -> None:
        assert is_valid_email(value) is True

    @pytest.mark.parametrize("value", ["", None, "not-an-email", "ada@", "@example.com"])
    def test_invalid_emails(self, value: str | None) -> None:
        assert is_valid_email(value) is False

    def test_country_codes(self) -> None:
        assert is_country_code("US") is True
        assert is_country_code("in") is True
        assert is_country_code("XX") is False
        assert is_country_code("USA") is False

    def test_currency_codes(self) -> None:
        assert is_currency_code("USD") is True
        assert is_currency_code("eur") is True
        assert is_currency_code("ABC") is False
        assert is_currency_code(None) is False


class TestCustomerValidation:
    def test_valid_customer(self, customer: Party) -> None:
        assert validate_customer_info(customer) == ValidationResult(is_valid=True, errors=[])

    def test_missing_everything(self) -> None:
        result = validate_customer_info(Party())

        assert result.is_valid is False
        assert result.errors == [
            "Valid customer email is required",
            "Customer first name is required",
            "Customer last name is required",
        ]

    def test_whitespace_names_are_blank(self, customer: Party) -> None:
        result = validate_customer_info(customer.model_copy(update={"given_name": "  "}))

        assert result.errors == ["Customer first name is required"]

    def test_address_limits(self, customer: Party) -> None:
        address = Address(line1="x" * 301, city="y" * 121, country_code="ZZ")

        result = validate_customer_info(customer.model_copy(update={"address": address}))

        assert result.errors == [
            "Address line 1 must be at most 300 characters",
            "City must be at most 120 characters",
            "Country code must be a valid ISO 3166-1 alpha-2 code",
        ]

    def test_address_without_country_is_fine(self, customer: Party) -> None:
        address = Address(line1="1 Main St", city="Springfield")

        result = validate_customer_info(customer.model_copy(update={"address": address}))

        assert result.is_valid is True


class TestItemValidation:
    def test_valid_item(self, item: LineItem) -> None:
        assert validate_invoice_items([item]).is_valid is True

    def test_empty_items(self) -> None:
        assert validate_invoice_items([]).errors == ["At least one invoice item is required"]

    def test_non_sequence_items(self) -> None:
        assert validate_invoice_items(None).errors == ["At least one invoice item is required"]

    def test_item_errors_carry_position(self, item: LineItem) -> None:
        bad = LineItem(name="", quantity=Decimal("0"), unit_amount=Decimal("0"), currency_code="US")

        result = validate_invoice_items([item, bad])

        assert result.errors == [
            "Item 2: Name is required",
            "Item 2: Valid quantity is required",
            "Item 2: Valid unit amount is required",
            "Item 2: Valid currency code is required",
        ]

    def test_length_limits(self, item: LineItem) -> None:
        long_item = item.model_copy(update={"name": "n" * 201, "description": "d" * 1001})

        result = validate_invoice_items([long_item])

        assert result.errors == [
            "Item 1: Name must be at most 200 characters",
            "Item 1: Description must be at most 1000 characters",
        ]

    def test_missing_unit_amount(self, item: LineItem) -> None:
        result = validate_invoice_items([item.model_copy(update={"unit_amount": None})])

        assert result.errors == ["Item 1: Valid unit amount is required"]

    def test_negative_adjustment_is_allowed(self) -> None:
        discount = LineItem(
            kind="adjustment", name="Discount", unit_amount=Decimal("-10"), currency_code="USD"
        )

        assert validate_invoice_items([discount]).is_valid is True

    def test_positive_adjustment_is_rejected(self) -> None:
        discount = LineItem(
            kind="adjustment", name="Discount", unit_amount=Decimal("10"), currency_code="USD"
        )

        assert validate_invoice_items([discount]).errors == [
            "Item 1: Adjustment amount must not be positive"
        ]

    def test_adjustment_without_amount(self) -> None:
        discount = LineItem(kind="adjustment", name="Discount", currency_code="USD")

        assert validate_invoice_items([discount]).errors == [
            "Item 1: Valid adjustment amount is required"
        ]


class TestBusinessValidation:
    def test_valid_business(self, business: Party) -> None:
        assert validate_business_info(business).is_valid is True

    def test_missing_name_and_email(self) -> None:
        assert validate_business_info(Party()).errors == [
            "Business name is required",
            "Valid business email is required",
        ]


class TestValidateInvoice:
    def test_valid_draft(self, customer: Party, business: Party, item: LineItem) -> None:
        draft = InvoiceDraft(customer=customer, business=business, items=[item])

        assert validate_invoice(draft) == ValidationResult(is_valid=True, errors=[])

    def test_reports_every_group_in_order(self, business: Party) -> None:
        draft = InvoiceDraft(
            customer=Party(given_name="Ada", surname="Lovelace", email="invalid"),
            business=business.model_copy(update={"business_name": ""}),
            items=[],
        )

        result = validate_invoice(draft)

        assert result.is_valid is False
        assert result.errors == [
            "Valid customer email is required",
            "At least one invoice item is required",
            "Business name is required",
        ]
