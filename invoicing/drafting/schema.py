"""Canonical invoice draft models.

An InvoiceDraft is the normalized, pre-submission description of an invoice.
Drafts are frozen once built; the validator and the payload builder only read them.
"""

from datetime import date
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from invoicing.shared.config import Settings


class Address(BaseModel):
    """Postal address attached to a customer or to the business."""

    model_config = ConfigDict(frozen=True)

    line1: str = ""
    line2: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country_code: str | None = Field(None, description="ISO 3166-1 alpha-2 code")


class Party(BaseModel):
    """Customer or business referenced by an invoice."""

    model_config = ConfigDict(frozen=True)

    given_name: str = ""
    surname: str = ""
    email: str = ""
    business_name: str = ""
    phone: str = ""
    tax_id: str = Field("", description="VAT / tax identifier")
    website: str = ""
    address: Address | None = None


class ItemTax(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = "Tax"
    percent: Decimal = Decimal("0")


class ItemDiscount(BaseModel):
    model_config = ConfigDict(frozen=True)

    percent: Decimal | None = None
    amount: Decimal | None = None


class LineItem(BaseModel):
    """One billable row, or an adjustment row such as a discount.

    Adjustment items carry a zero or negative unit amount; billable items must be
    strictly positive.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["billable", "adjustment"] = "billable"
    name: str = ""
    description: str = ""
    quantity: Decimal | None = Decimal("1")
    unit_amount: Decimal | None = None
    currency_code: str | None = None
    tax: ItemTax | None = None
    discount: ItemDiscount | None = None


class CustomAmount(BaseModel):
    """Extra charge shown in the amount breakdown (fees, rush delivery, ...)."""

    model_config = ConfigDict(frozen=True)

    label: str = "Additional Charges"
    amount: Decimal


class InvoiceDraft(BaseModel):
    """Canonical invoice record consumed by the validator and the payload builder."""

    model_config = ConfigDict(frozen=True)

    customer: Party
    business: Party
    items: list[LineItem] = Field(default_factory=list)
    currency_code: str = "USD"
    note: str = ""
    terms: str = ""
    memo: str = ""
    reference: str = ""
    due_in_days: int = Field(3, ge=0)
    allow_partial_payment: bool = False
    allow_tip: bool = False
    minimum_amount_due: Decimal | None = None
    additional_recipients: list[str] = Field(default_factory=list)
    custom_amount: CustomAmount | None = None

    # Explicit overrides; the builder computes these when absent
    invoice_number: str | None = None
    invoice_date: date | None = None
    due_date: date | None = None


class DraftDefaults(BaseModel):
    """Explicit configuration injected into the normalizer.

    Attributes:
        business: Invoicer identity printed on every invoice
        default_customer: Customer substituted when a document only lists services
        currency_code: Currency used when neither document nor service names one
        due_in_days: Payment term length
    """

    model_config = ConfigDict(frozen=True)

    business: Party
    default_customer: Party
    currency_code: str = "USD"
    due_in_days: int = 3

    @classmethod
    def from_settings(cls, settings: Settings) -> "DraftDefaults":
        """Build defaults from application settings.

        Args:
            settings: Application settings

        Returns:
            DraftDefaults carrying the configured business and fallback customer
        """
        address_fields = {
            "line1": settings.business_address_line_1,
            "line2": settings.business_address_line_2,
            "city": settings.business_city,
            "state": settings.business_state,
            "postal_code": settings.business_postal_code,
        }
        has_address = any(address_fields.values()) or bool(settings.business_country)
        address = (
            Address(**address_fields, country_code=settings.business_country or None)
            if has_address
            else None
        )

        business = Party(
            given_name=settings.business_contact_given_name,
            surname=settings.business_contact_surname,
            email=settings.business_email,
            business_name=settings.business_name,
            phone=settings.business_phone,
            website=settings.business_website,
            address=address,
        )
        default_customer = Party(
            given_name=settings.default_customer_given_name,
            surname=settings.default_customer_surname,
            email=settings.default_customer_email,
            business_name=settings.default_customer_business_name,
        )
        return cls(
            business=business,
            default_customer=default_customer,
            currency_code=settings.currency_code,
            due_in_days=settings.due_in_days,
        )
