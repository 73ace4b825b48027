"""PayPal Invoicing v2 wire models.

Field names match the REST schema exactly. Optional sub-objects default to None
and are dropped on serialization: PayPal treats the mere presence of ``tax``,
``discount`` or ``phones`` as meaningful, so they must never be sent empty.

Reference: https://developer.paypal.com/docs/api/invoicing/v2/
"""

from typing import Any, Literal

from pydantic import BaseModel


class Money(BaseModel):
    currency_code: str
    value: str


class Name(BaseModel):
    given_name: str
    surname: str


class WireAddress(BaseModel):
    address_line_1: str = ""
    address_line_2: str = ""
    admin_area_2: str = ""  # city
    admin_area_1: str = ""  # state
    postal_code: str = ""
    country_code: str


class Phone(BaseModel):
    country_code: str
    national_number: str
    phone_type: Literal["HOME", "MOBILE", "FAX", "OTHER", "PAGER"] = "HOME"


class PaymentTerm(BaseModel):
    term_type: Literal["DUE_ON_DATE_SPECIFIED"] = "DUE_ON_DATE_SPECIFIED"
    due_date: str


class Detail(BaseModel):
    invoice_number: str
    reference: str = ""
    invoice_date: str
    currency_code: str
    note: str = ""
    term: str = ""
    memo: str = ""
    payment_term: PaymentTerm


class Invoicer(BaseModel):
    name: Name
    business_name: str | None = None
    address: WireAddress | None = None
    phones: list[Phone] | None = None
    website: str = ""
    tax_id: str = ""
    additional_notes: str = ""


class BillingInfo(BaseModel):
    name: Name
    address: WireAddress | None = None
    email_address: str
    phones: list[Phone] | None = None
    business_name: str = ""
    additional_info_value: str = ""


class Recipient(BaseModel):
    billing_info: BillingInfo


class Tax(BaseModel):
    name: str
    percent: str


class Discount(BaseModel):
    percent: str | None = None
    amount: Money | None = None


class Item(BaseModel):
    name: str
    description: str = ""
    quantity: str
    unit_amount: Money
    tax: Tax | None = None
    discount: Discount | None = None
    unit_of_measure: Literal["QUANTITY", "HOURS", "AMOUNT"] = "QUANTITY"


class PartialPayment(BaseModel):
    allow_partial_payment: bool = False
    minimum_amount_due: Money | None = None


class Configuration(BaseModel):
    partial_payment: PartialPayment
    allow_tip: bool = False
    tax_calculated_after_discount: bool = True
    tax_inclusive: bool = False


class EmailAddress(BaseModel):
    email_address: str


class CustomCharge(BaseModel):
    label: str
    amount: Money


class AmountBreakdown(BaseModel):
    custom: CustomCharge


class Amount(BaseModel):
    breakdown: AmountBreakdown


class InvoicePayload(BaseModel):
    """Complete create-invoice request body."""

    detail: Detail
    invoicer: Invoicer
    primary_recipients: list[Recipient]
    items: list[Item]
    configuration: Configuration
    additional_recipients: list[EmailAddress] | None = None
    amount: Amount | None = None

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the JSON body sent to PayPal, without absent optional objects."""
        return self.model_dump(mode="json", exclude_none=True)
