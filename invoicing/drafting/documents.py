"""Input document shapes accepted by the normalizer.

Raw JSON documents come in three shapes, told apart by which keys are present:

- ``{customer, service}``      -> SingleServiceDocument
- ``{customer, services[...]}`` -> MultiServiceDocument
- ``{services[...]}``           -> ServicesOnlyDocument (default customer implied)

classify_document() decides the shape once; everything downstream works on the
resulting tagged union. Field names follow the camelCase keys of order documents
and also accept snake_case spellings.
"""

from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from typing import Any, Literal

import pydantic
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from invoicing.drafting.schema import ItemDiscount, ItemTax
from invoicing.shared.errors import InputShapeError


def _alias(*names: str) -> AliasChoices:
    return AliasChoices(*names)


class _Spec(BaseModel):
    """Base for raw input models: unknown keys ignored, JSON nulls mean "absent"."""

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            return {key: value for key, value in data.items() if value is not None}
        return data


class AddressSpec(_Spec):
    """Raw address; ``street`` and ``zip`` are accepted as synonyms."""

    line1: str = Field("", validation_alias=_alias("line1", "street", "address_line_1"))
    line2: str = Field("", validation_alias=_alias("line2", "address_line_2"))
    city: str = ""
    state: str = Field("", validation_alias=_alias("state", "region"))
    postal_code: str = Field("", validation_alias=_alias("postalCode", "zip", "postal_code"))
    country_code: str | None = Field(
        None, validation_alias=_alias("countryCode", "country_code", "country")
    )


class CustomerSpec(_Spec):
    first_name: str | None = Field(
        None, validation_alias=_alias("firstName", "first_name", "given_name")
    )
    last_name: str | None = Field(
        None, validation_alias=_alias("lastName", "last_name", "surname")
    )
    name: str | None = Field(None, validation_alias=_alias("name", "displayName"))
    email: str = ""
    business_name: str | None = Field(
        None, validation_alias=_alias("businessName", "business_name")
    )
    company_name: str | None = Field(
        None, validation_alias=_alias("companyName", "company_name")
    )
    phone: str | None = None
    vat_number: str | None = Field(
        None, validation_alias=_alias("vatNumber", "vat_number", "taxId", "tax_id")
    )
    address: AddressSpec | None = None


class ServiceSpec(_Spec):
    """One service entry: a type tag, a price and optional descriptive fields."""

    type: str | None = None
    price: Decimal | None = None
    quantity: Decimal | None = None
    currency: str | None = None
    service_name: str | None = Field(
        None, validation_alias=_alias("serviceName", "service_name")
    )
    url: str = ""
    title: str = ""
    description: str = ""
    anchor_text: str = Field("", validation_alias=_alias("anchorText", "anchor_text"))
    publication_date: str = Field(
        "", validation_alias=_alias("publicationDate", "publication_date")
    )
    insertion_date: str = Field(
        "", validation_alias=_alias("insertionDate", "insertion_date")
    )
    note: str | None = None
    memo: str | None = None
    reference: str | None = None
    tax: ItemTax | None = None
    discount: ItemDiscount | None = None

    @field_validator("publication_date", "insertion_date", mode="before")
    @classmethod
    def _dates_as_text(cls, value: Any) -> Any:
        if isinstance(value, date):
            return value.isoformat()
        return value


class DiscountSpec(_Spec):
    amount: Decimal | None = None
    description: str = ""


class CustomAmountSpec(_Spec):
    label: str = "Additional Charges"
    amount: Decimal


class DocumentOptions(_Spec):
    """Invoice-level options shared by every document shape."""

    note: str | None = None
    memo: str | None = None
    reference: str | None = None
    terms: str | None = None
    currency: str | None = None
    discount: DiscountSpec | None = None
    additional_recipients: list[str] = Field(
        default_factory=list,
        validation_alias=_alias("additionalRecipients", "additional_recipients"),
    )
    allow_partial_payment: bool = Field(
        False, validation_alias=_alias("allowPartialPayment", "allow_partial_payment")
    )
    allow_tip: bool = Field(False, validation_alias=_alias("allowTip", "allow_tip"))
    minimum_amount_due: Decimal | None = Field(
        None, validation_alias=_alias("minimumAmountDue", "minimum_amount_due")
    )
    custom_amount: CustomAmountSpec | None = Field(
        None, validation_alias=_alias("customAmount", "custom_amount")
    )
    invoice_number: str | None = Field(
        None, validation_alias=_alias("invoiceNumber", "invoice_number")
    )
    invoice_date: date | None = Field(
        None, validation_alias=_alias("invoiceDate", "invoice_date")
    )
    due_date: date | None = Field(None, validation_alias=_alias("dueDate", "due_date"))

    @field_validator("discount", mode="before")
    @classmethod
    def _discount_from_number(cls, value: Any) -> Any:
        # A bare number is shorthand for {"amount": number}
        if isinstance(value, (int, float, str, Decimal)) and not isinstance(value, bool):
            return {"amount": value}
        return value


class SingleServiceDocument(DocumentOptions):
    kind: Literal["single"] = "single"
    customer: CustomerSpec
    service: ServiceSpec


class MultiServiceDocument(DocumentOptions):
    kind: Literal["multi"] = "multi"
    customer: CustomerSpec
    services: list[ServiceSpec]


class ServicesOnlyDocument(DocumentOptions):
    kind: Literal["services_only"] = "services_only"
    services: list[ServiceSpec]


InputDocument = SingleServiceDocument | MultiServiceDocument | ServicesOnlyDocument


def classify_document(raw: Any) -> InputDocument:
    """Decide which shape a raw JSON document has and parse it.

    Args:
        raw: Decoded JSON document

    Returns:
        One of the three document variants

    Raises:
        InputShapeError: If the document matches no shape or a field has the wrong type
    """
    if not isinstance(raw, Mapping):
        raise InputShapeError("Input document must be a JSON object")

    has_customer = raw.get("customer") is not None
    model: type[DocumentOptions]

    if raw.get("services") is not None:
        services = raw["services"]
        if not isinstance(services, list):
            raise InputShapeError('"services" must be a list of service objects')
        if not services:
            raise InputShapeError(
                'Services array is required and must contain at least one service'
            )
        model = MultiServiceDocument if has_customer else ServicesOnlyDocument
        data: Mapping[str, Any] = raw
    elif raw.get("service") is not None:
        if has_customer:
            model = SingleServiceDocument
            data = raw
        else:
            # A lone service bills the default customer, like a one-entry services list
            model = ServicesOnlyDocument
            data = {**raw, "services": [raw["service"]]}
    else:
        raise InputShapeError('Invalid input document: must have either "service" or "services"')

    try:
        return model.model_validate(data)  # type: ignore[return-value]
    except pydantic.ValidationError as e:
        raise InputShapeError(f"Invalid input document: {e}") from e
