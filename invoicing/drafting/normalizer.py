"""Normalize raw input documents into canonical InvoiceDraft records.

All fallback values applied during normalization are listed in the tables below;
nothing else in this module invents a value.
"""

import logging
from collections.abc import Mapping
from decimal import Decimal
from typing import Any, assert_never

import pydantic

from invoicing.drafting.descriptions import (
    GUEST_POST_NAME,
    LINK_INSERTION_NAME,
    guest_post_description,
    link_insertion_description,
)
from invoicing.drafting.documents import (
    AddressSpec,
    CustomerSpec,
    InputDocument,
    MultiServiceDocument,
    ServiceSpec,
    ServicesOnlyDocument,
    SingleServiceDocument,
    classify_document,
)
from invoicing.drafting.schema import (
    Address,
    CustomAmount,
    DraftDefaults,
    InvoiceDraft,
    LineItem,
    Party,
)
from invoicing.shared.errors import InputShapeError, UnknownServiceTypeError

logger = logging.getLogger(__name__)

GUEST_POST = "guest post"
LINK_INSERTION = "link insertion"

# Customer fields left empty by the input
CUSTOMER_DEFAULTS: dict[str, str] = {
    "given_name": "Customer",
    "surname": "",
    "email": "",
    "business_name": "",
    "phone": "",
    "tax_id": "",
}

# Service fields left empty by the input
SERVICE_DEFAULTS: dict[str, Any] = {
    "quantity": Decimal("1"),
}

# Invoice-level text; {days} is the payment term length
DRAFT_DEFAULTS: dict[str, str] = {
    "note_single": "Thank you for choosing our services. Payment is due within {days} days.",
    "note_bulk": (
        "Thank you for choosing our services. Bulk order payment is due within {days} days."
    ),
    "terms": "Payment due within {days} days. No refunds for digital services once delivered.",
    "memo": "",
    "reference": "",
}

DISCOUNT_NAME = "Discount"
DISCOUNT_DESCRIPTION = "Bulk order discount"


def _first(*values: Any) -> Any:
    """Return the first value that is neither None nor an empty string."""
    for value in values:
        if value is not None and value != "":
            return value
    return None


def _with_defaults(values: Mapping[str, Any], defaults: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(values)
    for key, default in defaults.items():
        if merged.get(key) is None or merged.get(key) == "":
            merged[key] = default
    return merged


def split_display_name(name: str) -> tuple[str, str]:
    """Split a combined name at the first space.

    Args:
        name: Combined display name, e.g. "Ada King Lovelace"

    Returns:
        (given name, surname); surname is empty when there is no space
    """
    given, _, surname = name.strip().partition(" ")
    return given, surname


def service_kind(service_type: str | None) -> str:
    """Canonical service tag: "guest post" or "link insertion".

    Case-insensitive; underscores and hyphens count as spaces.

    Raises:
        UnknownServiceTypeError: For any other tag
    """
    tag = " ".join((service_type or "").lower().replace("_", " ").replace("-", " ").split())
    if tag in (GUEST_POST, LINK_INSERTION):
        return tag
    raise UnknownServiceTypeError(service_type)


def normalize_address(spec: AddressSpec | None) -> Address | None:
    if spec is None:
        return None
    return Address(
        line1=spec.line1,
        line2=spec.line2,
        city=spec.city,
        state=spec.state,
        postal_code=spec.postal_code,
        country_code=spec.country_code or None,
    )


def normalize_customer(spec: CustomerSpec) -> Party:
    """Map a raw customer onto a Party.

    A combined ``name`` fills whichever of first and last name is missing.
    """
    given_name, surname = spec.first_name, spec.last_name
    if spec.name:
        split_given, split_surname = split_display_name(spec.name)
        given_name = given_name or split_given
        surname = surname or split_surname

    values = _with_defaults(
        {
            "given_name": given_name,
            "surname": surname,
            "email": spec.email,
            "business_name": _first(spec.business_name, spec.company_name),
            "phone": spec.phone,
            "tax_id": spec.vat_number,
        },
        CUSTOMER_DEFAULTS,
    )
    return Party(**values, address=normalize_address(spec.address))


def normalize_service(service: ServiceSpec, suffix: str, currency_code: str) -> LineItem:
    """Turn one service entry into a billable LineItem.

    Args:
        service: Raw service entry
        suffix: Item number suffix such as " #2", empty for single-service invoices
        currency_code: Currency used when the service names none

    Raises:
        UnknownServiceTypeError: If the service type is not recognized
    """
    kind = service_kind(service.type)
    values = _with_defaults({"quantity": service.quantity}, SERVICE_DEFAULTS)

    if kind == GUEST_POST:
        name = f"{service.service_name or GUEST_POST_NAME}{suffix}"
        description = guest_post_description(
            service_name=name,
            url=service.url,
            title=service.title,
            details=service.description,
            publication_date=service.publication_date,
        )
    else:
        name = f"{LINK_INSERTION_NAME}{suffix}"
        description = link_insertion_description(
            url=service.url,
            anchor_text=service.anchor_text,
            insertion_date=service.insertion_date,
            details=service.description,
        )

    return LineItem(
        kind="billable",
        name=name,
        description=description,
        quantity=values["quantity"],
        unit_amount=service.price,
        currency_code=service.currency or currency_code,
        tax=service.tax,
        discount=service.discount,
    )


def _discount_item(document: InputDocument, currency_code: str) -> LineItem | None:
    discount = document.discount
    if discount is None or discount.amount is None or discount.amount <= 0:
        return None
    return LineItem(
        kind="adjustment",
        name=DISCOUNT_NAME,
        description=discount.description or DISCOUNT_DESCRIPTION,
        quantity=Decimal("1"),
        unit_amount=-abs(discount.amount),
        currency_code=currency_code,
    )


def normalize_document(raw: Any, defaults: DraftDefaults) -> InvoiceDraft:
    """Normalize a raw input document into an InvoiceDraft.

    Accepts a decoded JSON document in any of the supported shapes, an already
    classified InputDocument, or a draft (returned unchanged). Draft-shaped
    mappings (carrying ``items`` rather than services) are re-read as drafts.

    Args:
        raw: Input document
        defaults: Business identity, fallback customer and invoice defaults

    Returns:
        Canonical InvoiceDraft

    Raises:
        InputShapeError: If the document shape is not recognized
        UnknownServiceTypeError: If a service type is not recognized
    """
    if isinstance(raw, InvoiceDraft):
        return raw
    draft_shaped = isinstance(raw, Mapping) and "items" in raw
    if draft_shaped and "service" not in raw and "services" not in raw:
        try:
            return InvoiceDraft.model_validate(raw)
        except pydantic.ValidationError as e:
            raise InputShapeError(f"Invalid invoice draft: {e}") from e

    document = raw if isinstance(raw, InputDocument) else classify_document(raw)

    if isinstance(document, SingleServiceDocument):
        customer = normalize_customer(document.customer)
        services = [document.service]
    elif isinstance(document, MultiServiceDocument):
        customer = normalize_customer(document.customer)
        services = document.services
    elif isinstance(document, ServicesOnlyDocument):
        customer = defaults.default_customer
        services = document.services
    else:
        assert_never(document)

    if not services:
        raise InputShapeError("At least one service is required")

    logger.debug(f"Normalizing {document.kind} document with {len(services)} service(s)")

    currency_code = document.currency or defaults.currency_code
    bulk = len(services) > 1
    items = [
        normalize_service(service, f" #{index}" if bulk else "", currency_code)
        for index, service in enumerate(services, 1)
    ]
    discount = _discount_item(document, currency_code)
    if discount is not None:
        items.append(discount)

    days = defaults.due_in_days
    if bulk:
        note = _first(document.note, DRAFT_DEFAULTS["note_bulk"].format(days=days))
        reference = _first(document.reference, DRAFT_DEFAULTS["reference"])
        memo = _first(document.memo, DRAFT_DEFAULTS["memo"])
    else:
        single = services[0]
        note = _first(
            document.note, single.note, DRAFT_DEFAULTS["note_single"].format(days=days)
        )
        reference = _first(
            document.reference, single.reference, single.url, DRAFT_DEFAULTS["reference"]
        )
        memo = _first(document.memo, single.memo, DRAFT_DEFAULTS["memo"])

    custom_amount = (
        CustomAmount(label=document.custom_amount.label, amount=document.custom_amount.amount)
        if document.custom_amount is not None
        else None
    )

    return InvoiceDraft(
        customer=customer,
        business=defaults.business,
        items=items,
        currency_code=currency_code,
        note=note or "",
        terms=_first(document.terms, DRAFT_DEFAULTS["terms"].format(days=days)),
        memo=memo or "",
        reference=reference or "",
        due_in_days=days,
        allow_partial_payment=document.allow_partial_payment,
        allow_tip=document.allow_tip,
        minimum_amount_due=document.minimum_amount_due,
        additional_recipients=document.additional_recipients,
        custom_amount=custom_amount,
        invoice_number=document.invoice_number,
        invoice_date=document.invoice_date,
        due_date=document.due_date,
    )
