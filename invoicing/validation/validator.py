"""Field-level validation of invoice drafts before submission.

Checks mirror PayPal's documented field limits so a draft that passes here is not
rejected for malformed fields. Validation never raises; every violation becomes
one human-readable message.
"""

from collections.abc import Sequence
from decimal import Decimal
from typing import Any

import pycountry
from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel

from invoicing.drafting.schema import InvoiceDraft, LineItem, Party

MAX_ADDRESS_LINE_LENGTH = 300
MAX_CITY_LENGTH = 120
MAX_ITEM_NAME_LENGTH = 200
MAX_ITEM_DESCRIPTION_LENGTH = 1000


class ValidationResult(BaseModel):
    """Outcome of a validation pass.

    Attributes:
        is_valid: True when no constraint was violated
        errors: Violations in check order (customer, items, business)
    """

    is_valid: bool
    errors: list[str]

    @classmethod
    def from_errors(cls, errors: list[str]) -> "ValidationResult":
        return cls(is_valid=not errors, errors=errors)


def is_valid_email(value: str | None) -> bool:
    """Syntax-only email check (no DNS lookups)."""
    if not value:
        return False
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def is_country_code(value: str) -> bool:
    """True for a real ISO 3166-1 alpha-2 country code."""
    if len(value) != 2:
        return False
    return pycountry.countries.get(alpha_2=value.upper()) is not None


def is_currency_code(value: str | None) -> bool:
    """True for a real ISO 4217 currency code."""
    if not value or len(value) != 3:
        return False
    return pycountry.currencies.get(alpha_3=value.upper()) is not None


def _is_number(value: Any) -> bool:
    return isinstance(value, Decimal) and value.is_finite()


def _blank(value: str | None) -> bool:
    return not value or not value.strip()


def validate_customer_info(customer: Party) -> ValidationResult:
    errors: list[str] = []

    if not is_valid_email(customer.email):
        errors.append("Valid customer email is required")
    if _blank(customer.given_name):
        errors.append("Customer first name is required")
    if _blank(customer.surname):
        errors.append("Customer last name is required")

    address = customer.address
    if address is not None:
        if len(address.line1) > MAX_ADDRESS_LINE_LENGTH:
            errors.append(
                f"Address line 1 must be at most {MAX_ADDRESS_LINE_LENGTH} characters"
            )
        if len(address.city) > MAX_CITY_LENGTH:
            errors.append(f"City must be at most {MAX_CITY_LENGTH} characters")
        if address.country_code and not is_country_code(address.country_code):
            errors.append("Country code must be a valid ISO 3166-1 alpha-2 code")

    return ValidationResult.from_errors(errors)


def _item_errors(position: int, item: LineItem) -> list[str]:
    errors: list[str] = []
    prefix = f"Item {position}"

    if _blank(item.name):
        errors.append(f"{prefix}: Name is required")
    elif len(item.name) > MAX_ITEM_NAME_LENGTH:
        errors.append(f"{prefix}: Name must be at most {MAX_ITEM_NAME_LENGTH} characters")

    if not _is_number(item.quantity) or item.quantity <= 0:
        errors.append(f"{prefix}: Valid quantity is required")

    if item.kind == "adjustment":
        # Discounts and other adjustments lower the total instead of billing
        if not _is_number(item.unit_amount):
            errors.append(f"{prefix}: Valid adjustment amount is required")
        elif item.unit_amount > 0:
            errors.append(f"{prefix}: Adjustment amount must not be positive")
    elif not _is_number(item.unit_amount) or item.unit_amount <= 0:
        errors.append(f"{prefix}: Valid unit amount is required")

    if not is_currency_code(item.currency_code):
        errors.append(f"{prefix}: Valid currency code is required")

    if item.description and len(item.description) > MAX_ITEM_DESCRIPTION_LENGTH:
        errors.append(
            f"{prefix}: Description must be at most {MAX_ITEM_DESCRIPTION_LENGTH} characters"
        )

    return errors


def validate_invoice_items(items: Any) -> ValidationResult:
    """Validate line items; messages carry the 1-based item position.

    An empty or non-sequence collection yields a single collective error.
    """
    if isinstance(items, (str, bytes)) or not isinstance(items, Sequence) or not items:
        return ValidationResult.from_errors(["At least one invoice item is required"])

    errors: list[str] = []
    for position, item in enumerate(items, 1):
        if not isinstance(item, LineItem):
            errors.append(f"Item {position}: Item must be a line item record")
            continue
        errors.extend(_item_errors(position, item))
    return ValidationResult.from_errors(errors)


def validate_business_info(business: Party) -> ValidationResult:
    errors: list[str] = []

    if _blank(business.business_name):
        errors.append("Business name is required")
    if not is_valid_email(business.email):
        errors.append("Valid business email is required")

    return ValidationResult.from_errors(errors)


def validate_invoice(draft: InvoiceDraft) -> ValidationResult:
    """Run customer, item and business checks and concatenate their errors.

    All three groups always run, so one pass reports every problem.

    Args:
        draft: Invoice draft to check

    Returns:
        ValidationResult; never raises
    """
    errors: list[str] = []
    errors.extend(validate_customer_info(draft.customer).errors)
    errors.extend(validate_invoice_items(draft.items).errors)
    errors.extend(validate_business_info(draft.business).errors)
    return ValidationResult.from_errors(errors)
