"""Build PayPal invoice payloads from canonical drafts.

The builder is a structural transform: it performs no I/O and no validation.
Invoice numbers and default dates depend on the clock and a random source, both
injectable so tests can freeze them.
"""

import random
import re
from collections.abc import Callable
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from invoicing.drafting.schema import Address, InvoiceDraft, LineItem, Party
from invoicing.payload.schema import (
    Amount,
    AmountBreakdown,
    BillingInfo,
    Configuration,
    CustomCharge,
    Detail,
    Discount,
    EmailAddress,
    InvoicePayload,
    Invoicer,
    Item,
    Money,
    Name,
    PartialPayment,
    PaymentTerm,
    Phone,
    Recipient,
    Tax,
    WireAddress,
)

CUSTOMER_COUNTRY_FALLBACK = "US"
BUSINESS_COUNTRY_FALLBACK = "IN"

_CENTS = Decimal("0.01")
_NON_DIGITS = re.compile(r"\D")


def format_money(value: Decimal | int | float | str) -> str:
    """Render an amount with exactly two decimals, rounding half up.

    Examples:
        >>> format_money(40)
        '40.00'
        >>> format_money("19.999")
        '20.00'
    """
    amount = Decimal(str(value)).quantize(_CENTS, rounding=ROUND_HALF_UP)
    return format(amount, "f")


def format_number(value: Decimal | int | float | str) -> str:
    """Render a quantity or percentage as a plain string ("1", "2.5", "10")."""
    number = Decimal(str(value)).normalize()
    return format(number, "f")


def phone_digits(raw: str) -> str:
    return _NON_DIGITS.sub("", raw or "")


def items_total(payload: InvoicePayload) -> Decimal:
    """Sum of unit amount × quantity over all payload items."""
    total = Decimal("0")
    for item in payload.items:
        total += Decimal(item.unit_amount.value) * Decimal(item.quantity)
    return total.quantize(_CENTS, rounding=ROUND_HALF_UP)


class PayloadBuilder:
    """Transforms an InvoiceDraft into PayPal's create-invoice payload."""

    def __init__(
        self,
        clock: Callable[[], datetime] | None = None,
        rng: random.Random | None = None,
        phone_country_code: str = "1",
    ) -> None:
        """Initialize builder.

        Args:
            clock: Returns the current time; defaults to datetime.now
            rng: Random source for invoice number suffixes
            phone_country_code: Dialing code attached to phone numbers
        """
        self._clock = clock or datetime.now
        self._rng = rng or random.Random()
        self._phone_country_code = phone_country_code

    def generate_invoice_number(self) -> str:
        """Invoice number from the clock's last 8 millisecond digits and a 3-digit suffix.

        Not globally unique; PayPal rejects duplicates on its side.
        """
        millis = int(self._clock().timestamp() * 1000)
        suffix = self._rng.randint(0, 999)
        return f"INV-{str(millis)[-8:]}-{suffix:03d}"

    def build(self, draft: InvoiceDraft) -> InvoicePayload:
        """Build the wire payload for a draft.

        Args:
            draft: Canonical invoice draft (expected to be validated already)

        Returns:
            InvoicePayload ready for submission
        """
        invoice_date = draft.invoice_date or self._clock().date()
        due_date = draft.due_date or invoice_date + timedelta(days=draft.due_in_days)

        detail = Detail(
            invoice_number=draft.invoice_number or self.generate_invoice_number(),
            reference=draft.reference,
            invoice_date=invoice_date.isoformat(),
            currency_code=draft.currency_code,
            note=draft.note,
            term=draft.terms,
            memo=draft.memo,
            payment_term=PaymentTerm(due_date=due_date.isoformat()),
        )

        minimum_due = (
            Money(
                currency_code=draft.currency_code,
                value=format_money(draft.minimum_amount_due),
            )
            if draft.minimum_amount_due is not None
            else None
        )

        return InvoicePayload(
            detail=detail,
            invoicer=self._invoicer(draft.business),
            primary_recipients=[Recipient(billing_info=self._billing_info(draft.customer))],
            items=[self._item(item, draft.currency_code) for item in draft.items],
            configuration=Configuration(
                partial_payment=PartialPayment(
                    allow_partial_payment=draft.allow_partial_payment,
                    minimum_amount_due=minimum_due,
                ),
                allow_tip=draft.allow_tip,
            ),
            additional_recipients=[
                EmailAddress(email_address=email) for email in draft.additional_recipients
            ]
            or None,
            amount=self._custom_amount(draft),
        )

    def _address(self, address: Address | None, fallback_country: str) -> WireAddress | None:
        if address is None:
            return None
        return WireAddress(
            address_line_1=address.line1,
            address_line_2=address.line2,
            admin_area_2=address.city,
            admin_area_1=address.state,
            postal_code=address.postal_code,
            country_code=address.country_code or fallback_country,
        )

    def _phones(self, raw: str) -> list[Phone] | None:
        digits = phone_digits(raw)
        if not digits:
            return None
        return [Phone(country_code=self._phone_country_code, national_number=digits)]

    def _invoicer(self, business: Party) -> Invoicer:
        return Invoicer(
            name=Name(given_name=business.given_name, surname=business.surname),
            business_name=business.business_name or None,
            address=self._address(business.address, BUSINESS_COUNTRY_FALLBACK),
            phones=self._phones(business.phone),
            website=business.website,
            tax_id=business.tax_id,
        )

    def _billing_info(self, customer: Party) -> BillingInfo:
        return BillingInfo(
            name=Name(given_name=customer.given_name, surname=customer.surname),
            address=self._address(customer.address, CUSTOMER_COUNTRY_FALLBACK),
            email_address=customer.email,
            phones=self._phones(customer.phone),
            business_name=customer.business_name,
            additional_info_value=customer.tax_id,
        )

    def _item(self, item: LineItem, invoice_currency: str) -> Item:
        currency = item.currency_code or invoice_currency

        tax = None
        if item.tax is not None:
            tax = Tax(name=item.tax.name or "Tax", percent=format_number(item.tax.percent))

        discount = None
        if item.discount is not None and (
            item.discount.percent is not None or item.discount.amount is not None
        ):
            discount = Discount(
                percent=(
                    format_number(item.discount.percent)
                    if item.discount.percent is not None
                    else None
                ),
                amount=(
                    Money(currency_code=currency, value=format_money(item.discount.amount))
                    if item.discount.amount is not None
                    else None
                ),
            )

        return Item(
            name=item.name,
            description=item.description,
            quantity=format_number(item.quantity if item.quantity is not None else 1),
            unit_amount=Money(
                currency_code=currency,
                value=format_money(item.unit_amount if item.unit_amount is not None else 0),
            ),
            tax=tax,
            discount=discount,
        )

    def _custom_amount(self, draft: InvoiceDraft) -> Amount | None:
        if draft.custom_amount is None:
            return None
        charge = CustomCharge(
            label=draft.custom_amount.label or "Additional Charges",
            amount=Money(
                currency_code=draft.currency_code,
                value=format_money(draft.custom_amount.amount),
            ),
        )
        return Amount(breakdown=AmountBreakdown(custom=charge))
