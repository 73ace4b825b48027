"""Plain-text invoice preview for the terminal.

Renders an InvoicePayload without changing it: header, invoicer, recipient, an
item table, total, note and terms.
"""

from collections.abc import Collection
from decimal import Decimal

from invoicing.drafting.schema import Party
from invoicing.payload.builder import format_money, items_total
from invoicing.payload.schema import InvoicePayload, WireAddress

WIDTH = 60
COLUMNS = (("Item", 20), ("Description", 30), ("Qty", 8), ("Unit Price", 12), ("Total", 12))


def unconfigured_business_fields(business: Party) -> list[str]:
    """Names of optional business details left unconfigured."""
    missing = []
    if business.address is None or not business.address.line1:
        missing.append("address")
    if not business.phone:
        missing.append("phone")
    if not business.website:
        missing.append("website")
    return missing


def _cell(text: str, width: int) -> str:
    text = text.splitlines()[0] if text else ""
    if len(text) > width - 1:
        text = text[: width - 2] + "…"
    return text.ljust(width)


def _row(values: list[str]) -> str:
    return "|".join(_cell(value, width) for value, (_, width) in zip(values, COLUMNS))


def _address_lines(address: WireAddress) -> list[str]:
    lines = [address.address_line_1]
    if address.address_line_2:
        lines.append(address.address_line_2)
    lines.append(f"{address.admin_area_2}, {address.admin_area_1} {address.postal_code}".strip())
    lines.append(address.country_code)
    return lines


def format_invoice_preview(
    payload: InvoicePayload,
    missing_business_fields: Collection[str] = (),
) -> str:
    """Format a payload for console display.

    Args:
        payload: Invoice payload to show
        missing_business_fields: Business details that fell back to empty defaults

    Returns:
        Multi-line preview string
    """
    detail = payload.detail
    lines = [
        "",
        "=" * WIDTH,
        "INVOICE PREVIEW".center(WIDTH).rstrip(),
        "=" * WIDTH,
        "",
        f"Invoice Number: {detail.invoice_number}",
        f"Invoice Date: {detail.invoice_date}",
        f"Due Date: {detail.payment_term.due_date}",
        f"Currency: {detail.currency_code}",
        f"Payment Term: {detail.payment_term.term_type}",
        "",
        "FROM:",
    ]

    invoicer = payload.invoicer
    if invoicer.business_name:
        lines.append(invoicer.business_name)
    lines.append(f"{invoicer.name.given_name} {invoicer.name.surname}".strip())
    if invoicer.address is not None and invoicer.address.address_line_1:
        lines.extend(_address_lines(invoicer.address))
    if invoicer.website:
        lines.append(invoicer.website)
    if missing_business_fields:
        lines.append(f"(business {', '.join(missing_business_fields)} not configured)")
    lines.append("")

    lines.append("TO:")
    for recipient in payload.primary_recipients:
        billing = recipient.billing_info
        lines.append(f"{billing.name.given_name} {billing.name.surname}".strip())
        if billing.business_name:
            lines.append(billing.business_name)
        lines.append(billing.email_address)
        if billing.address is not None:
            lines.extend(_address_lines(billing.address))
    lines.append("")

    separator = "+".join("-" * width for _, width in COLUMNS)
    lines.append(_row([name for name, _ in COLUMNS]))
    lines.append(separator)
    for item in payload.items:
        currency = item.unit_amount.currency_code
        line_total = Decimal(item.unit_amount.value) * Decimal(item.quantity)
        lines.append(
            _row(
                [
                    item.name,
                    item.description,
                    item.quantity,
                    f"{currency} {item.unit_amount.value}",
                    f"{currency} {format_money(line_total)}",
                ]
            )
        )
    lines.append(separator)
    lines.append("")

    lines.append(f"TOTAL: {detail.currency_code} {format_money(items_total(payload))}")
    if payload.amount is not None:
        custom = payload.amount.breakdown.custom
        lines.append(f"{custom.label}: {custom.amount.currency_code} {custom.amount.value}")
    lines.append("")

    if detail.note:
        lines.append(f"Note: {detail.note}")
    if detail.term:
        lines.append(f"Terms: {detail.term}")

    lines.append("")
    lines.append("=" * WIDTH)
    return "\n".join(lines) + "\n"
