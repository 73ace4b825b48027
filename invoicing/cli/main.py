"""Command-line front end for the PayPal invoicer.

Usage:
    paypal-invoicer preview order.json
    paypal-invoicer create '{"customer": {...}, "service": {...}}'
    paypal-invoicer create-and-send order.json --cc accounts@example.com
    paypal-invoicer send INV2-XXXX-XXXX
    paypal-invoicer list --page 2 --page-size 20
    paypal-invoicer cancel INV2-XXXX-XXXX --reason "Duplicate order"

The input document is a path to a JSON file or an inline JSON string.
Credentials and business identity come from APP_* environment variables.
"""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

from invoicing.drafting.normalizer import normalize_document
from invoicing.drafting.schema import DraftDefaults, InvoiceDraft
from invoicing.manager.service import (
    DEFAULT_CANCEL_REASON,
    CreateResult,
    InvoiceManager,
    OperationResult,
    SendOptions,
    create_invoice_manager,
)
from invoicing.shared.config import Settings, get_settings
from invoicing.shared.errors import InvoicingError

logger = logging.getLogger(__name__)

Command = Callable[[InvoiceManager, argparse.Namespace, Settings], Awaitable[int]]


def load_document(source: str) -> Any:
    """Read a JSON document from a file path or an inline JSON string.

    Raises:
        ValueError: If the file cannot be read or the text is not valid JSON
    """
    if source.lstrip().startswith(("{", "[")):
        text = source
    else:
        try:
            text = Path(source).read_text(encoding="utf-8")
        except OSError as e:
            raise ValueError(f"Cannot read input file {source}: {e}") from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Input is not valid JSON: {e}") from e


def _draft(args: argparse.Namespace, settings: Settings) -> InvoiceDraft:
    return normalize_document(load_document(args.input), DraftDefaults.from_settings(settings))


def _send_options(args: argparse.Namespace) -> SendOptions:
    return SendOptions(
        send_to_recipient=not args.no_notify_recipient,
        send_to_invoicer=args.notify_invoicer,
        subject=args.subject,
        note=args.note,
        additional_recipients=args.cc or [],
    )


def _print_failure(result: OperationResult) -> int:
    print(f"Error: {result.error}", file=sys.stderr)
    if isinstance(result.details, list):
        for message in result.details:
            print(f"  - {message}", file=sys.stderr)
    elif result.details:
        print(json.dumps(result.details, indent=2, default=str), file=sys.stderr)
    return 1


def _print_created(result: CreateResult) -> None:
    print("Invoice created successfully!")
    print(f"  Invoice ID: {result.invoice_id}")
    print(f"  Invoice Number: {result.invoice_number}")
    print(f"  Status: {result.status}")
    print(f"  Total: {result.currency} {result.total_amount}")
    print(f"  Invoicer View: {result.invoicer_view_url}")
    print(f"  Recipient View: {result.recipient_view_url}")


async def cmd_preview(manager: InvoiceManager, args: argparse.Namespace, settings: Settings) -> int:
    result = await manager.preview_invoice(_draft(args, settings))
    if not result.success:
        return _print_failure(result)
    print(result.preview)
    if args.json:
        print(json.dumps(result.payload, indent=2))
    return 0


async def cmd_create(manager: InvoiceManager, args: argparse.Namespace, settings: Settings) -> int:
    result = await manager.create_invoice(_draft(args, settings))
    if not result.success:
        return _print_failure(result)
    _print_created(result)
    return 0


async def cmd_create_and_send(
    manager: InvoiceManager, args: argparse.Namespace, settings: Settings
) -> int:
    result = await manager.create_and_send_invoice(_draft(args, settings), _send_options(args))
    if not result.success:
        return _print_failure(result)
    _print_created(result)
    if not result.sent:
        print(f"Invoice was created but could not be sent: {result.send_error}", file=sys.stderr)
        print(f"Retry with: send {result.invoice_id}", file=sys.stderr)
        return 2
    print("Invoice sent successfully!")
    return 0


async def cmd_send(manager: InvoiceManager, args: argparse.Namespace, settings: Settings) -> int:
    result = await manager.send_invoice(args.invoice_id, _send_options(args))
    if not result.success:
        return _print_failure(result)
    print(result.message)
    return 0


async def cmd_get(manager: InvoiceManager, args: argparse.Namespace, settings: Settings) -> int:
    result = await manager.get_invoice(args.invoice_id)
    if not result.success:
        return _print_failure(result)
    print(json.dumps(result.invoice, indent=2))
    return 0


async def cmd_list(manager: InvoiceManager, args: argparse.Namespace, settings: Settings) -> int:
    result = await manager.list_invoices(
        page=args.page, page_size=args.page_size, total_required=args.total
    )
    if not result.success:
        return _print_failure(result)

    print(f"Invoices (page {result.current_page}):")
    for invoice in result.invoices:
        detail = invoice.get("detail") or {}
        amount = invoice.get("amount") or {}
        print(
            f"  {invoice.get('id')}  {detail.get('invoice_number', 'N/A')}  "
            f"{invoice.get('status', '')}  {amount.get('currency_code', '')} {amount.get('value', '')}"
        )
    if result.total_items is not None:
        print(f"Total: {result.total_items} invoices in {result.total_pages} pages")
    return 0


async def cmd_cancel(manager: InvoiceManager, args: argparse.Namespace, settings: Settings) -> int:
    result = await manager.cancel_invoice(args.invoice_id, args.reason)
    if not result.success:
        return _print_failure(result)
    print(result.message)
    return 0


def _add_send_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--no-notify-recipient",
        action="store_true",
        help="Do not email the customer",
    )
    parser.add_argument(
        "--notify-invoicer",
        action="store_true",
        help="Send a copy to the business email",
    )
    parser.add_argument("--subject", help="Email subject")
    parser.add_argument("--note", help="Email note")
    parser.add_argument(
        "--cc",
        action="append",
        metavar="EMAIL",
        help="Additional recipient (repeatable)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="paypal-invoicer",
        description="Build, preview and send PayPal invoices",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_preview = sub.add_parser("preview", help="Validate and show an invoice without sending it")
    p_preview.add_argument("input", help="JSON file or inline JSON document")
    p_preview.add_argument("--json", action="store_true", help="Also print the PayPal payload")
    p_preview.set_defaults(func=cmd_preview)

    p_create = sub.add_parser("create", help="Create a draft invoice in PayPal")
    p_create.add_argument("input", help="JSON file or inline JSON document")
    p_create.set_defaults(func=cmd_create)

    p_both = sub.add_parser("create-and-send", help="Create an invoice and email it")
    p_both.add_argument("input", help="JSON file or inline JSON document")
    _add_send_arguments(p_both)
    p_both.set_defaults(func=cmd_create_and_send)

    p_send = sub.add_parser("send", help="Email an existing draft invoice")
    p_send.add_argument("invoice_id", help="PayPal invoice id")
    _add_send_arguments(p_send)
    p_send.set_defaults(func=cmd_send)

    p_get = sub.add_parser("get", help="Show one invoice")
    p_get.add_argument("invoice_id", help="PayPal invoice id")
    p_get.set_defaults(func=cmd_get)

    p_list = sub.add_parser("list", help="List invoices")
    p_list.add_argument("--page", type=int, help="Page number (1-based)")
    p_list.add_argument("--page-size", type=int, help="Invoices per page")
    p_list.add_argument("--total", action="store_true", help="Ask PayPal for total counts")
    p_list.set_defaults(func=cmd_list)

    p_cancel = sub.add_parser("cancel", help="Cancel a sent invoice")
    p_cancel.add_argument("invoice_id", help="PayPal invoice id")
    p_cancel.add_argument("--reason", default=DEFAULT_CANCEL_REASON, help="Cancellation note")
    p_cancel.set_defaults(func=cmd_cancel)

    return parser


async def run(args: argparse.Namespace, settings: Settings) -> int:
    """Run one subcommand against a PayPal-backed manager."""
    manager = create_invoice_manager(settings)
    command: Command = args.func
    try:
        return await command(manager, args, settings)
    except (InvoicingError, ValueError) as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        await manager.transport.aclose()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    return asyncio.run(run(args, settings))


if __name__ == "__main__":
    sys.exit(main())
