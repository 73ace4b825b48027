"""Invoice operations against the PayPal Invoicing v2 API.

InvoiceManager sequences validate -> build -> submit for invoice creation and
wraps sending, lookup, listing and cancellation. Every public operation returns
a result record: errors are logged and reported, never raised to the caller.

Based on PayPal Invoicing v2:
https://developer.paypal.com/docs/api/invoicing/v2/
"""

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable, Collection
from typing import Any

from pydantic import BaseModel

from invoicing.display.preview import format_invoice_preview, unconfigured_business_fields
from invoicing.drafting.schema import InvoiceDraft
from invoicing.payload.builder import PayloadBuilder
from invoicing.payload.schema import InvoicePayload
from invoicing.shared.config import Settings
from invoicing.shared.errors import TransportError, ValidationError
from invoicing.transport.base import InvoicingTransport
from invoicing.transport.paypal_client import PayPalClient
from invoicing.validation.validator import validate_invoice

logger = logging.getLogger(__name__)

INVOICES_PATH = "/v2/invoicing/invoices"
DEFAULT_CANCEL_REASON = "Cancelled by merchant"
DEFAULT_SEND_SUBJECT = "Invoice from your service provider"
DEFAULT_SEND_NOTE = (
    "Please find your invoice attached. Payment is due as per the terms mentioned."
)
NOT_AVAILABLE = "N/A"
NOT_CALCULATED = "Not calculated"

_INVOICE_ID_IN_HREF = re.compile(r"/invoices/([^/?]+)")

PreviewFormatter = Callable[[InvoicePayload, Collection[str]], str]


class OperationResult(BaseModel):
    """Common shape of every operation result.

    Attributes:
        success: Whether the operation succeeded
        error: Human-readable error message if it failed
        details: Raw cause (validation messages or PayPal error body) if available
    """

    success: bool
    error: str | None = None
    details: Any = None


class PreviewResult(OperationResult):
    preview: str | None = None
    payload: dict[str, Any] | None = None


class CreateResult(OperationResult):
    invoice_id: str | None = None
    invoice_number: str | None = None
    status: str | None = None
    invoicer_view_url: str | None = None
    recipient_view_url: str | None = None
    total_amount: str | None = None
    currency: str | None = None
    full_response: dict[str, Any] | None = None


class SendResult(OperationResult):
    message: str | None = None
    response: Any = None


class CreateAndSendResult(CreateResult):
    """Create followed by send.

    ``success`` reflects creation; ``sent`` and ``send_error`` report the send
    step, so an invoice that exists but was not emailed can be re-sent later.
    """

    sent: bool = False
    send_error: str | None = None


class InvoiceLookupResult(OperationResult):
    invoice: dict[str, Any] | None = None


class InvoiceListResult(OperationResult):
    invoices: list[dict[str, Any]] = []
    total_items: int | None = None
    total_pages: int | None = None
    current_page: int = 1


class CancelResult(OperationResult):
    message: str | None = None


class SendOptions(BaseModel):
    """Email notification settings for sending an invoice.

    Recipient notification is on unless explicitly disabled; invoicer copy is off
    unless explicitly enabled.
    """

    send_to_recipient: bool | None = None
    send_to_invoicer: bool | None = None
    subject: str | None = None
    note: str | None = None
    additional_recipients: list[str] | None = None

    def to_wire(self) -> dict[str, Any]:
        return {
            "send_to_invoicer": self.send_to_invoicer is True,
            "send_to_recipient": self.send_to_recipient is not False,
            "subject": self.subject or DEFAULT_SEND_SUBJECT,
            "note": self.note or DEFAULT_SEND_NOTE,
            "additional_recipients": list(self.additional_recipients or []),
        }


def extract_invoice_id(href: str) -> str | None:
    """Pull the invoice id out of a link such as .../v2/invoicing/invoices/INV2-XXXX."""
    match = _INVOICE_ID_IN_HREF.search(href)
    return match.group(1) if match else None


def _failure_details(error: Exception) -> Any:
    if isinstance(error, ValidationError):
        return error.errors
    if isinstance(error, TransportError):
        return error.body
    return None


class InvoiceManager:
    """Orchestrates invoice preview, creation, sending and housekeeping."""

    def __init__(
        self,
        transport: InvoicingTransport,
        builder: PayloadBuilder | None = None,
        formatter: PreviewFormatter = format_invoice_preview,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        send_delay_seconds: float = 2.0,
    ) -> None:
        """Initialize invoice manager.

        Args:
            transport: Authenticated PayPal transport
            builder: Payload builder (injectable clock/random for tests)
            formatter: Renders a payload preview
            sleep: Awaitable delay used between create and send
            send_delay_seconds: Fixed pause before sending a freshly created invoice
        """
        self.transport = transport
        self._builder = builder or PayloadBuilder()
        self._formatter = formatter
        self._sleep = sleep
        self._send_delay_seconds = send_delay_seconds

    def _prepare(self, draft: InvoiceDraft) -> InvoicePayload:
        """Validate a draft and build its payload.

        Raises:
            ValidationError: If any field is invalid; nothing is sent in that case
        """
        validation = validate_invoice(draft)
        if not validation.is_valid:
            raise ValidationError(validation.errors)
        return self._builder.build(draft)

    async def preview_invoice(self, draft: InvoiceDraft) -> PreviewResult:
        """Validate and render a draft without contacting PayPal.

        Args:
            draft: Invoice draft

        Returns:
            PreviewResult with the formatted preview and the wire payload
        """
        try:
            payload = self._prepare(draft)
            preview = self._formatter(payload, unconfigured_business_fields(draft.business))
            return PreviewResult(success=True, preview=preview, payload=payload.to_wire())
        except Exception as e:
            logger.error(f"Failed to generate preview: {e}")
            return PreviewResult(success=False, error=str(e), details=_failure_details(e))

    async def create_invoice(self, draft: InvoiceDraft) -> CreateResult:
        """Validate, build and submit a draft invoice.

        PayPal may answer with a link to the new invoice instead of the invoice
        itself; in that case the invoice is fetched once by id.

        Args:
            draft: Invoice draft

        Returns:
            CreateResult with id, number, status, view URLs and amount
        """
        try:
            logger.info("Validating invoice data")
            payload = self._prepare(draft)

            logger.info(f"Creating PayPal invoice {payload.detail.invoice_number}")
            response = await self.transport.authenticated_request(
                "POST", INVOICES_PATH, payload.to_wire()
            )
            if not isinstance(response, dict):
                response = {}

            invoice_id = response.get("id")
            if response.get("href") and response.get("method"):
                linked_id = extract_invoice_id(response["href"])
                if linked_id:
                    invoice_id = linked_id
                    lookup = await self.get_invoice(linked_id)
                    if lookup.success and lookup.invoice is not None:
                        response = lookup.invoice
                    else:
                        logger.warning(f"Created invoice {linked_id} but could not fetch it")

            detail = response.get("detail") or {}
            metadata = detail.get("metadata") or {}
            amount = response.get("amount") or response.get("due_amount") or {}

            result = CreateResult(
                success=True,
                invoice_id=response.get("id") or invoice_id,
                invoice_number=detail.get("invoice_number") or NOT_AVAILABLE,
                status=response.get("status"),
                invoicer_view_url=metadata.get("invoicer_view_url") or NOT_AVAILABLE,
                recipient_view_url=metadata.get("recipient_view_url") or NOT_AVAILABLE,
                total_amount=amount.get("value") or NOT_CALCULATED,
                currency=amount.get("currency_code") or draft.currency_code,
                full_response=response,
            )
            logger.info(f"Invoice created: {result.invoice_id} ({result.status})")
            return result

        except Exception as e:
            logger.error(f"Failed to create invoice: {e}")
            if isinstance(e, TransportError) and e.body:
                logger.error(f"PayPal API error: {e.body}")
            return CreateResult(success=False, error=str(e), details=_failure_details(e))

    async def get_invoice(self, invoice_id: str) -> InvoiceLookupResult:
        """Fetch one invoice by id."""
        try:
            invoice = await self.transport.authenticated_request(
                "GET", f"{INVOICES_PATH}/{invoice_id}"
            )
            return InvoiceLookupResult(success=True, invoice=invoice)
        except Exception as e:
            logger.error(f"Failed to fetch invoice {invoice_id}: {e}")
            return InvoiceLookupResult(success=False, error=str(e), details=_failure_details(e))

    async def send_invoice(
        self, invoice_id: str, options: SendOptions | None = None
    ) -> SendResult:
        """Ask PayPal to email an invoice.

        Args:
            invoice_id: Id returned by create_invoice()
            options: Notification settings; defaults notify the recipient only

        Returns:
            SendResult
        """
        body = (options or SendOptions()).to_wire()
        try:
            logger.info(f"Sending invoice {invoice_id}")
            response = await self.transport.authenticated_request(
                "POST", f"{INVOICES_PATH}/{invoice_id}/send", body
            )
            return SendResult(success=True, message="Invoice sent successfully", response=response)
        except Exception as e:
            logger.error(f"Failed to send invoice {invoice_id}: {e}")
            return SendResult(success=False, error=str(e), details=_failure_details(e))

    async def create_and_send_invoice(
        self, draft: InvoiceDraft, options: SendOptions | None = None
    ) -> CreateAndSendResult:
        """Create an invoice, wait briefly, then send it.

        The pause gives PayPal time to make the new invoice sendable. A send
        failure does not undo or hide a successful create.

        Args:
            draft: Invoice draft
            options: Notification settings for the send step

        Returns:
            CreateAndSendResult
        """
        created = await self.create_invoice(draft)
        if not created.success or not created.invoice_id:
            return CreateAndSendResult(
                **created.model_dump(exclude={"success", "error"}),
                success=False,
                error=created.error or "Invoice created without an id",
            )

        await self._sleep(self._send_delay_seconds)

        sent = await self.send_invoice(created.invoice_id, options)
        if not sent.success:
            logger.warning(
                f"Invoice {created.invoice_id} created but not sent; it can be re-sent later"
            )
        return CreateAndSendResult(
            **created.model_dump(),
            sent=sent.success,
            send_error=sent.error,
        )

    async def list_invoices(
        self,
        page: int | None = None,
        page_size: int | None = None,
        total_required: bool | None = None,
    ) -> InvoiceListResult:
        """List invoices, one page at a time."""
        params: dict[str, Any] = {}
        if page:
            params["page"] = page
        if page_size:
            params["page_size"] = page_size
        if total_required:
            params["total_required"] = "true"

        try:
            response = await self.transport.authenticated_request(
                "GET", INVOICES_PATH, params=params or None
            )
            response = response if isinstance(response, dict) else {}
            return InvoiceListResult(
                success=True,
                invoices=response.get("items") or [],
                total_items=response.get("total_items"),
                total_pages=response.get("total_pages"),
                current_page=page or 1,
            )
        except Exception as e:
            logger.error(f"Failed to fetch invoices: {e}")
            return InvoiceListResult(success=False, error=str(e), details=_failure_details(e))

    async def cancel_invoice(
        self, invoice_id: str, reason: str = DEFAULT_CANCEL_REASON
    ) -> CancelResult:
        """Cancel a sent invoice and notify both parties."""
        body = {
            "subject": "Invoice Cancelled",
            "note": reason,
            "send_to_invoicer": True,
            "send_to_recipient": True,
        }
        try:
            await self.transport.authenticated_request(
                "POST", f"{INVOICES_PATH}/{invoice_id}/cancel", body
            )
            logger.info(f"Invoice {invoice_id} cancelled")
            return CancelResult(success=True, message="Invoice cancelled successfully")
        except Exception as e:
            logger.error(f"Failed to cancel invoice {invoice_id}: {e}")
            return CancelResult(success=False, error=str(e), details=_failure_details(e))


def create_invoice_manager(settings: Settings) -> InvoiceManager:
    """Factory function to create an InvoiceManager backed by PayPal.

    Logs a warning if PayPal credentials are missing; operations will then fail
    with a configuration error instead of raising at startup.

    Args:
        settings: Application settings

    Returns:
        Configured InvoiceManager
    """
    transport = PayPalClient(settings)
    if not transport.is_available():
        logger.warning(
            "PayPal credentials are not configured. "
            "Set APP_PAYPAL_CLIENT_ID and APP_PAYPAL_CLIENT_SECRET."
        )

    manager = InvoiceManager(
        transport=transport,
        builder=PayloadBuilder(phone_country_code=settings.phone_country_code),
        send_delay_seconds=settings.send_delay_seconds,
    )
    logger.info(f"Created invoice manager for PayPal {transport.environment}")
    return manager
