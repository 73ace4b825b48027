"""Error taxonomy shared by the drafting, validation and transport layers."""

from typing import Any


class InvoicingError(Exception):
    """Base class for all invoicing errors."""


class InputShapeError(InvoicingError):
    """Input document is malformed or matches none of the supported shapes."""


class UnknownServiceTypeError(InvoicingError):
    """Service type tag is neither guest post nor link insertion."""

    def __init__(self, service_type: Any) -> None:
        self.service_type = service_type
        super().__init__(
            f"Unknown service type: {service_type!r}. Use 'guest post' or 'link insertion'"
        )


class ValidationError(InvoicingError):
    """Draft failed field-level validation.

    Attributes:
        errors: Every violated constraint, in validation order
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("Validation failed:\n" + "\n".join(self.errors))


class TransportError(InvoicingError):
    """Remote call failed.

    Attributes:
        status_code: HTTP status, None when the request never got a response
        body: Parsed error body returned by PayPal, if any
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: Any = None,
    ) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message)
