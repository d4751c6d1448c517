"""
Exception hierarchy for invoice generation.

Library code raises these; the Streamlit UI catches ``InvoiceError`` and
surfaces the message to the user.
"""


class InvoiceError(Exception):
    """Base class for all invoice generation errors."""


class InvoiceInputError(InvoiceError, ValueError):
    """Form input could not be turned into an invoice."""


class InvalidPriceError(InvoiceInputError):
    """Price is non-numeric, non-finite or not positive."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Please enter a valid price (got {value!r}).")


class InvalidDateError(InvoiceInputError):
    """A date field is not a valid ISO-8601 calendar date."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid date {value!r}, expected YYYY-MM-DD.")


class MissingFieldError(InvoiceInputError):
    """A required text field was left empty."""

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"{field_name.replace('_', ' ').capitalize()} is required.")


class NoEligibleDatesError(InvoiceError):
    """Date range expansion produced no eligible dates."""

    def __init__(self, message: str = "No valid dates available for invoice generation."):
        super().__init__(message)


class NameProviderError(InvoiceError):
    """Driver names could not be loaded from the configured source."""


class PdfUnavailableError(InvoiceError):
    """PDF rendering was requested but WeasyPrint cannot be used."""


class ShortfallWarning(UserWarning):
    """Fewer eligible dates than requested invoices; the batch was reduced.

    Not raised. Attached to a bulk result so the caller can show it.
    """

    def __init__(self, requested: int, produced: int):
        self.requested = requested
        self.produced = produced
        super().__init__(
            f"Only {produced} invoices generated as there are only "
            f"{produced} eligible dates in the selected range."
        )


__all__ = [
    "InvoiceError",
    "InvoiceInputError",
    "InvalidPriceError",
    "InvalidDateError",
    "MissingFieldError",
    "NoEligibleDatesError",
    "NameProviderError",
    "PdfUnavailableError",
    "ShortfallWarning",
]
