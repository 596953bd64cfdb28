class RechnungError(Exception):
    """Base class for errors surfaced to the user."""


class InvoiceValidationError(RechnungError, ValueError):
    pass


class PersistenceError(RechnungError, RuntimeError):
    pass


class DocumentGenerationError(RechnungError, RuntimeError):
    pass


class ImportDataError(RechnungError, ValueError):
    pass


class ClientInUseError(RechnungError, ValueError):
    def __init__(self, client_name: str, invoice_count: int) -> None:
        self.client_name = client_name
        self.invoice_count = invoice_count
        super().__init__(
            f"Client '{client_name}' is referenced by {invoice_count} invoice(s) and cannot be deleted"
        )


class DuplicateInvoiceError(RechnungError, ValueError):
    pass


class DuplicateClientError(RechnungError, ValueError):
    pass


class InvoiceNotFoundError(RechnungError, LookupError):
    pass


class ClientNotFoundError(RechnungError, LookupError):
    pass
