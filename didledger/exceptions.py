

class DIDLedgerError(Exception):
    """Base class for exceptions raised by the DID ledger core."""
    kind = "Internal"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

class InvalidArgumentError(DIDLedgerError):
    """Raised on a wrong argument count or an empty DID."""
    kind = "InvalidArgument"

class AlreadyExistsError(DIDLedgerError):
    """Raised when creating a DID that is already anchored."""
    kind = "AlreadyExists"

class NotFoundError(DIDLedgerError):
    """Raised when operating on a DID that does not exist."""
    kind = "NotFound"

class UnauthorizedError(DIDLedgerError):
    """Raised when a proof fails validation against a registered key."""
    kind = "Unauthorized"

class CorruptionError(DIDLedgerError):
    """Raised when a stored record cannot be decoded."""
    kind = "Corruption"

class TransportError(DIDLedgerError):
    """Raised when the underlying ledger read or write fails."""
    kind = "Transport"
