# app/core/exceptions.py
"""
Ledger error taxonomy.

  - LedgerNotFound     : backing file absent (non-fatal, loaders return [])
  - DecodeError        : one malformed line (skipped, batch load continues)
  - InvalidStatus      : status value outside its enum (prior value kept)
  - InvalidState       : operation not allowed in the order's current state
  - PersistenceFailure : write could not complete (caller reverts memory)

Services raise these; app.main maps them to HTTP responses.
"""


class LedgerError(Exception):
    """Base class for every ledger error."""


class LedgerNotFound(LedgerError):
    def __init__(self, path: str):
        super().__init__(f"Ledger file not found: {path}")
        self.path = path


class DecodeError(LedgerError):
    def __init__(self, message: str, line: str | None = None):
        super().__init__(message)
        self.line = line


class InvalidStatus(LedgerError):
    def __init__(self, value: str, allowed: list[str]):
        super().__init__(
            f"Status '{value}' is not allowed. Choose one of: {', '.join(allowed)}"
        )
        self.value = value
        self.allowed = allowed


class InvalidState(LedgerError):
    pass


class InvalidOrder(LedgerError):
    """Order entry payload failed a business rule (missing cash, bad timestamp, ...)."""


class OrderNotFound(LedgerError):
    def __init__(self, order_id: str):
        super().__init__(f"Order '{order_id}' not found")
        self.order_id = order_id


class PersistenceFailure(LedgerError):
    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause
