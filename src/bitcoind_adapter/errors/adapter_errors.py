"""AdapterError — base exception class for all bitcoind-adapter errors."""

from __future__ import annotations


class AdapterError(Exception):
    """Base error for all adapter operations.

    Attributes:
        message: Human-readable error description.
        code: Machine-readable error code string.
    """

    def __init__(self, message: str, *, code: str = "adapter-error") -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class MessageHandlingError(AdapterError):
    """A broker notification could not be translated or published."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="message-handling-failed")


class InvalidAmountError(AdapterError):
    """A money string or node amount could not be parsed exactly."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="invalid-amount")
