"""
Tagged results and error kinds for ledger operations.

Engine operations never raise for contract-level failures. They return a
:class:`LedgerResult` that is either a success carrying a value or a failure
carrying an :class:`ErrorKind`. On the wire a result becomes ``{"ok": value}``
or ``{"err": code}``.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")

# Code emitted for insufficient balance in peer transfers by older clients
LEGACY_INSUFFICIENT_BALANCE_CODE = 1


class ErrorKind(str, Enum):
    """Symbolic failure kinds returned by ledger operations."""
    OWNER_ONLY = "owner_only"
    NOT_FOUND = "not_found"
    ACHIEVEMENT_EXISTS = "achievement_exists"
    UNAUTHORIZED = "unauthorized"
    INVALID_AMOUNT = "invalid_amount"
    ALREADY_CLAIMED = "already_claimed"
    INSUFFICIENT_BALANCE = "insufficient_balance"

    @property
    def code(self) -> int:
        return ERROR_CODES[self]

    def wire_code(self, legacy: bool = False) -> int:
        """Numeric code for the wire, optionally in the legacy scheme."""
        if legacy and self is ErrorKind.INSUFFICIENT_BALANCE:
            return LEGACY_INSUFFICIENT_BALANCE_CODE
        return self.code

    @classmethod
    def from_code(cls, code: int) -> "ErrorKind":
        """Resolve a numeric wire code, accepting the legacy code too."""
        if code == LEGACY_INSUFFICIENT_BALANCE_CODE:
            return cls.INSUFFICIENT_BALANCE
        for kind, value in ERROR_CODES.items():
            if value == code:
                return kind
        raise ValueError(f"Unknown error code: {code}")


ERROR_CODES: Dict[ErrorKind, int] = {
    ErrorKind.OWNER_ONLY: 100,
    ErrorKind.NOT_FOUND: 101,
    ErrorKind.ACHIEVEMENT_EXISTS: 102,
    ErrorKind.UNAUTHORIZED: 103,
    ErrorKind.INVALID_AMOUNT: 104,
    ErrorKind.ALREADY_CLAIMED: 105,
    ErrorKind.INSUFFICIENT_BALANCE: 106,
}


class LedgerError(Exception):
    """Raised by :meth:`LedgerResult.unwrap` for callers that prefer exceptions."""

    def __init__(self, kind: ErrorKind, details: Optional[Dict[str, Any]] = None):
        super().__init__(f"Ledger operation failed: {kind.value}")
        self.kind = kind
        self.code = kind.code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.kind.value,
            "code": self.code,
            "message": str(self),
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class LedgerResult(Generic[T]):
    """Result of a ledger operation."""
    ok: bool
    value: Optional[T] = None
    error: Optional[ErrorKind] = None

    @classmethod
    def succeeded(cls, value: Any = True) -> "LedgerResult":
        return cls(ok=True, value=value)

    @classmethod
    def failed(cls, error: ErrorKind) -> "LedgerResult":
        return cls(ok=False, error=error)

    def unwrap(self) -> T:
        """Return the value, raising :class:`LedgerError` on failure."""
        if not self.ok:
            raise LedgerError(self.error)
        return self.value

    def to_wire(self, legacy_error_codes: bool = False) -> Dict[str, Any]:
        """
        Convert to the two-variant wire protocol.

        Values exposing ``to_dict()`` are serialized through it.
        """
        if self.ok:
            value = self.value
            if hasattr(value, "to_dict"):
                value = value.to_dict()
            return {"ok": value}
        return {"err": self.error.wire_code(legacy=legacy_error_codes)}
