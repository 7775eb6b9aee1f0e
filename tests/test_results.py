"""
Tests for arcade_ledger.results.

Tests cover:
- ErrorKind numeric codes, including the legacy insufficient-balance code
- LedgerResult success/failure construction and wire conversion
- LedgerError raised by unwrap()
"""
from __future__ import annotations

import pytest

from arcade_ledger import (
    ERROR_CODES,
    LEGACY_INSUFFICIENT_BALANCE_CODE,
    Achievement,
    ErrorKind,
    LedgerError,
    LedgerResult,
)


class TestErrorKind:
    """Tests for error kind codes."""

    @pytest.mark.parametrize(
        "kind,code",
        [
            (ErrorKind.OWNER_ONLY, 100),
            (ErrorKind.NOT_FOUND, 101),
            (ErrorKind.ACHIEVEMENT_EXISTS, 102),
            (ErrorKind.UNAUTHORIZED, 103),
            (ErrorKind.INVALID_AMOUNT, 104),
            (ErrorKind.ALREADY_CLAIMED, 105),
            (ErrorKind.INSUFFICIENT_BALANCE, 106),
        ],
    )
    def test_codes(self, kind, code):
        assert kind.code == code

    def test_every_kind_has_a_code(self):
        assert set(ERROR_CODES) == set(ErrorKind)
        assert len(set(ERROR_CODES.values())) == len(ERROR_CODES)

    def test_legacy_code_only_for_insufficient_balance(self):
        assert ErrorKind.INSUFFICIENT_BALANCE.wire_code(legacy=True) == LEGACY_INSUFFICIENT_BALANCE_CODE == 1
        assert ErrorKind.OWNER_ONLY.wire_code(legacy=True) == 100

    def test_from_code(self):
        assert ErrorKind.from_code(103) is ErrorKind.UNAUTHORIZED
        assert ErrorKind.from_code(1) is ErrorKind.INSUFFICIENT_BALANCE
        assert ErrorKind.from_code(106) is ErrorKind.INSUFFICIENT_BALANCE

    def test_from_unknown_code(self):
        with pytest.raises(ValueError):
            ErrorKind.from_code(999)


class TestLedgerResult:
    """Tests for LedgerResult."""

    def test_succeeded(self):
        result = LedgerResult.succeeded()

        assert result.ok
        assert result.value is True
        assert result.error is None
        assert result.unwrap() is True

    def test_failed(self):
        result = LedgerResult.failed(ErrorKind.NOT_FOUND)

        assert not result.ok
        assert result.error is ErrorKind.NOT_FOUND

    def test_wire_ok(self):
        assert LedgerResult.succeeded(100).to_wire() == {"ok": 100}

    def test_wire_uses_to_dict(self):
        achievement = Achievement(1, "First Win", "Win your first game", 100)

        wire = LedgerResult.succeeded(achievement).to_wire()

        assert wire == {"ok": achievement.to_dict()}

    def test_wire_err(self):
        assert LedgerResult.failed(ErrorKind.OWNER_ONLY).to_wire() == {"err": 100}

    def test_wire_err_legacy(self):
        result = LedgerResult.failed(ErrorKind.INSUFFICIENT_BALANCE)

        assert result.to_wire() == {"err": 106}
        assert result.to_wire(legacy_error_codes=True) == {"err": 1}

    def test_wire_false_value(self):
        """A falsy success value still reads as ok."""
        assert LedgerResult.succeeded(False).to_wire() == {"ok": False}
        assert LedgerResult.succeeded(0).to_wire() == {"ok": 0}


class TestLedgerError:
    """Tests for LedgerError."""

    def test_unwrap_raises(self):
        with pytest.raises(LedgerError) as exc_info:
            LedgerResult.failed(ErrorKind.ALREADY_CLAIMED).unwrap()

        error = exc_info.value
        assert error.kind is ErrorKind.ALREADY_CLAIMED
        assert error.code == 105
        assert "already_claimed" in str(error)

    def test_to_dict(self):
        error = LedgerError(ErrorKind.UNAUTHORIZED, details={"sender": "someone"})
        result = error.to_dict()

        assert result["error"] == "unauthorized"
        assert result["code"] == 103
        assert result["details"] == {"sender": "someone"}
        assert "timestamp" in result
