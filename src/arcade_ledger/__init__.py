"""
Arcade Ledger - token, achievement and claim ledger for game economies.

This package provides:
- Owner-minted fungible token balances per account
- An achievement registry with token rewards
- At-most-once achievement claims per player
- Owner/admin authorization on every mutating call
- Tagged {ok}/{err} results instead of raised errors
- Hash-chained audit trail and state export/restore

Example usage:

    from arcade_ledger import GameLedger, LedgerCallHandler

    ledger = GameLedger(owner="owner_principal")
    ledger.initialize_token_supply(1000, sender="owner_principal")
    ledger.add_achievement(1, "First Win", "Win your first game", 100, sender="owner_principal")

    result = ledger.award_achievement("player_1", 1, sender="owner_principal")
    if not result.ok:
        print(result.error.code)

    # Or drive it through named calls and wire-format results
    handler = LedgerCallHandler(ledger)
    handler.handle("getTokenBalance", {"account": "player_1"})  # {"ok": 100}
"""
from .models import (
    Principal,
    ClaimKey,
    AuditAction,
    Achievement,
    ClaimRecord,
    PlayerStats,
    AuditLog,
)

from .results import (
    ERROR_CODES,
    LEGACY_INSUFFICIENT_BALANCE_CODE,
    ErrorKind,
    LedgerError,
    LedgerResult,
)

from .config import LedgerSettings, load_settings
from .logging_config import LogContext, setup_logging
from .engine import GameLedger
from .calls import CALL_NAMES, LedgerCallHandler, create_call_handler

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Models
    "Principal",
    "ClaimKey",
    "AuditAction",
    "Achievement",
    "ClaimRecord",
    "PlayerStats",
    "AuditLog",
    # Results
    "ERROR_CODES",
    "LEGACY_INSUFFICIENT_BALANCE_CODE",
    "ErrorKind",
    "LedgerError",
    "LedgerResult",
    # Config & logging
    "LedgerSettings",
    "load_settings",
    "LogContext",
    "setup_logging",
    # Engine
    "GameLedger",
    # Calls
    "CALL_NAMES",
    "LedgerCallHandler",
    "create_call_handler",
]
