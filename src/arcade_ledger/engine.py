"""
Game ledger engine: token balances, achievements and claims.

This module holds all ledger state and the operations that mutate it:
- Owner-only minting, withdrawal and admin management
- Admin-or-owner achievement management and awards
- Player-to-player and admin-directed token transfers
- Read-only queries, supply accounting and invariant checks

Every operation is serialized through a single re-entrant lock and validates
all of its preconditions before mutating anything, so a failed call leaves the
ledger unchanged. Contract-level failures are returned as
:class:`~arcade_ledger.results.LedgerResult` values, never raised.
"""
from __future__ import annotations

import dataclasses
import logging
import threading
from typing import Any, Dict, List, Optional

from .config import LedgerSettings
from .models import (
    Achievement,
    AuditAction,
    AuditLog,
    ClaimKey,
    ClaimRecord,
    PlayerStats,
    Principal,
    require_int,
    require_non_negative,
)
from .results import ErrorKind, LedgerResult

logger = logging.getLogger(__name__)


class GameLedger:
    """
    Single-ledger game economy with an owner/admin authorization model.

    The owner is fixed at construction. Reward payouts and withdrawals are
    always drawn from the owner's balance.
    """

    def __init__(self, owner: Principal, enable_audit: bool = True):
        if not owner:
            raise ValueError("owner is required")

        self._owner = owner
        self.enable_audit = enable_audit

        self._balances: Dict[Principal, int] = {}
        self._admins: Dict[Principal, bool] = {}
        self._achievements: Dict[int, Achievement] = {}
        self._claims: Dict[ClaimKey, ClaimRecord] = {}
        self._total_minted = 0

        self._audit_logs: List[AuditLog] = []
        self._last_audit_hash: Optional[str] = None

        # Serializes every operation, reads included
        self._lock = threading.RLock()

        logger.info("GameLedger initialized for owner=%s, audit=%s", owner, enable_audit)

    @classmethod
    def from_settings(cls, settings: LedgerSettings) -> "GameLedger":
        return cls(owner=settings.owner, enable_audit=settings.enable_audit)

    @property
    def owner(self) -> Principal:
        return self._owner

    # ------------------------------------------------------------------
    # Authorization predicates
    # ------------------------------------------------------------------

    def is_owner(self, principal: Principal) -> bool:
        return principal == self._owner

    def is_admin_or_owner(self, principal: Principal) -> bool:
        with self._lock:
            return self.is_owner(principal) or self._admins.get(principal, False)

    # ------------------------------------------------------------------
    # Internal helpers (callers hold the lock)
    # ------------------------------------------------------------------

    def _balance(self, account: Principal) -> int:
        return self._balances.get(account, 0)

    def _move(self, source: Principal, destination: Principal, amount: int) -> None:
        """Debit source and credit destination. Preconditions are checked by callers."""
        self._balances[source] = self._balance(source) - amount
        self._balances[destination] = self._balance(destination) + amount

    def _add_audit_log(
        self,
        action: AuditAction,
        entity_type: str,
        entity_id: str,
        actor_id: Optional[Principal] = None,
        old_value: Optional[Dict[str, Any]] = None,
        new_value: Optional[Dict[str, Any]] = None,
    ) -> Optional[AuditLog]:
        """Add an audit log entry with hash chain."""
        if not self.enable_audit:
            return None

        log = AuditLog(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            actor_id=actor_id,
            old_value=old_value,
            new_value=new_value,
            previous_hash=self._last_audit_hash,
        )
        log.entry_hash = log.compute_hash()
        self._last_audit_hash = log.entry_hash
        self._audit_logs.append(log)

        logger.debug("Audit log: %s %s:%s", action.value, entity_type, entity_id)
        return log

    def _audit_move(
        self,
        action: AuditAction,
        source: Principal,
        destination: Principal,
        amount: int,
        actor_id: Principal,
        **extra: Any,
    ) -> None:
        self._add_audit_log(
            action=action,
            entity_type="balance",
            entity_id=f"{source}->{destination}",
            actor_id=actor_id,
            new_value={
                "from": source,
                "to": destination,
                "amount": amount,
                "from_balance": self._balance(source),
                "to_balance": self._balance(destination),
                **extra,
            },
        )

    # ------------------------------------------------------------------
    # Owner-only operations
    # ------------------------------------------------------------------

    def initialize_token_supply(self, amount: int, sender: Principal) -> LedgerResult[bool]:
        """
        Mint ``amount`` tokens into the owner's balance.

        The amount's sign is not validated here, unlike :meth:`withdraw_tokens`.
        """
        require_int("amount", amount)
        with self._lock:
            if not self.is_owner(sender):
                return LedgerResult.failed(ErrorKind.OWNER_ONLY)

            old_balance = self._balance(self._owner)
            self._balances[self._owner] = old_balance + amount
            self._total_minted += amount

            self._add_audit_log(
                action=AuditAction.MINT,
                entity_type="balance",
                entity_id=self._owner,
                actor_id=sender,
                old_value={"balance": old_balance},
                new_value={"balance": self._balances[self._owner], "minted": amount},
            )
            logger.info("Minted %d tokens, owner balance=%d", amount, self._balances[self._owner])
            return LedgerResult.succeeded(True)

    def add_game_admin(self, admin: Principal, sender: Principal) -> LedgerResult[bool]:
        with self._lock:
            if not self.is_owner(sender):
                return LedgerResult.failed(ErrorKind.OWNER_ONLY)

            previous = self._admins.get(admin, False)
            self._admins[admin] = True

            self._add_audit_log(
                action=AuditAction.ADD_ADMIN,
                entity_type="admin",
                entity_id=admin,
                actor_id=sender,
                old_value={"active": previous},
                new_value={"active": True},
            )
            logger.info("Admin added: %s", admin)
            return LedgerResult.succeeded(True)

    def remove_game_admin(self, admin: Principal, sender: Principal) -> LedgerResult[bool]:
        """Deactivate an admin. The entry is kept and flagged ``False``."""
        with self._lock:
            if not self.is_owner(sender):
                return LedgerResult.failed(ErrorKind.OWNER_ONLY)

            previous = self._admins.get(admin, False)
            self._admins[admin] = False

            self._add_audit_log(
                action=AuditAction.REMOVE_ADMIN,
                entity_type="admin",
                entity_id=admin,
                actor_id=sender,
                old_value={"active": previous},
                new_value={"active": False},
            )
            logger.info("Admin removed: %s", admin)
            return LedgerResult.succeeded(True)

    def withdraw_tokens(self, amount: int, recipient: Principal, sender: Principal) -> LedgerResult[bool]:
        """Move ``amount`` tokens from the owner's balance to ``recipient``."""
        require_int("amount", amount)
        with self._lock:
            if not self.is_owner(sender):
                return LedgerResult.failed(ErrorKind.OWNER_ONLY)
            if amount <= 0:
                return LedgerResult.failed(ErrorKind.INVALID_AMOUNT)

            self._move(self._owner, recipient, amount)

            self._audit_move(AuditAction.WITHDRAW, self._owner, recipient, amount, sender)
            logger.info("Withdrew %d tokens to %s", amount, recipient)
            return LedgerResult.succeeded(True)

    # ------------------------------------------------------------------
    # Achievement management (admin or owner)
    # ------------------------------------------------------------------

    def add_achievement(
        self,
        achievement_id: int,
        name: str,
        description: str,
        reward_amount: int,
        sender: Principal,
    ) -> LedgerResult[bool]:
        require_int("achievement_id", achievement_id)
        require_non_negative("reward_amount", reward_amount)
        with self._lock:
            if not self.is_admin_or_owner(sender):
                return LedgerResult.failed(ErrorKind.UNAUTHORIZED)
            if achievement_id in self._achievements:
                return LedgerResult.failed(ErrorKind.ACHIEVEMENT_EXISTS)

            achievement = Achievement(
                achievement_id=achievement_id,
                name=name,
                description=description,
                reward_amount=reward_amount,
                active=True,
            )
            self._achievements[achievement_id] = achievement

            self._add_audit_log(
                action=AuditAction.CREATE_ACHIEVEMENT,
                entity_type="achievement",
                entity_id=str(achievement_id),
                actor_id=sender,
                new_value=achievement.to_dict(),
            )
            logger.info("Achievement created: id=%d, reward=%d", achievement_id, reward_amount)
            return LedgerResult.succeeded(True)

    def update_achievement(
        self,
        achievement_id: int,
        name: str,
        description: str,
        reward_amount: int,
        active: bool,
        sender: Principal,
    ) -> LedgerResult[bool]:
        """Replace every field of an existing achievement, including ``active``."""
        require_int("achievement_id", achievement_id)
        require_non_negative("reward_amount", reward_amount)
        with self._lock:
            if not self.is_admin_or_owner(sender):
                return LedgerResult.failed(ErrorKind.UNAUTHORIZED)
            existing = self._achievements.get(achievement_id)
            if existing is None:
                return LedgerResult.failed(ErrorKind.NOT_FOUND)

            updated = Achievement(
                achievement_id=achievement_id,
                name=name,
                description=description,
                reward_amount=reward_amount,
                active=bool(active),
            )
            self._achievements[achievement_id] = updated

            self._add_audit_log(
                action=AuditAction.UPDATE_ACHIEVEMENT,
                entity_type="achievement",
                entity_id=str(achievement_id),
                actor_id=sender,
                old_value=existing.to_dict(),
                new_value=updated.to_dict(),
            )
            logger.info("Achievement updated: id=%d, active=%s", achievement_id, updated.active)
            return LedgerResult.succeeded(True)

    def award_achievement(self, player: Principal, achievement_id: int, sender: Principal) -> LedgerResult[bool]:
        """
        Award an achievement and pay its reward from the owner's balance.

        Inactive achievements are reported as ``NOT_FOUND``. The owner's balance
        is not checked before the payout.
        """
        require_int("achievement_id", achievement_id)
        with self._lock:
            if not self.is_admin_or_owner(sender):
                return LedgerResult.failed(ErrorKind.UNAUTHORIZED)

            achievement = self._achievements.get(achievement_id)
            if achievement is None or not achievement.active:
                return LedgerResult.failed(ErrorKind.NOT_FOUND)

            key = (player, achievement_id)
            claim = self._claims.get(key)
            if claim is not None and claim.claimed:
                return LedgerResult.failed(ErrorKind.ALREADY_CLAIMED)

            self._claims[key] = ClaimRecord(player=player, achievement_id=achievement_id)
            self._move(self._owner, player, achievement.reward_amount)

            self._audit_move(
                AuditAction.AWARD,
                self._owner,
                player,
                achievement.reward_amount,
                sender,
                achievement_id=achievement_id,
            )
            logger.info(
                "Achievement %d awarded to %s, reward=%d",
                achievement_id, player, achievement.reward_amount,
            )
            return LedgerResult.succeeded(True)

    # ------------------------------------------------------------------
    # Transfers
    # ------------------------------------------------------------------

    def transfer_between_players(
        self,
        amount: int,
        sender: Principal,
        recipient: Principal,
    ) -> LedgerResult[bool]:
        require_int("amount", amount)
        with self._lock:
            if amount <= 0:
                return LedgerResult.failed(ErrorKind.INVALID_AMOUNT)
            if self._balance(sender) < amount:
                return LedgerResult.failed(ErrorKind.INSUFFICIENT_BALANCE)

            self._move(sender, recipient, amount)

            self._audit_move(AuditAction.TRANSFER, sender, recipient, amount, sender)
            logger.info("Transferred %d tokens from %s to %s", amount, sender, recipient)
            return LedgerResult.succeeded(True)

    def admin_transfer_between_players(
        self,
        amount: int,
        sender: Principal,
        recipient: Principal,
        admin: Principal,
    ) -> LedgerResult[bool]:
        """
        Move tokens between players on an admin's authority.

        This is a privileged override: the source balance is not checked and
        may go negative.
        """
        require_int("amount", amount)
        with self._lock:
            if not self.is_admin_or_owner(admin):
                return LedgerResult.failed(ErrorKind.UNAUTHORIZED)
            if amount <= 0:
                return LedgerResult.failed(ErrorKind.INVALID_AMOUNT)

            self._move(sender, recipient, amount)

            if self._balance(sender) < 0:
                logger.warning(
                    "Admin transfer by %s left %s with negative balance %d",
                    admin, sender, self._balance(sender),
                )

            self._audit_move(AuditAction.ADMIN_TRANSFER, sender, recipient, amount, admin)
            logger.info("Admin %s transferred %d tokens from %s to %s", admin, amount, sender, recipient)
            return LedgerResult.succeeded(True)

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------

    def get_token_balance(self, account: Principal) -> int:
        with self._lock:
            return self._balance(account)

    def get_achievement(self, achievement_id: int) -> LedgerResult[Achievement]:
        """Return a copy of the achievement, or ``NOT_FOUND``."""
        with self._lock:
            achievement = self._achievements.get(achievement_id)
            if achievement is None:
                return LedgerResult.failed(ErrorKind.NOT_FOUND)
            return LedgerResult.succeeded(dataclasses.replace(achievement))

    def check_achievement_claimed(self, player: Principal, achievement_id: int) -> bool:
        with self._lock:
            claim = self._claims.get((player, achievement_id))
            return claim is not None and claim.claimed

    def check_is_admin(self, account: Principal) -> bool:
        with self._lock:
            return self._admins.get(account, False)

    def get_claimed_achievements(self, player: Principal) -> List[int]:
        with self._lock:
            return sorted(
                achievement_id
                for (claimant, achievement_id), claim in self._claims.items()
                if claimant == player and claim.claimed
            )

    def get_player_stats(self, player: Principal) -> PlayerStats:
        with self._lock:
            return PlayerStats(
                player=player,
                token_balance=self._balance(player),
                achievements_claimed=self.get_claimed_achievements(player),
                is_admin=self._admins.get(player, False),
            )

    def list_achievements(self) -> List[Achievement]:
        with self._lock:
            return [
                dataclasses.replace(self._achievements[achievement_id])
                for achievement_id in sorted(self._achievements)
            ]

    def list_admins(self) -> List[Principal]:
        """Active admins only; removed admins are omitted."""
        with self._lock:
            return sorted(admin for admin, active in self._admins.items() if active)

    # ------------------------------------------------------------------
    # Supply accounting
    # ------------------------------------------------------------------

    def total_minted(self) -> int:
        with self._lock:
            return self._total_minted

    def total_supply(self) -> int:
        with self._lock:
            return sum(self._balances.values())

    def check_invariants(self) -> List[str]:
        """
        Check conservation and the balance floor.

        Returns:
            Human-readable violations; empty when the ledger is consistent
        """
        violations: List[str] = []
        with self._lock:
            supply = sum(self._balances.values())
            if supply != self._total_minted:
                violations.append(
                    f"Total supply {supply} does not match minted amount {self._total_minted}"
                )
            for account in sorted(self._balances):
                balance = self._balances[account]
                if balance < 0:
                    violations.append(f"Negative balance for {account}: {balance}")
        return violations

    # ------------------------------------------------------------------
    # Audit trail
    # ------------------------------------------------------------------

    def get_audit_log(self) -> List[AuditLog]:
        with self._lock:
            return list(self._audit_logs)

    def verify_audit_chain(self) -> bool:
        """Verify every entry's hash and its link to the previous entry."""
        with self._lock:
            previous_hash: Optional[str] = None
            for log in self._audit_logs:
                if log.previous_hash != previous_hash:
                    return False
                if log.entry_hash != log.compute_hash():
                    return False
                previous_hash = log.entry_hash
            return True

    # ------------------------------------------------------------------
    # State export / restore
    # ------------------------------------------------------------------

    def export_state(self) -> Dict[str, Any]:
        """Export ledger state as a JSON-serializable dict."""
        with self._lock:
            return {
                "owner": self._owner,
                "total_minted": self._total_minted,
                "balances": dict(self._balances),
                "admins": dict(self._admins),
                "achievements": [a.to_dict() for a in self.list_achievements()],
                "claims": [
                    [player, achievement_id]
                    for (player, achievement_id), claim in sorted(self._claims.items())
                    if claim.claimed
                ],
            }

    @classmethod
    def from_state(cls, state: Dict[str, Any], enable_audit: bool = True) -> "GameLedger":
        """
        Rebuild a ledger from :meth:`export_state` output.

        The audit trail is not part of the exported state and starts empty.
        """
        ledger = cls(owner=state["owner"], enable_audit=enable_audit)
        ledger._total_minted = require_int("total_minted", state.get("total_minted", 0))
        ledger._balances = {
            account: require_int("balance", balance)
            for account, balance in state.get("balances", {}).items()
        }
        ledger._admins = {admin: bool(active) for admin, active in state.get("admins", {}).items()}
        for data in state.get("achievements", []):
            achievement = Achievement.from_dict(data)
            ledger._achievements[achievement.achievement_id] = achievement
        for player, achievement_id in state.get("claims", []):
            record = ClaimRecord(player=player, achievement_id=require_int("achievement_id", achievement_id))
            ledger._claims[record.key] = record

        logger.info(
            "GameLedger restored: %d accounts, %d achievements, %d claims",
            len(ledger._balances), len(ledger._achievements), len(ledger._claims),
        )
        return ledger
