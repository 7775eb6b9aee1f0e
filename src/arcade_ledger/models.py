"""Ledger data models: achievements, claims, player stats and audit records."""
from __future__ import annotations

import hashlib
import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

# Accounts are opaque identifiers supplied by the calling environment
Principal = str

# Claim records are keyed by (player, achievement_id)
ClaimKey = Tuple[Principal, int]


def require_int(name: str, value: Any) -> int:
    """
    Reject non-integer token amounts and ids.

    ``bool`` is an ``int`` subclass in Python, so it is rejected explicitly.

    Raises:
        TypeError: If value is not a plain integer
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be int, got {type(value).__name__}")
    return value


def require_non_negative(name: str, value: Any) -> int:
    """
    Reject negative integers, such as a negative achievement reward.

    Raises:
        TypeError: If value is not a plain integer
        ValueError: If value is below zero
    """
    require_int(name, value)
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")
    return value


class AuditAction(str, Enum):
    """Type of audited state transition."""
    MINT = "mint"
    ADD_ADMIN = "add_admin"
    REMOVE_ADMIN = "remove_admin"
    CREATE_ACHIEVEMENT = "create_achievement"
    UPDATE_ACHIEVEMENT = "update_achievement"
    AWARD = "award"
    WITHDRAW = "withdraw"
    TRANSFER = "transfer"
    ADMIN_TRANSFER = "admin_transfer"


@dataclass(slots=True)
class Achievement:
    """
    A reward-bearing milestone that can be awarded to players.

    Identified by a caller-chosen integer id that never changes once created.
    """
    achievement_id: int
    name: str
    description: str
    reward_amount: int
    active: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "achievement_id": self.achievement_id,
            "name": self.name,
            "description": self.description,
            "reward_amount": self.reward_amount,
            "active": self.active,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Achievement":
        return cls(
            achievement_id=require_int("achievement_id", data["achievement_id"]),
            name=data["name"],
            description=data["description"],
            reward_amount=require_non_negative("reward_amount", data["reward_amount"]),
            active=bool(data.get("active", True)),
        )


@dataclass(slots=True)
class ClaimRecord:
    """Permanent record that a player was awarded an achievement."""
    player: Principal
    achievement_id: int
    claimed: bool = True
    claimed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def key(self) -> ClaimKey:
        return (self.player, self.achievement_id)


@dataclass(slots=True)
class PlayerStats:
    """Summary of a player's standing in the ledger."""
    player: Principal
    token_balance: int = 0
    achievements_claimed: List[int] = field(default_factory=list)
    is_admin: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player": self.player,
            "token_balance": self.token_balance,
            "achievements_claimed": list(self.achievements_claimed),
            "is_admin": self.is_admin,
        }


@dataclass(slots=True)
class AuditLog:
    """
    Audit trail entry for a successful ledger mutation.

    Each entry carries the hash of its predecessor, making the
    trail tamper-evident.
    """
    audit_id: str = field(default_factory=lambda: f"aud_{uuid.uuid4().hex[:16]}")

    # What happened
    action: AuditAction = AuditAction.TRANSFER
    entity_type: str = ""  # "balance", "admin", "achievement", "claim"
    entity_id: str = ""

    # Who asked for it
    actor_id: Optional[Principal] = None

    # Change details
    old_value: Optional[Dict[str, Any]] = None
    new_value: Optional[Dict[str, Any]] = None

    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # Hash chain for tamper evidence
    previous_hash: Optional[str] = None
    entry_hash: Optional[str] = None

    def compute_hash(self) -> str:
        """Compute hash including previous entry for chain."""
        data = json.dumps({
            "audit_id": self.audit_id,
            "action": self.action.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "actor_id": self.actor_id,
            "old_value": self.old_value,
            "new_value": self.new_value,
            "created_at": self.created_at.isoformat(),
            "previous_hash": self.previous_hash or "",
        }, sort_keys=True)
        return hashlib.sha256(data.encode()).hexdigest()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "audit_id": self.audit_id,
            "action": self.action.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "actor_id": self.actor_id,
            "old_value": self.old_value,
            "new_value": self.new_value,
            "created_at": self.created_at.isoformat(),
            "previous_hash": self.previous_hash,
            "entry_hash": self.entry_hash,
        }
