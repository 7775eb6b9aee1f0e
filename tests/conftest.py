"""
Pytest configuration for arcade-ledger tests.
"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Add package source to path
package_src = Path(__file__).parent.parent / "src"
if str(package_src) not in sys.path:
    sys.path.insert(0, str(package_src))

from arcade_ledger import GameLedger  # noqa: E402


OWNER = "ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM"
ADMIN = "ST2CY5V39NHDPWSXMW9QDT3HC3GD6Q6XX4CFRK9AG"
PLAYER_1 = "ST3AM1A56AK2C1XAFJ4115ZSV26EB49BVQ10MGCS0"
PLAYER_2 = "ST31DA6FTSJX2WGTZ69SFY11BH51NZMB0ZZ239N96"


@pytest.fixture
def owner():
    """Owner principal fixed at ledger construction."""
    return OWNER


@pytest.fixture
def admin():
    """Principal that tests promote to admin."""
    return ADMIN


@pytest.fixture
def player():
    return PLAYER_1


@pytest.fixture
def other_player():
    return PLAYER_2


@pytest.fixture
def ledger(owner):
    """Fresh ledger with no state."""
    return GameLedger(owner=owner)


@pytest.fixture
def funded_ledger(ledger, owner, admin):
    """Ledger with an admin, 10000 minted tokens and two achievements."""
    ledger.add_game_admin(admin, sender=owner)
    ledger.initialize_token_supply(10000, sender=owner)
    ledger.add_achievement(1, "First Win", "Win your first game", 100, sender=owner)
    ledger.add_achievement(2, "Champion", "Win 10 games", 500, sender=owner)
    return ledger
