"""Named-call handler for the ledger's wire protocol.

The calling environment invokes the ledger through discrete named calls such
as ``"awardAchievement"``, each with a dict of arguments that includes the
authenticated ``sender``. Each handler validates its arguments, runs the
matching :class:`~arcade_ledger.engine.GameLedger` operation, and returns
``{"ok": value}`` or ``{"err": code}``.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr

from .config import LedgerSettings, load_settings
from .engine import GameLedger
from .logging_config import LogContext, generate_request_id, setup_logging
from .results import LedgerResult

logger = logging.getLogger(__name__)


class _CallArgs(BaseModel):
    model_config = ConfigDict(extra="forbid")


class SenderArgs(_CallArgs):
    sender: StrictStr


class AmountArgs(SenderArgs):
    amount: StrictInt


class AdminArgs(SenderArgs):
    admin: StrictStr


class AddAchievementArgs(SenderArgs):
    achievement_id: StrictInt
    name: StrictStr
    description: StrictStr
    reward_amount: StrictInt = Field(ge=0)


class UpdateAchievementArgs(AddAchievementArgs):
    active: StrictBool


class AwardArgs(SenderArgs):
    player: StrictStr
    achievement_id: StrictInt


class WithdrawArgs(AmountArgs):
    recipient: StrictStr


class TransferArgs(AmountArgs):
    recipient: StrictStr


class AdminTransferArgs(TransferArgs):
    admin: StrictStr


class AccountArgs(_CallArgs):
    account: StrictStr


class AchievementArgs(_CallArgs):
    achievement_id: StrictInt


class PlayerAchievementArgs(_CallArgs):
    player: StrictStr
    achievement_id: StrictInt


class PlayerArgs(_CallArgs):
    player: StrictStr


class LedgerCallHandler:
    """Dispatches named ledger calls and returns wire-format results.

    Args:
        ledger: The engine to operate on.
        legacy_error_codes: Emit ``1`` instead of the named code for
            insufficient balance in peer transfers.
    """

    def __init__(self, ledger: GameLedger, legacy_error_codes: bool = False) -> None:
        self.ledger = ledger
        self.legacy_error_codes = legacy_error_codes
        self._handlers: dict[str, tuple[type[_CallArgs], Callable[[Any], LedgerResult]]] = {
            "initializeTokenSupply": (AmountArgs, self._initialize_token_supply),
            "addGameAdmin": (AdminArgs, self._add_game_admin),
            "removeGameAdmin": (AdminArgs, self._remove_game_admin),
            "addAchievement": (AddAchievementArgs, self._add_achievement),
            "updateAchievement": (UpdateAchievementArgs, self._update_achievement),
            "awardAchievement": (AwardArgs, self._award_achievement),
            "withdrawTokens": (WithdrawArgs, self._withdraw_tokens),
            "transferBetweenPlayers": (TransferArgs, self._transfer_between_players),
            "adminTransferBetweenPlayers": (AdminTransferArgs, self._admin_transfer_between_players),
            "getTokenBalance": (AccountArgs, self._get_token_balance),
            "getAchievement": (AchievementArgs, self._get_achievement),
            "checkAchievementClaimed": (PlayerAchievementArgs, self._check_achievement_claimed),
            "checkIsAdmin": (AccountArgs, self._check_is_admin),
            "getPlayerStats": (PlayerArgs, self._get_player_stats),
        }

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def handle(
        self,
        call_name: str,
        arguments: dict[str, Any],
        request_id: Optional[str] = None,
    ) -> dict[str, Any]:
        """Run a named call and return its wire result.

        Raises:
            ValueError: If *call_name* is not a recognised ledger call.
            pydantic.ValidationError: If *arguments* are malformed.
        """
        if call_name not in self._handlers:
            raise ValueError(
                f"Unknown call '{call_name}'. "
                f"Valid calls: {', '.join(sorted(CALL_NAMES))}"
            )
        args_model, handler = self._handlers[call_name]
        args = args_model.model_validate(arguments)

        with LogContext(
            request_id=request_id or generate_request_id(),
            sender=getattr(args, "sender", None),
        ):
            logger.debug("Handling ledger call %s", call_name)
            result = handler(args)
        return result.to_wire(legacy_error_codes=self.legacy_error_codes)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _initialize_token_supply(self, args: AmountArgs) -> LedgerResult:
        return self.ledger.initialize_token_supply(args.amount, args.sender)

    def _add_game_admin(self, args: AdminArgs) -> LedgerResult:
        return self.ledger.add_game_admin(args.admin, args.sender)

    def _remove_game_admin(self, args: AdminArgs) -> LedgerResult:
        return self.ledger.remove_game_admin(args.admin, args.sender)

    def _add_achievement(self, args: AddAchievementArgs) -> LedgerResult:
        return self.ledger.add_achievement(
            args.achievement_id, args.name, args.description, args.reward_amount, args.sender,
        )

    def _update_achievement(self, args: UpdateAchievementArgs) -> LedgerResult:
        return self.ledger.update_achievement(
            args.achievement_id, args.name, args.description, args.reward_amount, args.active, args.sender,
        )

    def _award_achievement(self, args: AwardArgs) -> LedgerResult:
        return self.ledger.award_achievement(args.player, args.achievement_id, args.sender)

    def _withdraw_tokens(self, args: WithdrawArgs) -> LedgerResult:
        return self.ledger.withdraw_tokens(args.amount, args.recipient, args.sender)

    def _transfer_between_players(self, args: TransferArgs) -> LedgerResult:
        return self.ledger.transfer_between_players(args.amount, args.sender, args.recipient)

    def _admin_transfer_between_players(self, args: AdminTransferArgs) -> LedgerResult:
        return self.ledger.admin_transfer_between_players(
            args.amount, args.sender, args.recipient, args.admin,
        )

    def _get_token_balance(self, args: AccountArgs) -> LedgerResult:
        return LedgerResult.succeeded(self.ledger.get_token_balance(args.account))

    def _get_achievement(self, args: AchievementArgs) -> LedgerResult:
        return self.ledger.get_achievement(args.achievement_id)

    def _check_achievement_claimed(self, args: PlayerAchievementArgs) -> LedgerResult:
        return LedgerResult.succeeded(
            self.ledger.check_achievement_claimed(args.player, args.achievement_id)
        )

    def _check_is_admin(self, args: AccountArgs) -> LedgerResult:
        return LedgerResult.succeeded(self.ledger.check_is_admin(args.account))

    def _get_player_stats(self, args: PlayerArgs) -> LedgerResult:
        return LedgerResult.succeeded(self.ledger.get_player_stats(args.player))


CALL_NAMES: frozenset[str] = frozenset({
    "initializeTokenSupply",
    "addGameAdmin",
    "removeGameAdmin",
    "addAchievement",
    "updateAchievement",
    "awardAchievement",
    "withdrawTokens",
    "transferBetweenPlayers",
    "adminTransferBetweenPlayers",
    "getTokenBalance",
    "getAchievement",
    "checkAchievementClaimed",
    "checkIsAdmin",
    "getPlayerStats",
})


def create_call_handler(
    settings: Optional[LedgerSettings] = None,
    configure_logging: bool = True,
) -> LedgerCallHandler:
    """Build a ledger and its call handler from settings.

    Args:
        settings: Ledger settings (loaded from the environment if omitted).
        configure_logging: Apply the logging settings to the root logger.
    """
    settings = settings or load_settings()
    if configure_logging:
        setup_logging(
            level=settings.log_level,
            json_format=settings.json_logs,
            log_file=settings.log_file or None,
        )
    ledger = GameLedger.from_settings(settings)
    return LedgerCallHandler(ledger, legacy_error_codes=settings.legacy_error_codes)
