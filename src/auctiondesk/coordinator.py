"""Auction coordinator - user actions against the view cache and the submitter."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable

import structlog

from auctiondesk.cache.view_cache import AuctionViewCache
from auctiondesk.errors import AuctionClientError, ConfirmationTimeout, InvalidAmount
from auctiondesk.ledger.intents import AmountLike, IntentBuilder, parse_amount
from auctiondesk.models import EntryFunctionIntent, TransactionReceipt, TxStatus
from auctiondesk.submission.submitter import TransactionSubmitter

log = structlog.get_logger(__name__)


class Action(str, Enum):
    BID = "bid"
    CLOSE = "close"
    COLLECT = "collect"


class Phase(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"  # signing + submission
    SETTLING = "settling"  # confirmation + forced refresh


class ResultStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class Notification:
    """One user-facing message per action."""

    title: str
    description: str
    variant: str = "default"  # "default" | "destructive"


@dataclass(frozen=True)
class ActionResult:
    action: Action
    status: ResultStatus
    tx_hash: str | None = None
    receipt: TransactionReceipt | None = None
    error: str | None = None
    reason: str | None = None  # why a SKIPPED action did nothing

    @property
    def ok(self) -> bool:
        return self.status is ResultStatus.SUCCEEDED


Notifier = Callable[[Notification], None]


def log_notifier(notification: Notification) -> None:
    """Default notifier: structured log line."""
    if notification.variant == "destructive":
        log.warning("notify", title=notification.title, description=notification.description)
    else:
        log.info("notify", title=notification.title, description=notification.description)


class AuctionCoordinator:
    """
    Runs bid / close / collect. Each action moves IDLE -> SUBMITTING -> SETTLING and always
    returns to IDLE, reporting exactly one success or failure. Concurrent calls for the
    same action are not serialized here; callers check `phase()` / `busy` first.
    """

    def __init__(
        self,
        cache: AuctionViewCache,
        submitter: TransactionSubmitter,
        intents: IntentBuilder,
        *,
        notifier: Notifier | None = None,
    ) -> None:
        self.cache = cache
        self.submitter = submitter
        self.intents = intents
        self.notifier = notifier or log_notifier
        self.bid_input: AmountLike = 0
        self._phases: dict[Action, Phase] = {action: Phase.IDLE for action in Action}

    @property
    def account(self) -> str | None:
        return self.submitter.account

    @property
    def busy(self) -> bool:
        return any(phase is not Phase.IDLE for phase in self._phases.values())

    def phase(self, action: Action) -> Phase:
        return self._phases[action]

    def set_bid_input(self, value: AmountLike) -> None:
        self.bid_input = value

    async def place_bid(self, amount: AmountLike | None = None) -> ActionResult:
        """Bid `amount` APT (defaults to the input field). Zero, negative or no account is a no-op."""
        value = self.bid_input if amount is None else amount
        if self.account is None:
            return self._skip(Action.BID, "no_account")
        try:
            parsed = parse_amount(value)
            if parsed.is_finite() and parsed <= 0:
                return self._skip(Action.BID, "non_positive_amount")
            intent = self.intents.build_bid_intent(parsed)
        except InvalidAmount as e:
            self.bid_input = 0
            return self._fail(Action.BID, str(e))
        return await self._execute(Action.BID, intent)

    async def end_auction(self) -> ActionResult:
        if self.account is None:
            return self._skip(Action.CLOSE, "no_account")
        return await self._execute(Action.CLOSE, self.intents.build_close_intent())

    async def collect_funds(self) -> ActionResult:
        if self.account is None:
            return self._skip(Action.COLLECT, "no_account")
        return await self._execute(Action.COLLECT, self.intents.build_collect_intent())

    async def _execute(self, action: Action, intent: EntryFunctionIntent) -> ActionResult:
        self._phases[action] = Phase.SUBMITTING
        try:
            outcome = await self.submitter.send(intent)
            self._phases[action] = Phase.SETTLING
            outcome = await self.submitter.confirm(outcome)
            self._reset_input(action)
            if outcome.status is not TxStatus.COMMITTED:
                vm_status = outcome.receipt.vm_status if outcome.receipt else "unknown"
                return self._fail(
                    action,
                    f"Transaction failed ({vm_status}), hash: {outcome.hash}",
                    tx_hash=outcome.hash,
                    receipt=outcome.receipt,
                )
            # Local view is now behind the ledger
            await self.cache.force_refresh()
            self.notifier(Notification("Success", f"Transaction succeeded, hash: {outcome.hash}"))
            log.info("action_succeeded", action=action.value, tx_hash=outcome.hash)
            return ActionResult(action, ResultStatus.SUCCEEDED, tx_hash=outcome.hash, receipt=outcome.receipt)
        except AuctionClientError as e:
            self._reset_input(action)
            tx_hash = e.tx_hash if isinstance(e, ConfirmationTimeout) else None
            return self._fail(action, str(e), tx_hash=tx_hash)
        finally:
            self._phases[action] = Phase.IDLE

    def _reset_input(self, action: Action) -> None:
        if action is Action.BID:
            self.bid_input = 0

    def _skip(self, action: Action, reason: str) -> ActionResult:
        log.debug("action_skipped", action=action.value, reason=reason)
        return ActionResult(action, ResultStatus.SKIPPED, reason=reason)

    def _fail(
        self,
        action: Action,
        message: str,
        *,
        tx_hash: str | None = None,
        receipt: TransactionReceipt | None = None,
    ) -> ActionResult:
        log.warning("action_failed", action=action.value, error=message, tx_hash=tx_hash)
        self.notifier(Notification("Error", message, variant="destructive"))
        return ActionResult(action, ResultStatus.FAILED, tx_hash=tx_hash, receipt=receipt, error=message)
