"""Transaction submitter - sign, submit, await confirmation."""

from __future__ import annotations

import asyncio

import httpx
import structlog

from auctiondesk.errors import ConfirmationTimeout, SigningRejected, SubmissionError
from auctiondesk.ledger.base import Signer, TransactionWatcher
from auctiondesk.models import EntryFunctionIntent, TransactionOutcome, TxStatus

log = structlog.get_logger(__name__)


class TransactionSubmitter:
    """Hands intents to the signer and waits for the ledger verdict. Does not touch the view cache."""

    def __init__(
        self,
        signer: Signer,
        watcher: TransactionWatcher,
        confirmation_timeout_sec: float = 60.0,
    ) -> None:
        self.signer = signer
        self.watcher = watcher
        self.confirmation_timeout_sec = confirmation_timeout_sec

    @property
    def account(self) -> str | None:
        return self.signer.account

    async def send(self, intent: EntryFunctionIntent) -> TransactionOutcome:
        """Sign and submit. Returns a PENDING outcome."""
        if self.signer.account is None:
            raise SigningRejected("No signer connected")
        try:
            pending = await self.signer.sign_and_submit(intent)
        except (SigningRejected, SubmissionError):
            raise
        except Exception as e:
            raise SubmissionError(f"{intent.function_name} submission failed: {e}") from e
        log.info("tx_submitted", function=intent.function_name, tx_hash=pending.hash)
        return TransactionOutcome(hash=pending.hash)

    async def confirm(self, outcome: TransactionOutcome) -> TransactionOutcome:
        """Wait (bounded) for the pending outcome to reach a terminal status."""
        try:
            receipt = await asyncio.wait_for(
                self.watcher.wait_for_transaction(outcome.hash),
                timeout=self.confirmation_timeout_sec,
            )
        except asyncio.TimeoutError as e:
            # The transaction is not cancelled; the next poll reconciles if it lands.
            log.warning("tx_confirmation_timeout", tx_hash=outcome.hash, timeout=self.confirmation_timeout_sec)
            raise ConfirmationTimeout(outcome.hash, self.confirmation_timeout_sec) from e
        except httpx.HTTPError as e:
            raise SubmissionError(f"Could not confirm {outcome.hash}: {e}") from e
        except ValueError as e:
            raise SubmissionError(f"Unreadable confirmation for {outcome.hash}: {e}") from e
        settled = outcome.settle(receipt)
        if settled.status is TxStatus.COMMITTED:
            log.info("tx_committed", tx_hash=settled.hash, version=receipt.version)
        else:
            log.warning("tx_failed", tx_hash=settled.hash, vm_status=receipt.vm_status)
        return settled

    async def submit(self, intent: EntryFunctionIntent) -> TransactionOutcome:
        return await self.confirm(await self.send(intent))
