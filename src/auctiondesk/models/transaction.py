"""Intents, pending transactions, receipts and outcomes."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

U64_MAX = 2**64 - 1


class BidIntent(BaseModel):
    """Bid amount in octas. Built from user input, dropped after submission."""

    model_config = ConfigDict(frozen=True)

    amount: int = Field(..., gt=0, le=U64_MAX)


class EntryFunctionIntent(BaseModel):
    """Unsigned entry-function call: target function plus serialized arguments."""

    model_config = ConfigDict(frozen=True)

    function: str  # <address>::<module>::<function>
    type_arguments: tuple[str, ...] = ()
    arguments: tuple[str, ...] = ()  # u64 travels as a decimal string
    argument_types: tuple[str, ...] = ()

    @property
    def function_name(self) -> str:
        return self.function.rsplit("::", 1)[-1]

    def payload(self) -> dict:
        """Entry function payload in the node's JSON shape."""
        return {
            "type": "entry_function_payload",
            "function": self.function,
            "type_arguments": list(self.type_arguments),
            "arguments": list(self.arguments),
        }


class PendingTransaction(BaseModel):
    """What the signer hands back after submitting."""

    hash: str


class TransactionReceipt(BaseModel):
    """Executed transaction as reported by the node."""

    hash: str
    success: bool
    vm_status: str = ""
    version: int | None = None
    gas_used: int | None = None


class TxStatus(str, Enum):
    PENDING = "pending"
    COMMITTED = "committed"
    FAILED = "failed"


class TransactionOutcome(BaseModel):
    """Submitted transaction; moves from PENDING to one terminal status exactly once."""

    model_config = ConfigDict(frozen=True)

    hash: str
    status: TxStatus = TxStatus.PENDING
    receipt: TransactionReceipt | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status is not TxStatus.PENDING

    def settle(self, receipt: TransactionReceipt) -> TransactionOutcome:
        """Return the terminal outcome for receipt. Settling twice is an error."""
        if self.is_terminal:
            raise ValueError(f"Transaction {self.hash} already settled as {self.status.value}")
        status = TxStatus.COMMITTED if receipt.success else TxStatus.FAILED
        return self.model_copy(update={"status": status, "receipt": receipt})
