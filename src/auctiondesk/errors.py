"""Client error taxonomy - read path, local validation, submission path."""

from __future__ import annotations


class AuctionClientError(Exception):
    """Base class for every error the auction client raises on purpose."""


class ReadError(AuctionClientError):
    """Snapshot fetch failed or returned a malformed payload."""


class InvalidAmount(AuctionClientError, ValueError):
    """Bid amount rejected locally; nothing was submitted."""


class SigningRejected(AuctionClientError):
    """No signer connected, or the user/provider declined to sign."""


class SubmissionError(AuctionClientError):
    """Signed transaction was rejected by the network or the node."""


class ConfirmationTimeout(AuctionClientError):
    """Confirmation did not arrive in time. The transaction may still land."""

    def __init__(self, tx_hash: str, timeout_sec: float) -> None:
        super().__init__(f"Transaction {tx_hash} not confirmed within {timeout_sec:g}s")
        self.tx_hash = tx_hash
        self.timeout_sec = timeout_sec
