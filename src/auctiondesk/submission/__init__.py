"""Transaction submission: signer implementations and the submitter."""

from auctiondesk.submission.cli_signer import AptosCliSigner
from auctiondesk.submission.submitter import TransactionSubmitter

__all__ = ["AptosCliSigner", "TransactionSubmitter"]
