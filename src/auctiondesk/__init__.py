"""AuctionDesk - client for a single on-chain auction: cached view, bids, close and collect."""

__version__ = "0.1.0"
