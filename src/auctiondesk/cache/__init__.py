"""Refreshable auction view cache."""

from auctiondesk.cache.view_cache import DEFAULT_POLL_INTERVAL_SEC, AuctionViewCache, CacheEvent

__all__ = ["AuctionViewCache", "CacheEvent", "DEFAULT_POLL_INTERVAL_SEC"]
