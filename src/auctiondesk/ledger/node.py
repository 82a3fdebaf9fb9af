"""Ledger fullnode REST client - view calls and transaction lookup."""

from __future__ import annotations

import asyncio
from typing import Any, Sequence

import httpx
import structlog

from auctiondesk.models import TransactionReceipt

log = structlog.get_logger(__name__)

PENDING_TYPE = "pending_transaction"


def _opt_int(value: Any) -> int | None:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def parse_receipt(raw: dict[str, Any]) -> TransactionReceipt:
    """Convert a committed transaction object to TransactionReceipt."""
    return TransactionReceipt(
        hash=str(raw.get("hash", "")),
        success=bool(raw.get("success", False)),
        vm_status=str(raw.get("vm_status", "")),
        version=_opt_int(raw.get("version")),
        gas_used=_opt_int(raw.get("gas_used")),
    )


class NodeClient:
    """Async client for the fullnode API (base URL ends in /v1)."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        poll_interval_sec: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.poll_interval_sec = poll_interval_sec
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> NodeClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def view(
        self,
        function: str,
        type_arguments: Sequence[str] = (),
        arguments: Sequence[Any] = (),
    ) -> Any:
        """Execute a view function and return the decoded JSON result list."""
        body = {
            "function": function,
            "type_arguments": list(type_arguments),
            "arguments": list(arguments),
        }
        resp = await self._client.post("/view", json=body)
        resp.raise_for_status()
        return resp.json()

    async def get_transaction(self, tx_hash: str) -> dict[str, Any] | None:
        """Return the transaction object, or None if the node does not know the hash yet."""
        resp = await self._client.get(f"/transactions/by_hash/{tx_hash}")
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        return resp.json()

    async def wait_for_transaction(self, tx_hash: str) -> TransactionReceipt:
        """
        Poll until the transaction leaves the pending state and return its receipt.
        Unbounded: callers wrap this in their own timeout. Transport errors are retried.
        """
        while True:
            try:
                raw = await self.get_transaction(tx_hash)
            except httpx.TransportError as e:
                log.warning("tx_lookup_error", tx_hash=tx_hash, error=str(e))
                raw = None
            if raw is not None and raw.get("type") != PENDING_TYPE:
                return parse_receipt(raw)
            await asyncio.sleep(self.poll_interval_sec)
