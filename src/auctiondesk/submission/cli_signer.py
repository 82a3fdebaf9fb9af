"""Signer backed by the aptos CLI: `aptos move run` signs with a local profile and submits."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import structlog

from auctiondesk.errors import SigningRejected, SubmissionError
from auctiondesk.models import EntryFunctionIntent, PendingTransaction

log = structlog.get_logger(__name__)

# Phrases the CLI uses when the user (or the profile) refuses to sign
_REJECTION_MARKERS = ("aborted by user", "unable to find config", "does not exist in the config")


def build_command(
    intent: EntryFunctionIntent,
    *,
    binary: str = "aptos",
    profile: str = "default",
    node_url: str | None = None,
) -> list[str]:
    """Argument vector for `aptos move run` executing intent."""
    cmd = [binary, "move", "run", "--function-id", intent.function]
    if intent.type_arguments:
        cmd += ["--type-args", *intent.type_arguments]
    if intent.arguments:
        types = intent.argument_types or ("u64",) * len(intent.arguments)
        cmd += ["--args", *[f"{t}:{v}" for t, v in zip(types, intent.arguments)]]
    cmd += ["--profile", profile, "--assume-yes"]
    if node_url:
        cmd += ["--url", node_url]
    return cmd


def parse_output(stdout: str) -> PendingTransaction:
    """Extract the transaction hash from CLI JSON output, or raise the matching error."""
    try:
        data: dict[str, Any] = json.loads(stdout)
    except json.JSONDecodeError as e:
        raise SubmissionError(f"Unreadable aptos CLI output: {stdout[:200]!r}") from e
    if "Error" in data:
        message = str(data["Error"])
        if any(marker in message.lower() for marker in _REJECTION_MARKERS):
            raise SigningRejected(message)
        raise SubmissionError(message)
    result = data.get("Result")
    if not isinstance(result, dict) or not result.get("transaction_hash"):
        raise SubmissionError(f"aptos CLI returned no transaction hash: {stdout[:200]!r}")
    return PendingTransaction(hash=str(result["transaction_hash"]))


class AptosCliSigner:
    """Signs through a local aptos CLI profile. Without a configured account it is disconnected."""

    def __init__(
        self,
        account: str | None,
        *,
        profile: str = "default",
        binary: str = "aptos",
        node_url: str | None = None,
        timeout_sec: float = 120.0,
    ) -> None:
        self._account = account or None
        self.profile = profile
        self.binary = binary
        self.node_url = node_url
        self.timeout_sec = timeout_sec

    @property
    def account(self) -> str | None:
        return self._account

    async def sign_and_submit(self, intent: EntryFunctionIntent) -> PendingTransaction:
        if self._account is None:
            raise SigningRejected("No account configured for the aptos CLI signer")
        cmd = build_command(intent, binary=self.binary, profile=self.profile, node_url=self.node_url)
        log.debug("aptos_cli_run", function=intent.function_name, profile=self.profile)
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise SigningRejected(f"aptos CLI not found: {self.binary}") from e
        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout_sec)
        except asyncio.TimeoutError as e:
            proc.kill()
            await proc.wait()
            raise SubmissionError("aptos CLI timed out") from e
        out = stdout.decode("utf-8", errors="replace").strip()
        if not out:
            err = stderr.decode("utf-8", errors="replace").strip()
            raise SubmissionError(f"aptos CLI exited with {proc.returncode}: {err[:200]}")
        return parse_output(out)
