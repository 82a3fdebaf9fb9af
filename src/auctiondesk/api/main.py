"""FastAPI backend: cached auction view plus bid/close/collect actions."""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import httpx
import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from auctiondesk.api.schemas import (
    ActionResponse,
    AuctionResponse,
    BidRequest,
    ErrorResponse,
    HealthResponse,
)
from auctiondesk.cache.view_cache import AuctionViewCache
from auctiondesk.config import get_settings
from auctiondesk.config.settings import Settings
from auctiondesk.coordinator import Action, AuctionCoordinator, Phase
from auctiondesk.ledger.base import Signer
from auctiondesk.runtime import AuctionRuntime, build_runtime

log = structlog.get_logger(__name__)

# Set by run_api() so the module-level app picks up the CLI's profile.
_config_profile: str | None = None
_config_dir: Path | None = None

_IN_FLIGHT = {409: {"description": "Same action already in flight", "model": ErrorResponse}}


def _error_json(code: str, message: str, status_code: int = 404) -> JSONResponse:
    """Return consistent error JSON: { detail, code }."""
    return JSONResponse(
        status_code=status_code,
        content={"detail": message, "code": code},
    )


def _runtime(request: Request) -> AuctionRuntime:
    return request.app.state.runtime


def _auction_view(cache: AuctionViewCache) -> Any:
    snapshot = cache.current()
    if snapshot is None:
        return _error_json("not_loaded", "Auction not loaded yet", status_code=503)
    return AuctionResponse.from_snapshot(
        snapshot, stale=cache.is_stale, last_refreshed_at=cache.last_refreshed_at
    )


def _in_flight(coordinator: AuctionCoordinator, action: Action) -> JSONResponse | None:
    # The coordinator does not guard re-entry; the API is the caller that disables the control.
    if coordinator.phase(action) is not Phase.IDLE:
        return _error_json("in_flight", f"A {action.value} transaction is already in flight", status_code=409)
    return None


def create_app(
    settings: Settings | None = None,
    *,
    signer: Signer | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    poll: bool = True,
) -> FastAPI:
    """Build the API. Components are created in lifespan; polling starts with the app."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        cfg = settings or get_settings(_config_profile, _config_dir)
        runtime = build_runtime(cfg, signer=signer, transport=transport)
        app.state.runtime = runtime
        if poll:
            runtime.cache.start(cfg.poll_interval_sec)
        log.info("api_started", node_url=cfg.node_url, module_address=cfg.module_address)
        try:
            yield
        finally:
            runtime.cache.stop()
            await runtime.node.aclose()

    app = FastAPI(title="AuctionDesk API", version="0.1.0", lifespan=lifespan)
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

    @app.get("/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get(
        "/auction",
        response_model=AuctionResponse,
        responses={503: {"description": "Auction not loaded yet", "model": ErrorResponse}},
    )
    def auction(request: Request):
        """Cached auction view. Never hits the ledger."""
        return _auction_view(_runtime(request).cache)

    @app.post(
        "/auction/refresh",
        response_model=AuctionResponse,
        responses={503: {"description": "Auction not loaded yet", "model": ErrorResponse}},
    )
    async def auction_refresh(request: Request):
        """Refresh now, then return the cached view (stale if the read failed)."""
        cache = _runtime(request).cache
        await cache.force_refresh()
        return _auction_view(cache)

    @app.post("/auction/bid", response_model=ActionResponse, responses=_IN_FLIGHT)
    async def auction_bid(body: BidRequest, request: Request):
        coordinator = _runtime(request).coordinator
        busy = _in_flight(coordinator, Action.BID)
        if busy is not None:
            return busy
        return ActionResponse.from_result(await coordinator.place_bid(body.amount))

    @app.post("/auction/close", response_model=ActionResponse, responses=_IN_FLIGHT)
    async def auction_close(request: Request):
        coordinator = _runtime(request).coordinator
        busy = _in_flight(coordinator, Action.CLOSE)
        if busy is not None:
            return busy
        return ActionResponse.from_result(await coordinator.end_auction())

    @app.post("/auction/collect", response_model=ActionResponse, responses=_IN_FLIGHT)
    async def auction_collect(request: Request):
        coordinator = _runtime(request).coordinator
        busy = _in_flight(coordinator, Action.COLLECT)
        if busy is not None:
            return busy
        return ActionResponse.from_result(await coordinator.collect_funds())

    return app


app = create_app()


def run_api(
    host: str = "127.0.0.1",
    port: int = 8000,
    profile: str | None = None,
    config_dir: Path | None = None,
) -> None:
    global _config_profile, _config_dir
    _config_profile = profile
    _config_dir = config_dir
    import uvicorn
    uvicorn.run("auctiondesk.api.main:app", host=host, port=port, reload=False)
