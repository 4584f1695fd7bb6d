from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException, Request, WebSocket, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from jsonschema import ValidationError

from .admin import config as admin_config
from .admin import stats as admin_stats
from .auction.models import BidError
from .catalog import Catalog
from .config import ServerConfig, get_catalog_path, get_server_config
from .context import AuctionContext, build_context
from .participants import DuplicateNameError, ParticipantError
from .publisher.websocket import WebSocketSubscriber
from .validation.validator import SchemaRegistry, get_schema_registry

logger = logging.getLogger(__name__)

BID_ERROR_STATUS = {
    BidError.UNKNOWN_PARTICIPANT: status.HTTP_404_NOT_FOUND,
    BidError.INVALID_AMOUNT: status.HTTP_400_BAD_REQUEST,
    BidError.BID_TOO_LOW: status.HTTP_400_BAD_REQUEST,
    BidError.INSUFFICIENT_FUNDS: status.HTTP_400_BAD_REQUEST,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    server_config = get_server_config()
    catalog = Catalog.from_yaml(get_catalog_path())
    context = build_context(server_config, catalog)

    app.state.server_config = server_config
    app.state.schema_registry = get_schema_registry()
    app.state.auction = context
    app.state.start_time = datetime.now(timezone.utc)

    context.ticker.start()
    logger.info(
        "auction started items=%d duration=%ss",
        len(catalog),
        server_config.auction.duration_seconds,
    )
    try:
        yield
    finally:
        await context.ticker.stop()
        await context.publisher.close()


app = FastAPI(
    title="Bidhall Auction Server",
    version="1.0.0",
    docs_url="/docs",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(get_server_config().cors.allow_origins),
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(admin_stats.router)
app.include_router(admin_config.router)


# Dependency helpers ---------------------------------------------------------


def get_server_settings(request: Request) -> ServerConfig:
    return request.app.state.server_config


def get_schema_service(request: Request) -> SchemaRegistry:
    return request.app.state.schema_registry


def get_auction_context(request: Request) -> AuctionContext:
    return request.app.state.auction


# Routes ---------------------------------------------------------------------


@app.get("/", tags=["meta"])
async def root(settings: ServerConfig = Depends(get_server_settings)) -> dict[str, Any]:
    return {
        "service": "bidhall",
        "version": app.version,
        "auction": {
            "duration_seconds": settings.auction.duration_seconds,
            "tick_interval_ms": settings.auction.tick_interval_ms,
        },
        "feed": "/ws",
    }


@app.get("/ping", tags=["meta"])
async def ping() -> dict[str, Any]:
    return {"status": "ok", "version": app.version}


@app.get("/api/players", tags=["players"])
async def list_players(
    context: AuctionContext = Depends(get_auction_context),
) -> list[dict[str, Any]]:
    return [participant.to_payload() for participant in context.directory.all()]


@app.post("/api/players", tags=["players"], status_code=status.HTTP_201_CREATED)
async def create_player(
    payload: dict[str, Any] = Body(...),
    schemas: SchemaRegistry = Depends(get_schema_service),
    context: AuctionContext = Depends(get_auction_context),
) -> dict[str, Any]:
    try:
        schemas.validate("player_request", payload)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc.message)) from exc
    try:
        participant = context.directory.create(payload["name"])
    except DuplicateNameError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ParticipantError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    await context.publisher.broadcast_state()
    return participant.to_payload()


@app.get("/api/players/{participant_id}", tags=["players"])
async def get_player(
    participant_id: str,
    context: AuctionContext = Depends(get_auction_context),
) -> dict[str, Any]:
    participant = context.directory.get(participant_id)
    if participant is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="participant not found")
    return participant.to_payload()


@app.get("/api/items", tags=["catalog"])
async def list_items(
    context: AuctionContext = Depends(get_auction_context),
) -> list[dict[str, Any]]:
    return [item.to_payload() for item in context.catalog.all()]


@app.get("/api/state", tags=["auction"])
async def current_state(
    context: AuctionContext = Depends(get_auction_context),
) -> dict[str, Any]:
    snapshot = await context.engine.snapshot()
    return snapshot.to_payload()


@app.post("/rpc/placeBid", tags=["auction"])
async def place_bid(
    payload: dict[str, Any] = Body(...),
    schemas: SchemaRegistry = Depends(get_schema_service),
    context: AuctionContext = Depends(get_auction_context),
) -> JSONResponse:
    try:
        schemas.validate("place_bid_request", payload)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc.message)) from exc
    receipt = await context.gateway.place_bid(payload["playerId"], payload["amount"])
    status_code = status.HTTP_200_OK if receipt.success else BID_ERROR_STATUS[receipt.error]
    return JSONResponse(status_code=status_code, content=receipt.to_payload())


@app.websocket("/ws")
@app.websocket("/")
async def state_feed(websocket: WebSocket) -> None:
    context: AuctionContext = websocket.app.state.auction
    await websocket.accept()
    subscriber = WebSocketSubscriber(websocket)
    await context.publisher.subscribe(subscriber)
    try:
        async for _ in websocket.iter_text():
            pass
    finally:
        context.publisher.unsubscribe(subscriber)
