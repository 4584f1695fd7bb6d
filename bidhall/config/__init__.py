"""Configuration helpers for the auction server."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

import yaml

_DEFAULT_SERVER_CONFIG = Path(__file__).resolve().parent / "server.yaml"
_DEFAULT_CATALOG_CONFIG = Path(__file__).resolve().parent / "catalog.yaml"

# Largest integer a JSON client can represent exactly.
MAX_SAFE_INTEGER = 2**53 - 1


@dataclass(frozen=True)
class AuctionConfig:
    duration_seconds: int
    tick_interval_ms: int


@dataclass(frozen=True)
class ParticipantsConfig:
    initial_balance: int
    max_name_length: int


@dataclass(frozen=True)
class PublisherConfig:
    queue_size: int


@dataclass(frozen=True)
class CorsConfig:
    allow_origins: tuple[str, ...]


@dataclass(frozen=True)
class ServerConfig:
    listen: Mapping[str, Any]
    auction: AuctionConfig
    participants: ParticipantsConfig
    publisher: PublisherConfig
    cors: CorsConfig


def load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(path)
    return yaml.safe_load(path.read_text()) or {}


def parse_server_config(data: Mapping[str, Any]) -> ServerConfig:
    auction = data.get("auction", {})
    participants = data.get("participants", {})
    publisher = data.get("publisher", {})
    cors = data.get("cors", {})
    config = ServerConfig(
        listen=dict(data.get("listen") or {}),
        auction=AuctionConfig(
            duration_seconds=int(auction.get("duration_seconds", 15)),
            tick_interval_ms=int(auction.get("tick_interval_ms", 1000)),
        ),
        participants=ParticipantsConfig(
            initial_balance=int(participants.get("initial_balance", 500)),
            max_name_length=int(participants.get("max_name_length", 20)),
        ),
        publisher=PublisherConfig(
            queue_size=int(publisher.get("queue_size", 32)),
        ),
        cors=CorsConfig(
            allow_origins=tuple(cors.get("allow_origins") or ("*",)),
        ),
    )
    if config.auction.duration_seconds < 1:
        raise ValueError("auction.duration_seconds must be at least 1")
    if config.auction.tick_interval_ms < 1:
        raise ValueError("auction.tick_interval_ms must be positive")
    if config.participants.initial_balance < 0:
        raise ValueError("participants.initial_balance must not be negative")
    if config.participants.initial_balance > MAX_SAFE_INTEGER:
        raise ValueError(f"participants.initial_balance must not exceed {MAX_SAFE_INTEGER}")
    if config.publisher.queue_size < 1:
        raise ValueError("publisher.queue_size must be at least 1")
    return config


@lru_cache(maxsize=1)
def get_server_config() -> ServerConfig:
    path = Path(os.getenv("BIDHALL_CONFIG_PATH", _DEFAULT_SERVER_CONFIG))
    return parse_server_config(load_yaml(path))


def get_catalog_path() -> Path:
    return Path(os.getenv("BIDHALL_CATALOG_PATH", _DEFAULT_CATALOG_CONFIG))
