"""JSON framing for messages pushed to subscribers."""

from __future__ import annotations

from typing import Any, Union

import orjson

from ..auction.models import LotSettled, StateSnapshot

GAME_STATE = "GAME_STATE"
AUCTION_WON = "AUCTION_WON"

_ORJSON_OPTIONS = orjson.OPT_STRICT_INTEGER


JsonType = Union[str, int, float, bool, None, list["JsonType"], dict[str, "JsonType"]]


def encode_message(message_type: str, data: Any) -> str:
    """Return the ``{"type", "data"}`` envelope as JSON text."""
    return orjson.dumps({"type": message_type, "data": data}, option=_ORJSON_OPTIONS).decode()


def encode_state(snapshot: StateSnapshot) -> str:
    return encode_message(GAME_STATE, snapshot.to_payload())


def encode_lot_won(event: LotSettled) -> str:
    return encode_message(AUCTION_WON, event.to_payload())


def decode_message(raw: Union[str, bytes]) -> dict[str, JsonType]:
    return orjson.loads(raw)
