"""Auction catalog backed by YAML configuration."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Sequence

import yaml

from ..config import MAX_SAFE_INTEGER


@dataclass(frozen=True)
class Item:
    index: int
    item_id: int
    name: str
    starting_bid: int

    def to_payload(self) -> dict[str, Any]:
        return {"id": self.item_id, "name": self.name, "startingBid": self.starting_bid}


class Catalog:
    """Ordered, read-only sequence of auctionable items."""

    def __init__(self, items: Sequence[Item]) -> None:
        if not items:
            raise ValueError("catalog must contain at least one item")
        for position, item in enumerate(items):
            if item.index != position:
                raise ValueError(f"item {item.name!r} has index {item.index}, expected {position}")
            if isinstance(item.starting_bid, bool) or not isinstance(item.starting_bid, int):
                raise ValueError(f"item {item.name!r} starting_bid must be an integer")
            if item.starting_bid < 1:
                raise ValueError(f"item {item.name!r} starting_bid must be positive")
            if item.starting_bid > MAX_SAFE_INTEGER:
                raise ValueError(f"item {item.name!r} starting_bid must not exceed {MAX_SAFE_INTEGER}")
        self._items: tuple[Item, ...] = tuple(items)

    @classmethod
    def from_yaml(cls, path: Path) -> "Catalog":
        data = yaml.safe_load(path.read_text()) or {}
        return cls.from_entries(data.get("items", []))

    @classmethod
    def from_entries(cls, entries: Iterable[dict[str, Any]]) -> "Catalog":
        items = []
        for position, entry in enumerate(entries):
            items.append(
                Item(
                    index=position,
                    item_id=int(entry.get("id", position + 1)),
                    name=str(entry["name"]),
                    starting_bid=int(entry["starting_bid"]),
                )
            )
        return cls(items)

    def item_at(self, index: int) -> Item:
        return self._items[index]

    def all(self) -> tuple[Item, ...]:
        return self._items

    def __len__(self) -> int:
        return len(self._items)
