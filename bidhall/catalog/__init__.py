from .registry import Catalog, Item

__all__ = ["Catalog", "Item"]
