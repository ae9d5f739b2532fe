"""Letter inventories: ordered lists of single-character resource tokens."""
from __future__ import annotations

from collections import Counter
from typing import Iterable

INVENTORY_CAPACITY = 10


class InventoryHelper:
    """Pure functions over ``list[str]`` inventories, oldest token first."""

    @staticmethod
    def add(inventory: list[str], token: str, capacity: int = INVENTORY_CAPACITY) -> bool:
        """Append a token if there is room. Returns whether it was added."""
        if len(token) != 1:
            raise ValueError(f"token must be a single character, got {token!r}")
        if len(inventory) >= capacity:
            return False
        inventory.append(token)
        return True

    @staticmethod
    def missing(inventory: Iterable[str], required: Iterable[str]) -> list[str]:
        """Required tokens not covered by the inventory, as an exact multiset."""
        available = Counter(inventory)
        needed: list[str] = []
        for token in required:
            if available[token] > 0:
                available[token] -= 1
            else:
                needed.append(token)
        return needed

    @staticmethod
    def has_all(inventory: Iterable[str], required: Iterable[str]) -> bool:
        return not InventoryHelper.missing(inventory, required)

    @staticmethod
    def consume(inventory: list[str], required: Iterable[str]) -> bool:
        """Remove one occurrence of each required token. False if any is missing."""
        required = list(required)
        if not InventoryHelper.has_all(inventory, required):
            return False
        for token in required:
            inventory.remove(token)
        return True

    @staticmethod
    def take_oldest(inventory: list[str], count: int) -> list[str]:
        """Remove up to *count* tokens from the front. Returns what was removed."""
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")
        taken = inventory[:count]
        del inventory[:count]
        return taken
