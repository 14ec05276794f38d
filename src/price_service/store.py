"""In-memory price store keyed by random UUIDs."""

import logging
import uuid
from typing import Dict, List, Optional
from uuid import UUID

from price_service.rwlock import ReadWriteLock


logger = logging.getLogger(__name__)


class PriceNotFound(LookupError):
    """No live price is stored under the given identifier."""

    def __init__(self, price_id: UUID) -> None:
        super().__init__(f"price {price_id} not found")
        self.price_id = price_id


class PriceStore:
    """
    Thread-safe mapping of price id to price value.

    Reads (``list_all``, ``get``) share the lock; ``create``, ``update`` and
    ``delete`` take it exclusively. Each call acquires the lock once and
    releases it before returning or raising.
    """

    def __init__(self, prices: Optional[Dict[UUID, int]] = None) -> None:
        self._prices: Dict[UUID, int] = dict(prices or {})
        self._lock = ReadWriteLock()

    def create(self, price: int) -> UUID:
        with self._lock.write_locked():
            price_id = uuid.uuid4()
            while price_id in self._prices:
                price_id = uuid.uuid4()
            self._prices[price_id] = price
        logger.debug("created price %s=%d", price_id, price)
        return price_id

    def list_all(self) -> List[int]:
        """Return all stored prices (no ordering guarantee)."""
        with self._lock.read_locked():
            return list(self._prices.values())

    def get(self, price_id: UUID) -> int:
        with self._lock.read_locked():
            try:
                return self._prices[price_id]
            except KeyError:
                raise PriceNotFound(price_id) from None

    def update(self, price_id: UUID, price: int) -> None:
        with self._lock.write_locked():
            if price_id not in self._prices:
                raise PriceNotFound(price_id)
            self._prices[price_id] = price
        logger.debug("updated price %s=%d", price_id, price)

    def delete(self, price_id: UUID) -> None:
        with self._lock.write_locked():
            try:
                del self._prices[price_id]
            except KeyError:
                raise PriceNotFound(price_id) from None
        logger.debug("deleted price %s", price_id)

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._prices)

    def __contains__(self, price_id: object) -> bool:
        with self._lock.read_locked():
            return price_id in self._prices
