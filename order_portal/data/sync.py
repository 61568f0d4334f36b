from __future__ import annotations

import time
from typing import Callable, List, Optional

from .interface import OrderStore
from .models import SalesOrder
from ..config import get_config
from ..errors import StorageError
from ..logging import get_logger


class OrderSync:
    """
    Keeps the UI's copy of the order collection in step with the store.

    - ``refresh`` polls the store; on failure it logs, records the error and keeps
      serving the last good read.
    - ``push`` writes the full collection and replaces the cached copy.
    - There is no conflict resolution: whatever was pushed last wins.
    """

    def __init__(
        self,
        store: OrderStore,
        interval_seconds: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.store = store
        self.interval_seconds = get_config().sync_interval_seconds if interval_seconds is None else interval_seconds
        self.clock = clock
        self.orders: List[SalesOrder] = []
        self.last_error: Optional[str] = None
        self._last_sync: Optional[float] = None
        self.logger = get_logger(__name__)

    @property
    def loaded(self) -> bool:
        return self._last_sync is not None

    def is_due(self) -> bool:
        if self._last_sync is None:
            return True
        return self.clock() - self._last_sync >= self.interval_seconds

    def refresh(self, silent: bool = False) -> List[SalesOrder]:
        try:
            self.orders = self.store.list_orders()
            self.last_error = None
            if not silent:
                self.logger.info(f"Synchronized {len(self.orders)} orders")
        except StorageError as e:
            self.logger.error(f"Cloud sync error: {e}")
            self.last_error = str(e)
        finally:
            self._last_sync = self.clock()
        return self.orders

    def refresh_if_due(self) -> List[SalesOrder]:
        """Heartbeat: poll silently once the interval has elapsed."""
        if self.is_due():
            return self.refresh(silent=self.loaded)
        return self.orders

    def push(self, orders: List[SalesOrder]) -> None:
        """Replace the local copy and write it through; StorageError propagates to the caller."""
        self.orders = list(orders)
        self.store.save_orders(self.orders)
