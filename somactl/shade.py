"""Control-layer object for a single blind controller."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from somactl.core.model import DeviceIdentity

LOGGER = logging.getLogger(__name__)


class Shade:
    """Holds the connection to one blind once it has been accepted.

    Positioning and calibration commands go through ``client`` and are not
    handled here.
    """

    def __init__(self, identity: DeviceIdentity, peripheral: Any, adapter: Any) -> None:
        self.identity = identity
        self.peripheral = peripheral
        self.client: Any = None
        self._adapter = adapter
        self._pending: Any = None
        self._connected_listeners: list[Callable[[], None]] = []

    def add_connected_listener(self, listener: Callable[[], None]) -> None:
        self._connected_listeners.append(listener)

    @property
    def id(self) -> str:
        return self.identity.key

    @property
    def is_connected(self) -> bool:
        return self.client is not None and bool(self.client.is_connected)

    def connect(self) -> None:
        if self._pending is not None and not self._pending.done():
            return
        self._pending = self._adapter.connect(self.peripheral)
        self._pending.add_done_callback(self._connected)

    def _connected(self, future: Any) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            LOGGER.warning("Connection to %s failed: %s", self.id, exc)
            return
        self.client = future.result()
        LOGGER.info("Connected to %s", self.id)
        for listener in self._connected_listeners:
            listener()
