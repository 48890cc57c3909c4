"""BLE adapter implementation on top of bleak."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import Any

from somactl.core.errors import AdapterError
from somactl.core.model import DiscoveryEvent

LOGGER = logging.getLogger(__name__)


class BleakAdapter:
    """Turns bleak scanner callbacks into ready/discover events.

    Every operation is scheduled as a task on the running loop so callers
    never block on the radio.
    """

    def __init__(self, *, bluez_adapter: str | None = None, connect_timeout: float = 20.0) -> None:
        self._bluez_adapter = bluez_adapter
        self._connect_timeout = connect_timeout
        self._ready_callbacks: list[Callable[[], None]] = []
        self._discover_callbacks: list[Callable[[DiscoveryEvent], None]] = []
        self._scanner: Any = None
        self._clients: list[Any] = []
        self._tasks: set[asyncio.Task[Any]] = set()

    def on_ready(self, callback: Callable[[], None]) -> None:
        self._ready_callbacks.append(callback)

    def on_discover(self, callback: Callable[[DiscoveryEvent], None]) -> None:
        self._discover_callbacks.append(callback)

    async def open(self) -> None:
        try:
            from bleak import BleakScanner  # type: ignore
        except Exception as exc:  # pragma: no cover - import failure path
            raise AdapterError("BLE scanning requires 'bleak'. Install dependency and retry.") from exc

        kwargs: dict[str, Any] = {}
        if self._bluez_adapter:
            kwargs["bluez"] = {"adapter": self._bluez_adapter}
        try:
            self._scanner = BleakScanner(detection_callback=self._detected, **kwargs)
        except Exception as exc:
            raise AdapterError(f"Could not open Bluetooth adapter: {exc}") from exc

        for callback in self._ready_callbacks:
            callback()

    def _detected(self, device: Any, advertisement: Any) -> None:
        event = DiscoveryEvent(
            advertised_name=advertisement.local_name or device.name,
            hardware_address=device.address,
            peripheral=device,
        )
        for callback in self._discover_callbacks:
            callback(event)

    def start_scanning(self) -> None:
        self._spawn(self._scanner.start(), "start scanning")

    def stop_scanning(self) -> None:
        self._spawn(self._scanner.stop(), "stop scanning")

    def connect(self, peripheral: Any) -> asyncio.Task[Any]:
        from bleak import BleakClient  # type: ignore

        client = BleakClient(peripheral, timeout=self._connect_timeout)
        self._clients.append(client)

        async def _connect() -> Any:
            await client.connect()
            return client

        return self._spawn(_connect())

    async def close(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        for client in self._clients:
            try:
                await client.disconnect()
            except Exception as exc:
                LOGGER.debug("Ignoring disconnect failure: %s", exc)

    def _spawn(self, coro: Coroutine[Any, Any, Any], action: str | None = None) -> asyncio.Task[Any]:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        if action is not None:
            task.add_done_callback(lambda t: _log_failure(t, action))
        return task


def _log_failure(task: asyncio.Task[Any], action: str) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        LOGGER.error("Could not %s: %s", action, exc)
