"""Authoritative set of accepted devices, keyed by canonical identity."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping
from types import MappingProxyType
from typing import Any

from somactl.core.model import Controller, Device, DeviceIdentity

LOGGER = logging.getLogger(__name__)

ControllerFactory = Callable[[DeviceIdentity, Any, Any], Controller]
ConnectListener = Callable[[Device], None]


class DeviceRegistry:
    """Registers each identity once and issues its connect exactly once.

    ``capacity`` caps the number of devices in count-bounded scans.
    ``connect_on_register`` is set when the full target set is known up front,
    so devices connect as they are found instead of waiting for a bulk connect.
    """

    def __init__(
        self,
        *,
        adapter: Any,
        controller_factory: ControllerFactory,
        capacity: int | None = None,
        connect_on_register: bool = False,
    ) -> None:
        self._adapter = adapter
        self._controller_factory = controller_factory
        self._devices: dict[str, Device] = {}
        self._listeners: list[ConnectListener] = []
        self.capacity = capacity
        self.connect_on_register = connect_on_register
        self.closed = False

    def __len__(self) -> int:
        return len(self._devices)

    def __contains__(self, key: object) -> bool:
        return key in self._devices

    def __iter__(self) -> Iterator[Device]:
        return iter(list(self._devices.values()))

    @property
    def view(self) -> Mapping[str, Device]:
        return MappingProxyType(self._devices)

    @property
    def is_full(self) -> bool:
        return self.capacity is not None and len(self._devices) >= self.capacity

    def add_connect_listener(self, listener: ConnectListener) -> None:
        self._listeners.append(listener)

    def close(self) -> None:
        self.closed = True

    def register(self, identity: DeviceIdentity, peripheral: Any) -> Device | None:
        key = identity.key
        if key in self._devices:
            LOGGER.debug("Found %s again, already registered", key)
            return None
        if self.closed or self.is_full:
            LOGGER.debug("Found %s but registration is closed", key)
            return None

        controller = self._controller_factory(identity, peripheral, self._adapter)
        device = Device(identity=identity, peripheral=peripheral, controller=controller)
        self._devices[key] = device
        if self.connect_on_register:
            self.connect(device)
        return device

    def connect(self, device: Device) -> bool:
        if device.connect_requested:
            return False
        device.connect_requested = True
        LOGGER.info("Connecting to %s", device.id)
        try:
            device.controller.connect()
        except Exception:
            LOGGER.exception("Could not connect to %s", device.id)
        for listener in self._listeners:
            listener(device)
        return True

    def connect_all(self) -> int:
        return sum(1 for device in self if self.connect(device))
