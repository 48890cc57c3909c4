"""Per-device fan-out to output bindings."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from somactl.core.model import Device

LOGGER = logging.getLogger(__name__)

BindingFactory = Callable[[Device], Any]


class Dispatch:
    """Builds every configured binding for each device entering CONNECTING.

    A failing binding is logged and skipped; it never affects the device's
    registration or the other bindings.
    """

    def __init__(self, factories: dict[str, BindingFactory] | None = None) -> None:
        self.factories: dict[str, BindingFactory] = dict(factories or {})
        self.bindings: dict[str, list[Any]] = {}

    def __call__(self, device: Device) -> None:
        built = self.bindings.setdefault(device.id, [])
        for name, factory in self.factories.items():
            try:
                built.append(factory(device))
            except Exception:
                LOGGER.exception("Could not start %s binding for %s", name, device.id)

    def close(self) -> None:
        for device_id, built in self.bindings.items():
            for binding in built:
                close = getattr(binding, "close", None)
                if close is None:
                    continue
                try:
                    close()
                except Exception:
                    LOGGER.exception("Could not close binding for %s", device_id)
