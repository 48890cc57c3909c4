"""Adapter interfaces."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol

from somactl.core.model import DiscoveryEvent


class Adapter(Protocol):
    def on_ready(self, callback: Callable[[], None]) -> None:
        """Register a callback invoked once the radio can scan."""

    def on_discover(self, callback: Callable[[DiscoveryEvent], None]) -> None:
        """Register a callback invoked for every advertisement seen."""

    def start_scanning(self) -> None: ...

    def stop_scanning(self) -> None: ...

    def connect(self, peripheral: Any) -> Any:
        """Start connecting without blocking; return a future for the client."""

    async def open(self) -> None:
        """Prepare the radio and fire the ready callbacks."""

    async def close(self) -> None: ...
