"""Core data models shared by the orchestrator, bindings, and CLI."""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True)
class DiscoveryEvent:
    advertised_name: str | None
    hardware_address: str | None
    peripheral: Any = field(compare=False, repr=False)


@dataclass(frozen=True)
class ByName:
    name: str

    @property
    def key(self) -> str:
        return self.name


@dataclass(frozen=True)
class ByAddress:
    address: str

    @property
    def key(self) -> str:
        return self.address.replace(":", "").lower()


DeviceIdentity = ByName | ByAddress


class ConnectionState(str, enum.Enum):
    DISCOVERED = "discovered"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class Controller(Protocol):
    """Control-layer object built for every accepted device."""

    @property
    def is_connected(self) -> bool: ...

    def connect(self) -> None: ...

    def add_connected_listener(self, listener: Callable[[], None]) -> None:
        """Register a callback invoked once the connection completes."""


@dataclass
class Device:
    identity: DeviceIdentity
    peripheral: Any = field(repr=False)
    controller: Controller = field(repr=False)
    connect_requested: bool = False

    @property
    def id(self) -> str:
        return self.identity.key

    @property
    def state(self) -> ConnectionState:
        if not self.connect_requested:
            return ConnectionState.DISCOVERED
        if self.controller.is_connected:
            return ConnectionState.CONNECTED
        return ConnectionState.CONNECTING


@dataclass(frozen=True)
class Timeout:
    seconds: float


@dataclass(frozen=True)
class Count:
    n: int

    @property
    def count(self) -> int:
        return self.n


@dataclass(frozen=True)
class ExplicitSet:
    ids: tuple[str, ...]

    @property
    def count(self) -> int:
        return len(self.ids)


ScanTarget = Timeout | Count | ExplicitSet


class SessionState(str, enum.Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    STOPPED = "stopped"


@dataclass(frozen=True)
class AdapterReady:
    pass


@dataclass(frozen=True)
class Discovered:
    event: DiscoveryEvent


@dataclass(frozen=True)
class TimerExpired:
    pass


OrchestratorEvent = AdapterReady | Discovered | TimerExpired
