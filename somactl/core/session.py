"""Scan session state machine deciding when discovery ends."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

from somactl.core.errors import DiscoveryStarvationError
from somactl.core.filters import canonical_ids
from somactl.core.model import Count, ExplicitSet, ScanTarget, SessionState, Timeout
from somactl.core.registry import DeviceRegistry

LOGGER = logging.getLogger(__name__)

TimerFactory = Callable[[float, Callable[[], None]], Any]


def build_scan_target(
    connect_ids: Sequence[str],
    expected_devices: int | None,
    discovery_timeout: float,
) -> ScanTarget:
    """Explicit ids win over an expected count, which wins over the timeout."""
    ids = canonical_ids(connect_ids)
    if ids:
        return ExplicitSet(ids)
    if expected_devices:
        return Count(expected_devices)
    return Timeout(discovery_timeout)


def describe_scan_target(target: ScanTarget) -> str:
    if isinstance(target, ExplicitSet):
        return f"scanning for {target.count} device(s) {list(target.ids)}"
    if isinstance(target, Count):
        return f"No device names supplied, will stop scanning after {target.count} device(s) are found"
    return f"No device names supplied, will stop scanning after {target.seconds:g} seconds"


class ScanSession:
    """IDLE -> SCANNING -> STOPPED, never re-entering SCANNING."""

    def __init__(
        self,
        target: ScanTarget,
        *,
        adapter: Any,
        registry: DeviceRegistry,
        timer_factory: TimerFactory,
        on_timer: Callable[[], None],
    ) -> None:
        self.target = target
        self.state = SessionState.IDLE
        self._adapter = adapter
        self._registry = registry
        self._timer_factory = timer_factory
        self._on_timer = on_timer
        self._timer: Any = None

    @property
    def is_scanning(self) -> bool:
        return self.state is SessionState.SCANNING

    def start(self) -> bool:
        if self.state is not SessionState.IDLE:
            LOGGER.debug("Adapter ready again while %s, ignoring", self.state.value)
            return False
        self.state = SessionState.SCANNING
        self._adapter.start_scanning()
        if isinstance(self.target, Timeout):
            self._timer = self._timer_factory(self.target.seconds, self._on_timer)
        return True

    def device_registered(self) -> None:
        if not self.is_scanning or isinstance(self.target, Timeout):
            return
        if len(self._registry) >= self.target.count:
            LOGGER.info("All expected devices found, stopping scan")
            self._stop()
            self._registry.connect_all()

    def expire(self) -> None:
        if not self.is_scanning or not isinstance(self.target, Timeout):
            return
        LOGGER.info("Stopping scan after timeout")
        self._stop()
        if len(self._registry) == 0:
            raise DiscoveryStarvationError(
                f"No devices found within {self.target.seconds:g} seconds"
            )
        self._registry.connect_all()

    def _stop(self) -> None:
        self.state = SessionState.STOPPED
        self._registry.close()
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._adapter.stop_scanning()
