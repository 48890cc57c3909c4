"""Orchestrator wiring discovery events to the registry, session and bindings."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from somactl.adapters.base import Adapter
from somactl.core.config import AppConfig
from somactl.core.dispatch import BindingFactory, Dispatch
from somactl.core.filters import FilterEngine, IdList
from somactl.core.identity import resolve
from somactl.core.model import (
    AdapterReady,
    Discovered,
    DiscoveryEvent,
    ExplicitSet,
    OrchestratorEvent,
    ScanTarget,
    SessionState,
    Timeout,
    TimerExpired,
)
from somactl.core.registry import ControllerFactory, DeviceRegistry
from somactl.core.session import ScanSession, TimerFactory, build_scan_target, describe_scan_target
from somactl.shade import Shade

LOGGER = logging.getLogger(__name__)


def _call_later(delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
    return asyncio.get_running_loop().call_later(delay, callback)


class Orchestrator:
    """Consumes adapter and timer events one at a time from a single queue."""

    def __init__(
        self,
        *,
        adapter: Adapter,
        target: ScanTarget,
        filters: FilterEngine,
        controller_factory: ControllerFactory,
        dispatch: Dispatch | None = None,
        timer_factory: TimerFactory = _call_later,
    ) -> None:
        self.adapter = adapter
        self.target = target
        self.filters = filters
        self.dispatch = dispatch or Dispatch()
        self.registry = DeviceRegistry(
            adapter=adapter,
            controller_factory=controller_factory,
            capacity=None if isinstance(target, Timeout) else target.count,
            connect_on_register=isinstance(target, ExplicitSet),
        )
        self.registry.add_connect_listener(self.dispatch)
        self.session = ScanSession(
            target,
            adapter=adapter,
            registry=self.registry,
            timer_factory=timer_factory,
            on_timer=lambda: self.post(TimerExpired()),
        )
        self.events: asyncio.Queue[OrchestratorEvent] = asyncio.Queue()
        adapter.on_ready(lambda: self.post(AdapterReady()))
        adapter.on_discover(lambda event: self.post(Discovered(event)))

    def post(self, event: OrchestratorEvent) -> None:
        self.events.put_nowait(event)

    def handle(self, event: OrchestratorEvent) -> None:
        if isinstance(event, AdapterReady):
            self.session.start()
        elif isinstance(event, Discovered):
            self._discovered(event.event)
        elif isinstance(event, TimerExpired):
            self.session.expire()

    async def run(self) -> None:
        """Process events until the scan session stops.

        Raises DiscoveryStarvationError when a timed scan finds nothing.
        """
        while self.session.state is not SessionState.STOPPED:
            event = await self.events.get()
            self.handle(event)

    def _discovered(self, event: DiscoveryEvent) -> None:
        if not self.session.is_scanning:
            return
        if not self.filters.is_candidate(event):
            return

        identity = resolve(event)
        if identity is None:
            LOGGER.debug("Dropping candidate without name or address")
            return

        if not self.filters.is_accepted(identity, event.hardware_address):
            if self.filters.ignore_ids.has_identity(identity):
                LOGGER.debug("Found %s but will not connect as it is in the ignored ID list", identity.key)
            else:
                LOGGER.debug(
                    "Found %s but will not connect as it was not specified in the list of devices %s",
                    identity.key,
                    list(self.filters.connect_ids),
                )
            return

        device = self.registry.register(identity, event.peripheral)
        if device is None:
            return
        LOGGER.info("Discovered %s", device.id)
        self.session.device_registered()


def build_orchestrator(
    config: AppConfig,
    adapter: Adapter,
    *,
    controller_factory: ControllerFactory | None = None,
    timer_factory: TimerFactory = _call_later,
) -> Orchestrator:
    bindings: dict[str, BindingFactory] = {}
    if config.mqtt_url:
        from somactl.bindings.mqtt import MqttPublisher

        def _mqtt(device):
            return MqttPublisher(
                device,
                config.mqtt_url,
                config.mqtt_base_topic,
                config.mqtt_username,
                config.mqtt_password,
            )

        bindings["mqtt"] = _mqtt

    target = build_scan_target(config.connect_ids, config.expected_devices, config.discovery_timeout)
    LOGGER.info(describe_scan_target(target))
    return Orchestrator(
        adapter=adapter,
        target=target,
        filters=FilterEngine(IdList(config.connect_ids), IdList(config.ignore_ids)),
        controller_factory=controller_factory or Shade,
        dispatch=Dispatch(bindings),
        timer_factory=timer_factory,
    )


async def serve(config: AppConfig, adapter: Adapter | None = None) -> None:
    """Run discovery, then keep bindings and the dashboard alive until cancelled."""
    if adapter is None:
        from somactl.adapters.bleak_adapter import BleakAdapter

        adapter = BleakAdapter()

    orchestrator = build_orchestrator(config, adapter)
    dashboard = None
    if config.dashboard_port:
        from somactl.bindings.dashboard import DashboardServer

        dashboard = DashboardServer(orchestrator.registry.view, config.dashboard_port)
        try:
            await dashboard.start()
        except OSError:
            LOGGER.exception("Could not start dashboard on port %d", config.dashboard_port)
            await dashboard.stop()
            dashboard = None

    try:
        await adapter.open()
        await orchestrator.run()
        await asyncio.Event().wait()
    finally:
        if dashboard is not None:
            await dashboard.stop()
        orchestrator.dispatch.close()
        await adapter.close()
