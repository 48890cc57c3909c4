"""HTTP dashboard exposing the device registry."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from aiohttp import web

from somactl.core.model import ByName, Device

LOGGER = logging.getLogger(__name__)

REGISTRY_KEY: web.AppKey[Mapping[str, Device]] = web.AppKey("registry", Mapping)


def device_to_dict(device: Device) -> dict[str, Any]:
    return {
        "id": device.id,
        "identified_by": "name" if isinstance(device.identity, ByName) else "address",
        "state": device.state.value,
    }


async def devices_handler(request: web.Request) -> web.Response:
    """GET /api/devices - List registered devices."""
    registry = request.app[REGISTRY_KEY]
    return web.json_response([device_to_dict(d) for d in list(registry.values())])


async def device_handler(request: web.Request) -> web.Response:
    """GET /api/devices/{device_id} - Get one registered device."""
    registry = request.app[REGISTRY_KEY]
    device = registry.get(request.match_info["device_id"])
    if device is None:
        return web.json_response(
            {"error": {"code": "DEVICE_NOT_FOUND", "message": "No such device"}},
            status=404,
        )
    return web.json_response(device_to_dict(device))


def create_app(registry: Mapping[str, Device]) -> web.Application:
    app = web.Application()
    app[REGISTRY_KEY] = registry
    app.router.add_get("/api/devices", devices_handler)
    app.router.add_get("/api/devices/{device_id}", device_handler)
    return app


class DashboardServer:
    """Serves the registry by reference; it sees devices as they register."""

    def __init__(self, registry: Mapping[str, Device], port: int, host: str = "0.0.0.0") -> None:
        self.app = create_app(registry)
        self.port = port
        self.host = host
        self._runner: web.AppRunner | None = None

    async def start(self) -> None:
        self._runner = web.AppRunner(self.app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        LOGGER.info("Dashboard listening on port %d", self.port)

    async def stop(self) -> None:
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
