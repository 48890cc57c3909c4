"""Canonical identity resolution for discovered peripherals."""

from __future__ import annotations

from somactl.core.model import ByAddress, ByName, DeviceIdentity, DiscoveryEvent

FAMILY_PREFIX = "RISE"
SENTINEL_NAME = "S"


def normalize_address(address: str) -> str:
    return address.replace(":", "").lower()


def resolve(event: DiscoveryEvent) -> DeviceIdentity | None:
    """Return the identity for ``event`` or None when it carries nothing usable."""
    name = event.advertised_name
    if name is not None and name.startswith(FAMILY_PREFIX):
        return ByName(name)
    if event.hardware_address:
        return ByAddress(normalize_address(event.hardware_address))
    return None
