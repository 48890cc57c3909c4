"""Candidate and acceptance predicates applied to discovery events."""

from __future__ import annotations

import re
from collections.abc import Iterable

from somactl.core.identity import FAMILY_PREFIX, SENTINEL_NAME, normalize_address
from somactl.core.model import ByName, DeviceIdentity, DiscoveryEvent

_ADDRESS_RE = re.compile(r"^[0-9A-Fa-f]{12}$")


def normalize_id(value: str) -> str:
    return value.replace(":", "")


def canonical_ids(ids: Iterable[str]) -> tuple[str, ...]:
    """Distinct ids in supplied order, with address-shaped ids lower-cased."""
    seen: dict[str, None] = {}
    for value in ids:
        value = normalize_id(value)
        if _ADDRESS_RE.match(value):
            value = value.lower()
        seen.setdefault(value, None)
    return tuple(seen)


class IdList:
    """Immutable set of operator-supplied ids.

    Names are matched as supplied, addresses case-insensitively.
    """

    def __init__(self, ids: Iterable[str] = ()) -> None:
        self._ids = frozenset(normalize_id(i) for i in ids)
        self._lowered = frozenset(i.lower() for i in self._ids)

    def __bool__(self) -> bool:
        return bool(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self):
        return iter(sorted(self._ids))

    def has_name(self, name: str | None) -> bool:
        return name is not None and name in self._ids

    def has_address(self, address: str | None) -> bool:
        return bool(address) and normalize_address(address) in self._lowered

    def has_identity(self, identity: DeviceIdentity) -> bool:
        if isinstance(identity, ByName):
            return self.has_name(identity.key)
        return self.has_address(identity.key)


class FilterEngine:
    def __init__(self, connect_ids: IdList, ignore_ids: IdList) -> None:
        self.connect_ids = connect_ids
        self.ignore_ids = ignore_ids

    def is_candidate(self, event: DiscoveryEvent) -> bool:
        name = event.advertised_name
        if name is not None and (name == SENTINEL_NAME or name.startswith(FAMILY_PREFIX)):
            return True
        return self.connect_ids.has_name(name) or self.connect_ids.has_address(event.hardware_address)

    def is_accepted(self, identity: DeviceIdentity, raw_address: str | None) -> bool:
        if self.ignore_ids.has_identity(identity):
            return False
        if self.connect_ids:
            return self.connect_ids.has_identity(identity) or self.connect_ids.has_address(raw_address)
        return True
