import pytest

from somactl.core.filters import FilterEngine, IdList, canonical_ids
from somactl.core.model import ByAddress, ByName, DiscoveryEvent


def _event(name: str | None, address: str | None = None) -> DiscoveryEvent:
    return DiscoveryEvent(advertised_name=name, hardware_address=address, peripheral=object())


def _engine(connect=(), ignore=()) -> FilterEngine:
    return FilterEngine(IdList(connect), IdList(ignore))


@pytest.mark.parametrize("connect, ignore", [((), ()), (("RISE1",), ()), ((), ("RISE108", "S"))])
def test_sentinel_and_family_are_always_candidates(connect, ignore) -> None:
    engine = _engine(connect, ignore)
    assert engine.is_candidate(_event("S"))
    assert engine.is_candidate(_event("RISE108"))


def test_unrelated_peripherals_are_not_candidates() -> None:
    engine = _engine()
    assert not engine.is_candidate(_event("Fitbit Charge", "11:22:33:44:55:66"))
    assert not engine.is_candidate(_event(None, "11:22:33:44:55:66"))
    assert not engine.is_candidate(_event(None, None))


def test_connect_list_makes_named_or_addressed_peripheral_a_candidate() -> None:
    engine = _engine(connect=("Bedroom", "AA:BB:CC:DD:EE:FF"))
    assert engine.is_candidate(_event("Bedroom"))
    assert engine.is_candidate(_event(None, "aa:bb:cc:dd:ee:ff"))
    assert not engine.is_candidate(_event("bedroom"))


def test_ignore_dominates_connect_list() -> None:
    engine = _engine(connect=("RISE999",), ignore=("RISE999",))
    assert not engine.is_accepted(ByName("RISE999"), None)


def test_open_world_accepts_everything_not_ignored() -> None:
    engine = _engine(ignore=("RISE999",))
    assert engine.is_accepted(ByName("RISE108"), None)
    assert engine.is_accepted(ByAddress("aabbccddeeff"), "AA:BB:CC:DD:EE:FF")
    assert not engine.is_accepted(ByName("RISE999"), None)


def test_closed_world_accepts_only_listed_ids() -> None:
    engine = _engine(connect=("RISE108", "AABBCCDDEEFF"))
    assert engine.is_accepted(ByName("RISE108"), None)
    assert engine.is_accepted(ByAddress("aabbccddeeff"), "AA:BB:CC:DD:EE:FF")
    assert not engine.is_accepted(ByName("RISE117"), None)


def test_closed_world_matches_raw_address_for_named_device() -> None:
    engine = _engine(connect=("11:22:33:44:55:66",))
    assert engine.is_accepted(ByName("RISE108"), "11:22:33:44:55:66")


def test_ignored_address_is_case_insensitive() -> None:
    engine = _engine(ignore=("AA:BB:CC:DD:EE:FF",))
    assert not engine.is_accepted(ByAddress("aabbccddeeff"), "aa:bb:cc:dd:ee:ff")


def test_id_list_strips_separators() -> None:
    ids = IdList(["AA:BB:CC:DD:EE:FF", "RISE108"])
    assert list(ids) == ["AABBCCDDEEFF", "RISE108"]
    assert len(ids) == 2
    assert not IdList()


def test_canonical_ids_collapse_address_spellings_but_keep_names() -> None:
    ids = canonical_ids(["AA:BB:CC:DD:EE:FF", "RISE108", "aabbccddeeff", "RISE108", "rise108"])
    assert ids == ("aabbccddeeff", "RISE108", "rise108")
