from __future__ import annotations

from concurrent.futures import Future

import pytest

from somactl.core.model import DiscoveryEvent


class FakeAdapter:
    def __init__(self) -> None:
        self.ready_callbacks = []
        self.discover_callbacks = []
        self.calls: list[str] = []
        self.connects: list[object] = []
        self.futures: list[Future] = []
        self.closed = False

    def on_ready(self, callback) -> None:
        self.ready_callbacks.append(callback)

    def on_discover(self, callback) -> None:
        self.discover_callbacks.append(callback)

    def start_scanning(self) -> None:
        self.calls.append("start")

    def stop_scanning(self) -> None:
        self.calls.append("stop")

    def connect(self, peripheral) -> Future:
        self.connects.append(peripheral)
        future: Future = Future()
        self.futures.append(future)
        return future

    async def open(self) -> None:
        self.ready()

    async def close(self) -> None:
        self.closed = True

    def ready(self) -> None:
        for callback in self.ready_callbacks:
            callback()

    def emit(self, name: str | None = None, address: str | None = None, peripheral=None) -> None:
        event = DiscoveryEvent(advertised_name=name, hardware_address=address, peripheral=peripheral or object())
        for callback in self.discover_callbacks:
            callback(event)


class FakeTimerHandle:
    def __init__(self, delay: float, callback) -> None:
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeTimers:
    def __init__(self) -> None:
        self.armed: list[FakeTimerHandle] = []

    def __call__(self, delay: float, callback) -> FakeTimerHandle:
        handle = FakeTimerHandle(delay, callback)
        self.armed.append(handle)
        return handle

    def fire(self) -> None:
        for handle in self.armed:
            if not handle.cancelled:
                handle.callback()


def drain(orchestrator) -> None:
    while not orchestrator.events.empty():
        orchestrator.handle(orchestrator.events.get_nowait())


@pytest.fixture
def adapter() -> FakeAdapter:
    return FakeAdapter()


@pytest.fixture
def timers() -> FakeTimers:
    return FakeTimers()
