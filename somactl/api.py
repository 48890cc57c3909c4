"""Stable public API for embedding somactl discovery in other tools.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from somactl.core.config import AppConfig, build_config, load_config_file
from somactl.core.errors import (
    EXIT_NO_DEVICES,
    EXIT_NOTHING_TO_DO,
    AdapterError,
    ConfigLoadError,
    ConfigurationError,
    ConfigValidationError,
    DiscoveryStarvationError,
    SomactlError,
)
from somactl.core.model import (
    AdapterReady,
    ByAddress,
    ByName,
    ConnectionState,
    Count,
    Device,
    Discovered,
    DiscoveryEvent,
    ExplicitSet,
    SessionState,
    Timeout,
    TimerExpired,
)
from somactl.core.registry import DeviceRegistry
from somactl.core.service import Orchestrator, build_orchestrator, serve

__all__ = [
    "EXIT_NO_DEVICES",
    "EXIT_NOTHING_TO_DO",
    "SomactlError",
    "AdapterError",
    "ConfigLoadError",
    "ConfigurationError",
    "ConfigValidationError",
    "DiscoveryStarvationError",
    "AppConfig",
    "build_config",
    "load_config_file",
    "AdapterReady",
    "ByAddress",
    "ByName",
    "ConnectionState",
    "Count",
    "Device",
    "Discovered",
    "DiscoveryEvent",
    "ExplicitSet",
    "SessionState",
    "Timeout",
    "TimerExpired",
    "DeviceRegistry",
    "Orchestrator",
    "build_orchestrator",
    "serve",
]
