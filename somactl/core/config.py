"""Startup configuration: YAML config file, positional device ids, and validation."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Sequence
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import yaml
from jsonschema import ValidationError, validators

from somactl.core.errors import ConfigLoadError, ConfigurationError, ConfigValidationError

DEFAULT_DISCOVERY_TIMEOUT = 30.0
DEFAULT_BASE_TOPIC = "homeassistant"
IGNORE_MARKER = "_"
MQTT_DEFAULT_PORTS = {"mqtt": 1883, "tcp": 1883, "mqtts": 8883, "ssl": 8883, "ws": 80, "wss": 443}
LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise ConfigValidationError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class AppConfig:
    discovery_timeout: float = DEFAULT_DISCOVERY_TIMEOUT
    expected_devices: int | None = None
    connect_ids: tuple[str, ...] = ()
    ignore_ids: tuple[str, ...] = ()
    mqtt_url: str | None = None
    mqtt_base_topic: str = DEFAULT_BASE_TOPIC + "/"
    mqtt_username: str | None = None
    mqtt_password: str | None = None
    dashboard_port: int | None = None
    debug: bool = False


def default_config_path() -> Path:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "somactl/config.yaml"


def _load_schema_validator() -> Any:
    schema_text = resources.files("somactl.schemas").joinpath("config.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def load_config_file(path: Path | None = None) -> dict[str, Any]:
    """Read and validate a YAML config file.

    Without an explicit ``path`` the XDG default is used, and a missing default
    file yields an empty mapping.
    """
    if path is None:
        path = default_config_path()
        if not path.exists():
            return {}

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigLoadError(f"Could not read config file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ConfigValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigValidationError(f"Config file {path} must contain a mapping at root")

    try:
        _load_schema_validator().validate(loaded)
    except ValidationError as exc:
        where = ".".join(str(p) for p in exc.path)
        where = f" ({where})" if where else ""
        raise ConfigValidationError(f"Schema validation failed for {path}{where}: {exc.message}") from exc

    LOGGER.debug("Loaded config from %s", path)
    return loaded


def parse_device_args(args: Sequence[str]) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """Split positional ids into (connect ids, ignore ids).

    Ids prefixed with ``_`` are ignored; separators are stripped from both.
    """
    connect: list[str] = []
    ignore: list[str] = []
    for arg in args:
        if arg.startswith(IGNORE_MARKER):
            ignore.append(arg[len(IGNORE_MARKER):].replace(":", ""))
        else:
            connect.append(arg.replace(":", ""))
    return tuple(connect), tuple(ignore)


def parse_broker_url(url: str) -> tuple[str, str, int, str]:
    """Return (scheme, host, port, websocket path) for a broker URL."""
    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    if scheme not in MQTT_DEFAULT_PORTS:
        raise ConfigValidationError(f"Unsupported MQTT URL scheme '{parsed.scheme}' in {url}")
    if not parsed.hostname:
        raise ConfigValidationError(f"MQTT URL {url} has no host")
    return scheme, parsed.hostname, parsed.port or MQTT_DEFAULT_PORTS[scheme], parsed.path or "/mqtt"


def normalize_topic(topic: str) -> str:
    return topic if topic.endswith("/") else topic + "/"


def build_config(
    file_values: dict[str, Any] | None = None,
    *,
    devices: Sequence[str] | None = None,
    **overrides: Any,
) -> AppConfig:
    """Merge config file values with command line overrides.

    Overrides set to None fall back to the file value, then to the default.
    """
    values = dict(file_values or {})
    file_devices = values.pop("devices", None) or []
    values.update({key: value for key, value in overrides.items() if value is not None})
    connect_ids, ignore_ids = parse_device_args(devices or file_devices)

    unknown = set(values) - set(AppConfig.__dataclass_fields__)
    if unknown:
        raise ConfigValidationError(f"Unknown config keys: {', '.join(sorted(unknown))}")

    values["mqtt_base_topic"] = normalize_topic(values.get("mqtt_base_topic", DEFAULT_BASE_TOPIC))
    if "discovery_timeout" in values:
        values["discovery_timeout"] = float(values["discovery_timeout"])

    config = AppConfig(connect_ids=connect_ids, ignore_ids=ignore_ids, **values)
    validate_config(config)
    return config


def validate_config(config: AppConfig) -> None:
    if config.discovery_timeout <= 0:
        raise ConfigValidationError("Discovery timeout must be a positive number of seconds")
    if config.expected_devices is not None and config.expected_devices < 1:
        raise ConfigValidationError("Expected device count must be at least 1")
    if config.dashboard_port is not None and not 0 < config.dashboard_port < 65536:
        raise ConfigValidationError(f"Dashboard port {config.dashboard_port} is out of range")
    if config.mqtt_url:
        parse_broker_url(config.mqtt_url)
    if not config.mqtt_url and not config.dashboard_port:
        raise ConfigurationError("Neither --express-port or --mqtt-url supplied, nothing to do")
