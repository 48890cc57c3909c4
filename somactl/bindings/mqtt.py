"""MQTT publisher binding announcing each connected blind."""

from __future__ import annotations

import json
import logging
from typing import Any

import paho.mqtt.client as mqtt
from paho.mqtt.enums import CallbackAPIVersion

from somactl.core.config import parse_broker_url
from somactl.core.model import Device

LOGGER = logging.getLogger(__name__)

AVAIL_ON = "online"
AVAIL_OFF = "offline"
_SECURE_SCHEMES = {"mqtts", "ssl", "wss"}
_WEBSOCKET_SCHEMES = {"ws", "wss"}


class MqttPublisher:
    def __init__(
        self,
        device: Device,
        url: str,
        topic_prefix: str,
        username: str | None = None,
        password: str | None = None,
        *,
        client: Any = None,
    ) -> None:
        self.device = device
        self.base_topic = f"{topic_prefix}cover/{device.id}"
        scheme, host, port, path = parse_broker_url(url)

        if client is None:
            client = mqtt.Client(
                callback_api_version=CallbackAPIVersion.VERSION2,
                client_id=f"somactl_{device.id}",
                transport="websockets" if scheme in _WEBSOCKET_SCHEMES else "tcp",
            )
            if scheme in _WEBSOCKET_SCHEMES:
                client.ws_set_options(path=path)
            if scheme in _SECURE_SCHEMES:
                client.tls_set()
        self.client = client

        if username:
            self.client.username_pw_set(username, password)
        self.client.will_set(self.availability_topic, payload=AVAIL_OFF, qos=1, retain=True)
        device.controller.add_connected_listener(self.publish_state)
        self.client.on_connect = self._on_connect
        self.client.connect_async(host, port)
        self.client.loop_start()
        LOGGER.debug("MQTT publisher for %s connecting to %s:%d", device.id, host, port)

    @property
    def config_topic(self) -> str:
        return f"{self.base_topic}/config"

    @property
    def availability_topic(self) -> str:
        return f"{self.base_topic}/availability"

    @property
    def connection_topic(self) -> str:
        return f"{self.base_topic}/connection"

    def discovery_payload(self) -> dict[str, Any]:
        return {
            "name": self.device.id,
            "unique_id": f"somactl_{self.device.id}",
            "availability_topic": self.availability_topic,
            "json_attributes_topic": self.connection_topic,
            "device": {
                "identifiers": [f"somactl_{self.device.id}"],
                "name": self.device.id,
                "manufacturer": "Soma",
                "model": "Smart Shades",
            },
        }

    def _on_connect(self, client, userdata, flags, reason_code, properties=None):
        if reason_code.is_failure:
            LOGGER.warning("MQTT connection for %s refused: %s", self.device.id, reason_code)
            return
        client.publish(self.config_topic, json.dumps(self.discovery_payload()), qos=1, retain=True)
        client.publish(self.availability_topic, payload=AVAIL_ON, qos=1, retain=True)
        self.publish_state()

    def publish_state(self) -> None:
        payload = json.dumps({"state": self.device.state.value})
        self.client.publish(self.connection_topic, payload, qos=1, retain=True)

    def close(self) -> None:
        self.client.publish(self.availability_topic, payload=AVAIL_OFF, qos=1, retain=True)
        self.client.disconnect()
        self.client.loop_stop()
