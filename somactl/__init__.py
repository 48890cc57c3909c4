"""Discover Soma blind controllers over BLE and hand them to MQTT and a dashboard."""
