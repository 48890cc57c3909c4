"""Typer CLI entrypoint."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import typer

from somactl.core.config import DEFAULT_BASE_TOPIC, DEFAULT_DISCOVERY_TIMEOUT, build_config, load_config_file
from somactl.core.errors import SomactlError
from somactl.core.service import serve

app = typer.Typer(
    help="Discover Soma blind controllers over BLE and publish them to MQTT and/or a web dashboard",
    add_completion=False,
)

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(level=logging.DEBUG if debug else logging.INFO, format=LOG_FORMAT)
    if not debug:
        logging.getLogger("bleak").setLevel(logging.WARNING)


@app.command()
def main(
    devices: list[str] | None = typer.Argument(
        None,
        help="Device names or addresses to connect to; prefix with _ to ignore a device",
        show_default=False,
    ),
    discovery_timeout: float | None = typer.Option(
        None,
        "-t",
        "--discovery-timeout",
        envvar="SOMA_DISCOVERY_TIMEOUT",
        help=f"Seconds to scan for devices (default {DEFAULT_DISCOVERY_TIMEOUT:g}; ignored with -e or explicit ids)",
    ),
    expected_devices: int | None = typer.Option(
        None,
        "-e",
        "--expected-devices",
        envvar="SOMA_EXPECTED_DEVICES",
        help="Stop scanning once this many devices are found",
    ),
    dashboard_port: int | None = typer.Option(
        None,
        "-l",
        "--express-port",
        "--dashboard-port",
        envvar="SOMA_EXPRESS_PORT",
        help="Port for the web dashboard (if unset, the dashboard does not start)",
    ),
    mqtt_url: str | None = typer.Option(
        None, "--url", "--mqtt-url", envvar="SOMA_MQTT_URL", help="MQTT broker URL"
    ),
    mqtt_base_topic: str | None = typer.Option(
        None,
        "--topic",
        "--mqtt-base-topic",
        envvar="SOMA_MQTT_BASE_TOPIC",
        help=f"Base topic for MQTT (default {DEFAULT_BASE_TOPIC})",
    ),
    mqtt_username: str | None = typer.Option(
        None, "-u", "--mqtt-username", envvar="SOMA_MQTT_USERNAME", help="Username for MQTT"
    ),
    mqtt_password: str | None = typer.Option(
        None, "-p", "--mqtt-password", envvar="SOMA_MQTT_PASSWORD", help="Password for MQTT"
    ),
    ask_password: bool = typer.Option(
        False, "--ask-password", help="Prompt for the MQTT password at startup"
    ),
    debug: bool = typer.Option(False, "-d", "--debug", envvar="SOMA_DEBUG", help="Enable debug logging"),
    config_path: Path | None = typer.Option(
        None, "-c", "--config", envvar="SOMA_CONFIG", help="YAML config file", dir_okay=False
    ),
) -> None:
    """Scan for blind controllers, connect to them, and hand them to MQTT and the dashboard.

    With explicit ids, only those devices are connected and scanning stops once all are
    found. Otherwise scanning stops after --expected-devices are found, or after
    --discovery-timeout seconds.
    """
    try:
        if ask_password:
            mqtt_password = typer.prompt("MQTT Password", hide_input=True)
        config = build_config(
            load_config_file(config_path),
            devices=devices,
            discovery_timeout=discovery_timeout,
            expected_devices=expected_devices,
            dashboard_port=dashboard_port,
            mqtt_url=mqtt_url,
            mqtt_base_topic=mqtt_base_topic,
            mqtt_username=mqtt_username,
            mqtt_password=mqtt_password,
            debug=debug or None,
        )
    except SomactlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=exc.exit_code) from None

    _configure_logging(config.debug)
    try:
        asyncio.run(serve(config))
    except SomactlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=exc.exit_code) from None
    except KeyboardInterrupt:
        pass


def run() -> None:
    app()


if __name__ == "__main__":
    run()
