from __future__ import annotations

import pytest
from typer.testing import CliRunner

from somactl import cli
from somactl.core.errors import DiscoveryStarvationError

runner = CliRunner()


@pytest.fixture
def served(monkeypatch: pytest.MonkeyPatch, tmp_path):
    configs = []

    async def fake_serve(config, adapter=None):
        configs.append(config)

    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    monkeypatch.setattr(cli, "serve", fake_serve)
    monkeypatch.setattr(cli, "_configure_logging", lambda debug: None)
    return configs


def test_explicit_ids_and_ignores(served) -> None:
    result = runner.invoke(cli.app, ["RISE108", "RISE117", "_RISE999", "-l", "3000"])
    assert result.exit_code == 0
    config = served[0]
    assert config.connect_ids == ("RISE108", "RISE117")
    assert config.ignore_ids == ("RISE999",)
    assert config.dashboard_port == 3000


def test_mqtt_options(served) -> None:
    result = runner.invoke(
        cli.app,
        ["--url", "mqtts://broker", "--topic", "blinds", "-u", "me", "-p", "pw", "-e", "2", "-t", "60"],
    )
    assert result.exit_code == 0
    config = served[0]
    assert config.mqtt_url == "mqtts://broker"
    assert config.mqtt_base_topic == "blinds/"
    assert (config.mqtt_username, config.mqtt_password) == ("me", "pw")
    assert config.expected_devices == 2
    assert config.discovery_timeout == 60.0


def test_environment_variables(served, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SOMA_MQTT_URL", "mqtt://from-env")
    monkeypatch.setenv("SOMA_DISCOVERY_TIMEOUT", "45")
    result = runner.invoke(cli.app, [])
    assert result.exit_code == 0
    assert served[0].mqtt_url == "mqtt://from-env"
    assert served[0].discovery_timeout == 45.0


def test_password_prompt(served) -> None:
    result = runner.invoke(cli.app, ["--url", "mqtt://broker", "--ask-password"], input="hunter2\n")
    assert result.exit_code == 0
    assert served[0].mqtt_password == "hunter2"


def test_nothing_to_do_exit_code(served) -> None:
    result = runner.invoke(cli.app, ["RISE108"])
    assert result.exit_code == 3
    assert "nothing to do" in result.stderr
    assert served == []


def test_starvation_exit_code(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    async def starving_serve(config, adapter=None):
        raise DiscoveryStarvationError("No devices found within 30 seconds")

    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    monkeypatch.setattr(cli, "serve", starving_serve)
    monkeypatch.setattr(cli, "_configure_logging", lambda debug: None)
    result = runner.invoke(cli.app, ["-l", "3000"])
    assert result.exit_code == 4
    assert "Error: No devices found" in result.stderr
    assert "Traceback" not in result.stderr


def test_bad_config_file_is_clean_error(served, tmp_path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("expected_devices: many\n", encoding="utf-8")
    result = runner.invoke(cli.app, ["-c", str(path), "-l", "3000"])
    assert result.exit_code == 1
    assert "Error: Schema validation failed" in result.stderr


def test_unsupported_broker_url_fails_before_serving(served) -> None:
    result = runner.invoke(cli.app, ["--url", "http://broker"])
    assert result.exit_code == 1
    assert "Error: Unsupported MQTT URL scheme 'http'" in result.stderr
    assert served == []
