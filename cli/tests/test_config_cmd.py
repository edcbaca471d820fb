import pytest
from typer.testing import CliRunner

from selfreg_cli import config
from selfreg_cli.main import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch) -> None:
    for name in ("REGISTRY_IP", "REGISTRY_USER", "REGISTRY_PASS", "REGISTRY_PORT",
                 "SELFREG_INFRA_DIR", "SELFREG_DATA_DIR", "SELFREG_CONFIG"):
        monkeypatch.delenv(name, raising=False)


def test_config_init_then_show(tmp_path) -> None:
    path = tmp_path / "config.toml"

    result = runner.invoke(app, ["config", "init", "--config", str(path), "--address", "203.0.113.10", "--port", "5443"])
    assert result.exit_code == 0, result.output
    assert config.load_config(str(path)).port == 5443

    shown = runner.invoke(app, ["config", "show", "--config", str(path)])
    assert shown.exit_code == 0, shown.output
    assert "address=203.0.113.10" in shown.output
    assert "port=5443" in shown.output


def test_config_init_refuses_overwrite(tmp_path) -> None:
    path = tmp_path / "config.toml"
    path.write_text('username = "keep"\n', encoding="utf-8")

    result = runner.invoke(app, ["config", "init", "--config", str(path)])

    assert result.exit_code == 0
    assert config.load_config(str(path)).username == "keep"


def test_config_init_rejects_hostname(tmp_path) -> None:
    result = runner.invoke(app, ["config", "init", "--config", str(tmp_path / "c.toml"), "--address", "example.com"])
    assert result.exit_code == 1


def test_config_show_reports_environment_overrides(tmp_path) -> None:
    path = tmp_path / "config.toml"
    path.write_text('address = "203.0.113.10"\nport = 5001\n', encoding="utf-8")

    result = runner.invoke(
        app,
        ["config", "show", "--config", str(path)],
        env={
            "REGISTRY_IP": "198.51.100.9",
            "REGISTRY_USER": "ci",
            "REGISTRY_PORT": "5443",
            "SELFREG_INFRA_DIR": "/opt/registry",
            "SELFREG_DATA_DIR": "/opt/registry-data",
        },
    )

    assert result.exit_code == 0, result.output
    assert "address=198.51.100.9 username=ci port=5443 password=(empty)" in result.output
    assert "infra_dir=/opt/registry data_dir=/opt/registry-data" in result.output


def test_config_show_without_file_uses_defaults(tmp_path) -> None:
    result = runner.invoke(app, ["config", "show", "--config", str(tmp_path / "missing.toml")])

    assert result.exit_code == 0, result.output
    assert "(missing, defaults apply)" in result.output
    assert "address=- username=admin port=5000" in result.output


def test_config_show_rejects_bad_port_env(tmp_path) -> None:
    result = runner.invoke(
        app,
        ["config", "show", "--config", str(tmp_path / "c.toml")],
        env={"REGISTRY_PORT": "abc"},
    )
    assert result.exit_code == 1


def test_config_init_writes_environment_values(tmp_path) -> None:
    path = tmp_path / "config.toml"

    result = runner.invoke(
        app,
        ["config", "init", "--config", str(path), "--username", "ops"],
        env={"REGISTRY_IP": "198.51.100.9", "REGISTRY_USER": "ci", "REGISTRY_PORT": "5443"},
    )

    assert result.exit_code == 0, result.output
    cfg = config.load_config(str(path))
    assert cfg.address == "198.51.100.9"
    assert cfg.username == "ops"
    assert cfg.port == 5443
    assert cfg.infra_dir == config.DEFAULT_INFRA_DIR
    assert "password" not in path.read_text(encoding="utf-8")
