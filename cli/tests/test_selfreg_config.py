import pytest

from selfreg_cli import config


def test_save_config_never_writes_password(tmp_path) -> None:
    path = tmp_path / "config.toml"
    cfg = config.FileConfig(address="203.0.113.10", username="admin", port=5000)

    saved = config.save_config(cfg, str(path))
    contents = path.read_text(encoding="utf-8")

    assert saved == str(path)
    assert 'address = "203.0.113.10"' in contents
    assert "password" not in contents
    assert "infra_dir" not in contents


def test_load_config_missing_file_returns_defaults(tmp_path) -> None:
    cfg = config.load_config(str(tmp_path / "absent.toml"))
    assert cfg == config.FileConfig()


def test_load_config_rejects_bad_port(tmp_path) -> None:
    path = tmp_path / "config.toml"
    path.write_text('port = "abc"\n', encoding="utf-8")
    with pytest.raises(ValueError, match="Invalid port"):
        config.load_config(str(path))


def test_config_path_env_override(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv(config.ENV_CONFIG_PATH, str(tmp_path / "custom.toml"))
    assert config.config_path() == str(tmp_path / "custom.toml")
    assert config.config_path("/explicit.toml") == "/explicit.toml"


def test_resolve_value_precedence(monkeypatch) -> None:
    monkeypatch.setenv(config.ENV_USERNAME, "from-env")
    assert config.resolve_value("from-flag", config.ENV_USERNAME, "from-file", "dflt") == "from-flag"
    assert config.resolve_value(None, config.ENV_USERNAME, "from-file", "dflt") == "from-env"
    monkeypatch.delenv(config.ENV_USERNAME)
    assert config.resolve_value(None, config.ENV_USERNAME, "from-file", "dflt") == "from-file"
    assert config.resolve_value("  ", config.ENV_USERNAME, "", "dflt") == "dflt"


def test_resolve_port_env_and_default(monkeypatch) -> None:
    monkeypatch.delenv(config.ENV_PORT, raising=False)
    assert config.resolve_port(None, None) == config.DEFAULT_PORT
    assert config.resolve_port(None, 6000) == 6000
    monkeypatch.setenv(config.ENV_PORT, "5443")
    assert config.resolve_port(None, 6000) == 5443
    assert config.resolve_port(7000, 6000) == 7000
    monkeypatch.setenv(config.ENV_PORT, "nope")
    with pytest.raises(ValueError):
        config.resolve_port(None, None)


def test_effective_config_layers_every_field(monkeypatch) -> None:
    for name in (config.ENV_ADDRESS, config.ENV_USERNAME, config.ENV_PORT, config.ENV_DATA_DIR):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv(config.ENV_ADDRESS, "198.51.100.9")
    monkeypatch.setenv(config.ENV_INFRA_DIR, "/opt/registry")
    file_cfg = config.FileConfig(address="203.0.113.10", username="ops", port=5001, docker_certs_dir="/tmp/certs.d")

    cfg = config.effective_config(file_cfg, port=5443)

    assert cfg.address == "198.51.100.9"
    assert cfg.username == "ops"
    assert cfg.port == 5443
    assert cfg.infra_dir == "/opt/registry"
    assert cfg.data_dir == config.DEFAULT_DATA_DIR
    assert cfg.docker_certs_dir == "/tmp/certs.d"
