import subprocess

import pytest

from selfreg_cli.commands import credentials
from selfreg_cli.commands.inputs import RegistrySettings
from selfreg_cli.errors import ProvisionError

_HASH = "$2y$05$abcdefghijklmnopqrstuu0123456789abcdefghijklmnopqrstu"


def _settings(tmp_path, username: str = "admin", password: str = "Secr3t!") -> RegistrySettings:
    settings = RegistrySettings(
        address="203.0.113.10",
        username=username,
        password=password,
        infra_dir=str(tmp_path / "infra"),
        data_dir=str(tmp_path / "data"),
    )
    settings.auth_dir.mkdir(parents=True, exist_ok=True)
    return settings


def _fake_run(calls):
    def _run(cmd, *, input=None, **_kwargs):
        calls.append((cmd, input))
        user = cmd[-1]
        return subprocess.CompletedProcess(cmd, 0, f"{user}:{_HASH}\n\n", "")

    return _run


def test_password_goes_to_stdin_not_argv(tmp_path, monkeypatch) -> None:
    calls = []
    monkeypatch.setattr(credentials, "run", _fake_run(calls))

    credentials.generate_htpasswd(_settings(tmp_path))

    cmd, stdin = calls[0]
    assert cmd[:5] == ["docker", "run", "--rm", "-i", "httpd:2"]
    assert "-iBn" in cmd
    assert not any("Secr3t!" in part for part in cmd)
    assert stdin == "Secr3t!\n"


def test_rerun_with_other_user_replaces_entry(tmp_path, monkeypatch) -> None:
    calls = []
    monkeypatch.setattr(credentials, "run", _fake_run(calls))

    credentials.generate_htpasswd(_settings(tmp_path, username="admin"))
    path = credentials.generate_htpasswd(_settings(tmp_path, username="ci"))

    assert credentials.read_htpasswd_users(path) == ["ci"]
    assert path.read_text(encoding="utf-8") == f"ci:{_HASH}\n"


def test_parse_rejects_missing_entry() -> None:
    with pytest.raises(ProvisionError, match="no entry"):
        credentials.parse_htpasswd_output("", "admin")


def test_parse_rejects_non_bcrypt() -> None:
    with pytest.raises(ProvisionError, match="non-bcrypt"):
        credentials.parse_htpasswd_output("admin:$apr1$xyz$abc\n", "admin")
