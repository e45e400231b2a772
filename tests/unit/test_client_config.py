import pytest
import yaml

from mediadesk.config.client_config import (
    BACKEND_URL_ENV,
    ClientConfig,
    load_client_config,
    save_client_config,
)


@pytest.fixture(autouse=True)
def _no_env_override(monkeypatch):
    monkeypatch.delenv(BACKEND_URL_ENV, raising=False)


def test_first_load_writes_template(tmp_path):
    path = tmp_path / "client.yaml"
    config, cfg_path, created = load_client_config(path)
    assert created
    assert cfg_path == path
    assert path.exists()
    assert config.backend_url == "http://127.0.0.1:8765"
    assert config.poll_rate_hz == 60
    assert config.hide_grace_period == 5.0

    _, _, created_again = load_client_config(path)
    assert not created_again


def test_grace_period_is_clamped_and_rate_validated(tmp_path):
    path = tmp_path / "client.yaml"
    path.write_text(yaml.safe_dump({"hide_grace_period": 30, "poll_rate_hz": 0}), encoding="utf-8")
    config, _, _ = load_client_config(path)
    assert config.hide_grace_period == 5.0
    assert config.poll_rate_hz == 60
    assert ClientConfig.from_dict({"hide_grace_period": 0.5}).hide_grace_period == 2.0


def test_env_overrides_backend_url(monkeypatch):
    monkeypatch.setenv(BACKEND_URL_ENV, "http://remote:1234/")
    assert ClientConfig.from_dict({"backend_url": "http://local"}).backend_url == "http://remote:1234"


def test_malformed_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "client.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    config, _, created = load_client_config(path)
    assert not created
    assert config == ClientConfig()


def test_save_round_trip(tmp_path):
    path = tmp_path / "nested" / "client.yaml"
    save_client_config(ClientConfig(backend_url="http://x:1", hide_grace_period=2.5, log_level="DEBUG"), path)
    config, _, _ = load_client_config(path)
    assert config.backend_url == "http://x:1"
    assert config.hide_grace_period == 2.5
    assert config.log_level == "DEBUG"
    assert config.poll_interval == pytest.approx(1 / 60)
