from pathlib import Path

import pytest

from upgrades_deployer import ConfigurationError, DeploymentConfig
from upgrades_deployer.config import DEFAULT_RPC_URL


def test_defaults():
    config = DeploymentConfig().validate()

    assert config.rpc_url == DEFAULT_RPC_URL
    assert config.artifacts_dir == Path("artifacts")
    assert config.kind == "auto"
    assert config.confirmations == 1
    assert config.call_initializer


@pytest.mark.parametrize(
    "settings",
    [
        {"confirmations": 0},
        {"timeout": 0},
        {"poll_latency": -1},
        {"kind": "beacon"},
        {"rpc_url": ""},
    ],
)
def test_invalid_settings(settings):
    with pytest.raises(ConfigurationError):
        DeploymentConfig(**settings).validate()


def test_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("CONTRACT_NAME", "Box")
    monkeypatch.setenv("RPC_URL", "http://node:8545")
    monkeypatch.setenv("ARTIFACTS_DIR", str(tmp_path))
    monkeypatch.setenv("PROXY_KIND", "uups")
    monkeypatch.setenv("CALL_INITIALIZER", "false")
    monkeypatch.setenv("CONFIRMATIONS", "3")
    monkeypatch.setenv("CONFIRMATION_TIMEOUT", "45.5")

    config = DeploymentConfig.from_env()

    assert config.contract_name == "Box"
    assert config.rpc_url == "http://node:8545"
    assert config.artifacts_dir == tmp_path
    assert config.kind == "uups"
    assert not config.call_initializer
    assert config.confirmations == 3
    assert config.timeout == 45.5
    assert config.private_key is None


def test_from_env_overrides(monkeypatch):
    monkeypatch.setenv("CONTRACT_NAME", "Box")
    config = DeploymentConfig.from_env(contract_name="Counter", kind=None)

    assert config.contract_name == "Counter"
    assert config.kind == "auto"


def test_from_env_invalid_number(monkeypatch):
    monkeypatch.setenv("CONFIRMATIONS", "many")
    with pytest.raises(ConfigurationError):
        DeploymentConfig.from_env()
