import json
from unittest.mock import MagicMock

import pytest
from web3 import Web3

from upgrades_deployer import ArtifactRegistry, DeploymentConfig, ProxyDeployer

# Common constants
DEPLOYER = Web3.to_checksum_address("0x" + "d0" * 20)
IMPLEMENTATION = Web3.to_checksum_address("0x" + "1a" * 20)
PROXY = Web3.to_checksum_address("0x" + "2b" * 20)
ADMIN = Web3.to_checksum_address("0x" + "3c" * 20)

IMPLEMENTATION_TX = b"\x01" * 32
PROXY_TX = b"\x02" * 32

# Minimal creation code returning a one-byte (STOP) runtime
BYTECODE = "0x6001600c60003960016000f300"

ENV_VARS = (
    "CONTRACT_NAME",
    "RPC_URL",
    "ARTIFACTS_DIR",
    "DEPLOYER_PRIVATE_KEY",
    "PROXY_KIND",
    "PROXY_INITIALIZER",
    "CALL_INITIALIZER",
    "CONFIRMATIONS",
    "CONFIRMATION_TIMEOUT",
    "POLL_LATENCY",
)


def function(name, *input_types, mutability="nonpayable"):
    return {
        "type": "function",
        "name": name,
        "inputs": [{"name": f"arg{i}", "type": t} for i, t in enumerate(input_types)],
        "outputs": [],
        "stateMutability": mutability,
    }


def constructor(*input_types):
    return {
        "type": "constructor",
        "inputs": [{"name": f"arg{i}", "type": t} for i, t in enumerate(input_types)],
        "stateMutability": "payable",
    }


def write_artifact(artifacts_dir, source_name, contract_name, abi, bytecode=BYTECODE, **extra):
    """Writes a Hardhat-style artifact (plus its debug file) under artifacts_dir."""
    directory = artifacts_dir / source_name
    directory.mkdir(parents=True, exist_ok=True)
    artifact = {
        "_format": "hh-sol-artifact-1",
        "contractName": contract_name,
        "sourceName": source_name,
        "abi": abi,
        "bytecode": bytecode,
        "deployedBytecode": "0x00" if bytecode != "0x" else "0x",
        "linkReferences": {},
        "deployedLinkReferences": {},
    }
    artifact.update(extra)
    (directory / f"{contract_name}.json").write_text(json.dumps(artifact))
    (directory / f"{contract_name}.dbg.json").write_text(
        json.dumps({"_format": "hh-sol-dbg-1", "buildInfo": "../build-info/abc.json"})
    )
    return artifact


def receipt(contract_address, block_number=100, status=1):
    return {"status": status, "blockNumber": block_number, "contractAddress": contract_address}


# Fixtures
@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def artifacts_dir(tmp_path):
    root = tmp_path / "artifacts"
    write_artifact(root, "contracts/Box.sol", "Box", [function("initialize"), function("store", "uint256")])
    write_artifact(root, "contracts/Counter.sol", "Counter", [function("initialize", "uint256")])
    write_artifact(root, "contracts/Plain.sol", "Plain", [function("store", "uint256")])
    write_artifact(
        root,
        "contracts/BoxUUPS.sol",
        "BoxUUPS",
        [
            function("initialize"),
            function("proxiableUUID", mutability="view"),
            function("upgradeToAndCall", "address", "bytes", mutability="payable"),
        ],
    )
    write_artifact(root, "contracts/IBox.sol", "IBox", [function("store", "uint256")], bytecode="0x")
    write_artifact(
        root,
        "@openzeppelin/contracts/proxy/transparent/TransparentUpgradeableProxy.sol",
        "TransparentUpgradeableProxy",
        [constructor("address", "address", "bytes")],
    )
    write_artifact(
        root,
        "@openzeppelin/contracts/proxy/ERC1967/ERC1967Proxy.sol",
        "ERC1967Proxy",
        [constructor("address", "bytes")],
    )
    (root / "build-info").mkdir()
    (root / "build-info" / "Box.json").write_text(json.dumps({"contractName": "Box"}))
    return root


@pytest.fixture
def registry(artifacts_dir):
    return ArtifactRegistry(artifacts_dir)


@pytest.fixture
def receipts():
    return {
        Web3.to_hex(IMPLEMENTATION_TX): receipt(IMPLEMENTATION, block_number=100),
        Web3.to_hex(PROXY_TX): receipt(PROXY, block_number=101),
    }


@pytest.fixture
def w3(receipts):
    """Stands in for a Web3 connection to a node that mines every transaction."""
    w3 = MagicMock()
    w3.eth.get_transaction_count.return_value = 7
    w3.eth.send_raw_transaction.side_effect = [IMPLEMENTATION_TX, PROXY_TX]
    w3.eth.wait_for_transaction_receipt.side_effect = lambda tx_hash, **kwargs: receipts[tx_hash]
    w3.eth.get_block_number.return_value = 101
    w3.eth.get_storage_at.return_value = b"\x00" * 12 + Web3.to_bytes(hexstr=ADMIN)
    w3.eth.contract.return_value.constructor.return_value.build_transaction.side_effect = (
        lambda tx: dict(tx, gas=1_000_000, chainId=31337)
    )
    return w3


@pytest.fixture
def account():
    account = MagicMock()
    account.address = DEPLOYER
    account.sign_transaction.return_value.raw_transaction = b"signed"
    return account


@pytest.fixture
def config(artifacts_dir):
    return DeploymentConfig(contract_name="Box", artifacts_dir=artifacts_dir, poll_latency=0)


@pytest.fixture
def deployer(w3, config, account):
    return ProxyDeployer(w3=w3, config=config, account=account)
