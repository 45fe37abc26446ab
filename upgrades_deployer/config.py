"""
Deployment configuration.

Settings are passed explicitly to the deployer; ``from_env`` reads them from
the environment (and a ``.env`` file, if present) for command-line use.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .artifacts.loader import DEFAULT_ARTIFACTS_DIR
from .contracts.implementation import AUTO, PROXY_KINDS
from .exceptions import ConfigurationError

DEFAULT_RPC_URL = "http://127.0.0.1:8545"

# Same as web3's wait_for_transaction_receipt defaults
DEFAULT_TIMEOUT = 120.0
DEFAULT_POLL_LATENCY = 0.1

DEFAULT_CONFIRMATIONS = 1

_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass
class DeploymentConfig:
    """Network, signer and deployment settings for a proxy deployment."""

    contract_name: Optional[str] = None
    rpc_url: str = DEFAULT_RPC_URL
    artifacts_dir: Path = DEFAULT_ARTIFACTS_DIR
    private_key: Optional[str] = None
    kind: str = AUTO
    initializer: Optional[str] = None
    call_initializer: bool = True
    confirmations: int = DEFAULT_CONFIRMATIONS
    timeout: float = DEFAULT_TIMEOUT
    poll_latency: float = DEFAULT_POLL_LATENCY

    def __post_init__(self):
        self.artifacts_dir = Path(self.artifacts_dir)

    def validate(self) -> "DeploymentConfig":
        """
        Check the settings are usable.

        Raises:
            ConfigurationError: If any setting is out of range
        """
        if self.kind not in PROXY_KINDS:
            raise ConfigurationError(
                f"Unsupported proxy kind: {self.kind}. Supported kinds: {', '.join(PROXY_KINDS)}"
            )
        if self.confirmations < 1:
            raise ConfigurationError("Confirmations must be at least 1")
        if self.timeout <= 0:
            raise ConfigurationError("Timeout must be greater than 0")
        if self.poll_latency < 0:
            raise ConfigurationError("Poll latency cannot be negative")
        if not self.rpc_url:
            raise ConfigurationError("RPC URL is required")
        return self

    @classmethod
    def from_env(cls, **overrides) -> "DeploymentConfig":
        """
        Build a config from environment variables.

        Keyword overrides that are not None take precedence over the
        environment.
        """
        load_dotenv()

        try:
            values = dict(
                contract_name=os.getenv("CONTRACT_NAME") or None,
                rpc_url=os.getenv("RPC_URL", DEFAULT_RPC_URL),
                artifacts_dir=Path(os.getenv("ARTIFACTS_DIR", str(DEFAULT_ARTIFACTS_DIR))),
                private_key=os.getenv("DEPLOYER_PRIVATE_KEY") or None,
                kind=os.getenv("PROXY_KIND", AUTO),
                initializer=os.getenv("PROXY_INITIALIZER") or None,
                call_initializer=os.getenv("CALL_INITIALIZER", "true").lower() not in _FALSE_VALUES,
                confirmations=int(os.getenv("CONFIRMATIONS", DEFAULT_CONFIRMATIONS)),
                timeout=float(os.getenv("CONFIRMATION_TIMEOUT", DEFAULT_TIMEOUT)),
                poll_latency=float(os.getenv("POLL_LATENCY", DEFAULT_POLL_LATENCY)),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric setting in environment: {e}") from e

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values).validate()
