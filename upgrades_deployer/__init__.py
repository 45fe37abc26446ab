"""
Upgradeable proxy deployer

Deploys Hardhat-compiled contracts behind OpenZeppelin transparent or UUPS
proxies with web3.py and waits for the deployment to be confirmed.
"""

__version__ = "1.0.0"

from .artifacts.loader import ArtifactRegistry
from .config import DeploymentConfig
from .contracts.implementation import ImplementationContract
from .contracts.proxy import ERC1967ProxyContract, TransparentProxyContract
from .deployer import DeploymentHandle, ProxyDeployer
from .exceptions import (
    ArtifactNotFoundError,
    ConfigurationError,
    ConfirmationError,
    ConfirmationTimeoutError,
    DeploymentError,
    DeploymentRejectedError,
    InitializerError,
    InvalidArtifactError,
)

__all__ = [
    'ArtifactRegistry',
    'DeploymentConfig',
    'ImplementationContract',
    'TransparentProxyContract',
    'ERC1967ProxyContract',
    'ProxyDeployer',
    'DeploymentHandle',
    'DeploymentError',
    'ArtifactNotFoundError',
    'InvalidArtifactError',
    'InitializerError',
    'ConfigurationError',
    'DeploymentRejectedError',
    'ConfirmationError',
    'ConfirmationTimeoutError',
]
