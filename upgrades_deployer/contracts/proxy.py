"""
Proxy contract wrappers for upgradeable deployments.

This module wraps the OpenZeppelin proxy artifacts compiled into the
project (``TransparentUpgradeableProxy`` and ``ERC1967Proxy``) and validates
the parameters handed to their constructors.
"""

from typing import Any, Dict, List

from web3 import Web3

from ..artifacts.loader import ArtifactRegistry
from ..exceptions import ConfigurationError, InvalidArtifactError
from .implementation import TRANSPARENT, UUPS

# EIP1967 Admin slot - https://eips.ethereum.org/EIPS/eip-1967#admin-address
EIP1967_ADMIN_SLOT = 0xB53127684A568B3173AE13B9F8A6016E243E63B6E8EE1178D6A717850B5D6103

# EIP1967 Implementation slot - https://eips.ethereum.org/EIPS/eip-1967#logic-contract-address
EIP1967_IMPLEMENTATION_SLOT = 0x360894A13BA1A3210667C828492DB98DCA3E2076CC3735A920A3CA505D382BBC


def _validate_address(address: str, label: str) -> None:
    if not address or not address.startswith('0x'):
        raise ConfigurationError(f"Invalid {label} address")

    if len(address) != 42:
        raise ConfigurationError(f"{label.capitalize()} address must be 42 characters")

    if not Web3.is_address(address):
        raise ConfigurationError(f"Invalid {label} address: {address}")


def _to_calldata(data: str) -> bytes:
    if not isinstance(data, str) or not data.startswith('0x'):
        raise ConfigurationError("Initializer data must be a 0x-prefixed hex string")
    try:
        return Web3.to_bytes(hexstr=data)
    except ValueError as e:
        raise ConfigurationError(f"Initializer data is not valid hex: {data}") from e


class ProxyContract:
    """
    Base wrapper for an EIP-1967 proxy artifact.

    Subclasses name the artifact to load and how many constructor
    parameters it takes.
    """

    CONTRACT_NAME = ""
    CONSTRUCTOR_INPUTS = 0

    def __init__(self, registry: ArtifactRegistry):
        """Load the proxy artifact from the project's compiled artifacts."""
        self.abi = registry.get_abi(self.CONTRACT_NAME)
        self.bytecode = registry.get_bytecode(self.CONTRACT_NAME)
        self._validate_constructor()

    def _validate_constructor(self) -> None:
        inputs: List[Dict[str, Any]] = []
        for item in self.abi:
            if item.get('type') == 'constructor':
                inputs = item.get('inputs', [])
                break

        if len(inputs) != self.CONSTRUCTOR_INPUTS:
            raise InvalidArtifactError(
                f"{self.CONTRACT_NAME} constructor takes {len(inputs)} parameter(s), "
                f"expected {self.CONSTRUCTOR_INPUTS}"
            )

    def get_deployment_data(self, *args, **kwargs) -> Dict[str, Any]:
        """
        Get complete deployment data for the proxy.

        Returns:
            Dictionary with bytecode, ABI and ordered constructor args
        """
        constructor_args = self.encode_constructor_params(*args, **kwargs)

        return {
            "bytecode": self.bytecode,
            "abi": self.abi,
            "constructor_args": constructor_args,
            "contract_name": self.CONTRACT_NAME,
        }

    def encode_constructor_params(self, *args, **kwargs) -> List[Any]:
        raise NotImplementedError


class TransparentProxyContract(ProxyContract):
    """
    Wrapper for OpenZeppelin's TransparentUpgradeableProxy.

    The proxy deploys its own ProxyAdmin owned by ``initial_owner``; the
    admin's address is stored in the EIP-1967 admin slot.
    """

    CONTRACT_NAME = "TransparentUpgradeableProxy"
    CONSTRUCTOR_INPUTS = 3

    def encode_constructor_params(
        self,
        logic: str,
        initial_owner: str,
        data: str
    ) -> List[Any]:
        """
        Encode constructor parameters for deployment.

        Args:
            logic: Address of the implementation contract
            initial_owner: Owner of the ProxyAdmin created by the proxy
            data: Initializer calldata as a hex string

        Returns:
            Ordered constructor arguments

        Raises:
            ConfigurationError: If validation fails
        """
        _validate_address(logic, "implementation")
        _validate_address(initial_owner, "owner")

        return [
            Web3.to_checksum_address(logic),
            Web3.to_checksum_address(initial_owner),
            _to_calldata(data),
        ]


class ERC1967ProxyContract(ProxyContract):
    """Wrapper for OpenZeppelin's ERC1967Proxy, used for UUPS deployments."""

    CONTRACT_NAME = "ERC1967Proxy"
    CONSTRUCTOR_INPUTS = 2

    def encode_constructor_params(self, implementation: str, data: str) -> List[Any]:
        """
        Encode constructor parameters for deployment.

        Args:
            implementation: Address of the UUPS implementation contract
            data: Initializer calldata as a hex string

        Returns:
            Ordered constructor arguments
        """
        _validate_address(implementation, "implementation")

        return [Web3.to_checksum_address(implementation), _to_calldata(data)]


PROXY_CONTRACTS = {
    TRANSPARENT: TransparentProxyContract,
    UUPS: ERC1967ProxyContract,
}
