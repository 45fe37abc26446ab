"""
Implementation contract wrapper for proxy deployment.

This module wraps the logic contract that sits behind a proxy: it checks the
artifact is deployable, encodes the initializer call handed to the proxy
constructor and works out which proxy kind the contract supports.
"""

from typing import Any, Dict, Optional, Sequence

from eth_abi import encode
from web3 import Web3

from ..artifacts.loader import ArtifactRegistry, canonical_type
from ..exceptions import ConfigurationError, InitializerError, InvalidArtifactError

DEFAULT_INITIALIZER = "initialize"

TRANSPARENT = "transparent"
UUPS = "uups"
AUTO = "auto"
PROXY_KINDS = (TRANSPARENT, UUPS, AUTO)

EMPTY_CALLDATA = "0x"


class ImplementationContract:
    """
    Wrapper for the upgradeable logic contract deployed behind a proxy.

    Initializer encoding follows OpenZeppelin's ``deployProxy``: the
    ``initialize`` function is called by default, and a contract without one
    is accepted only when no arguments are passed.
    """

    def __init__(self, registry: ArtifactRegistry, contract_name: str):
        self.contract_name = contract_name
        self.abi = registry.get_abi(contract_name)
        self.bytecode = registry.get_bytecode(contract_name)
        self.metadata = registry.get_contract_metadata(contract_name)
        self._validate_deployable()

    def _validate_deployable(self) -> None:
        if not self.bytecode or self.bytecode == EMPTY_CALLDATA:
            raise InvalidArtifactError(
                f"{self.contract_name} has no bytecode; "
                f"interfaces and abstract contracts cannot be deployed"
            )

        libraries = self.metadata.get("linkReferences") or {}
        if libraries:
            names = ", ".join(sorted(lib for refs in libraries.values() for lib in refs))
            raise InvalidArtifactError(
                f"{self.contract_name} links external libraries ({names}), "
                f"which are not supported by upgradeable deployments"
            )

        for item in self.abi:
            if item.get("type") == "constructor" and item.get("inputs"):
                raise InvalidArtifactError(
                    f"{self.contract_name} has constructor parameters; "
                    f"upgradeable contracts are set up through an initializer"
                )

    def _functions(self, name: str):
        return [
            item for item in self.abi
            if item.get("type") == "function" and item.get("name") == name
        ]

    def has_function(self, name: str) -> bool:
        return bool(self._functions(name))

    def encode_initializer(
        self,
        args: Sequence[Any] = (),
        initializer: Optional[str] = None,
        call_initializer: bool = True
    ) -> str:
        """
        Encode the initializer call passed to the proxy constructor.

        Args:
            args: Initializer arguments
            initializer: Initializer function name (defaults to ``initialize``)
            call_initializer: When False, no initializer is called at all

        Returns:
            Calldata as a hex string (``0x`` when nothing is called)

        Raises:
            InitializerError: If the initializer is missing or the arguments
                do not match any of its overloads
        """
        args = list(args)
        if not call_initializer:
            if args:
                raise InitializerError(
                    "Initializer arguments were given but the initializer call is disabled"
                )
            return EMPTY_CALLDATA

        allow_no_initialization = initializer is None and not args
        initializer = initializer or DEFAULT_INITIALIZER

        overloads = self._functions(initializer)
        if not overloads:
            if allow_no_initialization:
                return EMPTY_CALLDATA
            raise InitializerError(
                f"Contract {self.contract_name} does not have a function `{initializer}`"
            )

        matching = [f for f in overloads if len(f.get("inputs", [])) == len(args)]
        if not matching:
            expected = sorted({len(f.get("inputs", [])) for f in overloads})
            raise InitializerError(
                f"{self.contract_name}.{initializer} expects "
                f"{' or '.join(map(str, expected))} argument(s), got {len(args)}"
            )
        if len(matching) > 1:
            raise InitializerError(
                f"{self.contract_name}.{initializer} is overloaded with {len(args)} argument(s)"
            )

        types = [canonical_type(inp) for inp in matching[0].get("inputs", [])]
        selector = Web3.keccak(text=f"{initializer}({','.join(types)})")[:4]
        try:
            encoded_args = encode(types, args)
        except Exception as e:
            raise InitializerError(
                f"Could not encode arguments for {self.contract_name}.{initializer}: {e}"
            ) from e

        return Web3.to_hex(selector + encoded_args)

    def resolve_kind(self, kind: str = AUTO) -> str:
        """
        Pick the proxy kind to deploy.

        ``auto`` selects UUPS when the contract is ``proxiableUUID``-aware,
        transparent otherwise. A UUPS implementation must expose
        ``upgradeToAndCall``, or the proxy could never be upgraded.
        """
        if kind not in PROXY_KINDS:
            raise ConfigurationError(
                f"Unsupported proxy kind: {kind}. Supported kinds: {', '.join(PROXY_KINDS)}"
            )

        if kind == AUTO:
            kind = UUPS if self.has_function("proxiableUUID") else TRANSPARENT

        if kind == UUPS and not self.has_function("upgradeToAndCall"):
            raise ConfigurationError(
                f"Contract {self.contract_name} is not UUPS-upgradeable: "
                f"missing upgradeToAndCall"
            )
        return kind

    def get_deployment_data(self) -> Dict[str, Any]:
        """Get the bytecode and ABI needed to deploy the implementation."""
        return {
            "bytecode": self.bytecode,
            "abi": self.abi,
            "constructor_args": [],
            "contract_name": self.contract_name,
        }
