"""
Artifact loader for compiled smart contracts.

This module resolves contract names to the Hardhat-compiled artifacts found
under a project's ``artifacts/`` directory and exposes their ABI, bytecode
and metadata.
"""

import json
from pathlib import Path
from typing import Dict, Any, List, Optional, Union

from loguru import logger
from web3 import Web3

from ..exceptions import ArtifactNotFoundError, InvalidArtifactError

# Hardhat writes artifacts relative to the project it compiles
DEFAULT_ARTIFACTS_DIR = Path("artifacts")

# Directories and files that live next to artifacts but are not artifacts
BUILD_INFO_DIR = "build-info"
DEBUG_SUFFIX = ".dbg.json"


def canonical_type(abi_input: Dict[str, Any]) -> str:
    """
    Get the canonical ABI type of a parameter, expanding tuples.

    Args:
        abi_input: ABI input entry (e.g. ``{"name": "x", "type": "uint256"}``)

    Returns:
        Canonical type string (e.g. ``(address,uint256)[]`` for a struct array)
    """
    abi_type = abi_input["type"]
    if not abi_type.startswith("tuple"):
        return abi_type

    components = ",".join(canonical_type(c) for c in abi_input.get("components", []))
    return f"({components}){abi_type[len('tuple'):]}"


class ArtifactRegistry:
    """
    Looks up compiled contract artifacts by name.

    Names may be bare (``Box``) or fully qualified (``contracts/Box.sol:Box``);
    a fully qualified name is required when two sources declare a contract
    with the same name.
    """

    def __init__(self, artifacts_dir: Union[str, Path] = DEFAULT_ARTIFACTS_DIR):
        self.artifacts_dir = Path(artifacts_dir)
        self._cache: Dict[str, Dict[str, Any]] = {}

    def _artifact_files(self, contract_name: str = "*") -> List[Path]:
        if not self.artifacts_dir.is_dir():
            raise ArtifactNotFoundError(
                contract_name,
                f"Artifacts directory not found: {self.artifacts_dir}\n"
                f"Make sure the contracts have been compiled with 'npx hardhat compile'",
            )

        files = []
        for path in sorted(self.artifacts_dir.rglob(f"{contract_name}.json")):
            if path.name.endswith(DEBUG_SUFFIX):
                continue
            if BUILD_INFO_DIR in path.relative_to(self.artifacts_dir).parts:
                continue
            files.append(path)
        return files

    def _read_artifact(self, path: Path) -> Dict[str, Any]:
        try:
            with open(path, "r") as f:
                artifact = json.load(f)
        except (OSError, ValueError) as e:
            raise InvalidArtifactError(f"Could not read artifact {path}: {e}") from e

        if not isinstance(artifact, dict):
            raise InvalidArtifactError(f"Artifact {path} is not a JSON object")
        return artifact

    def load_artifact(self, contract_name: str) -> Dict[str, Any]:
        """
        Load the complete artifact JSON for a contract.

        Args:
            contract_name: Bare or fully qualified contract name

        Returns:
            Complete artifact dictionary including ABI, bytecode, and metadata

        Raises:
            ArtifactNotFoundError: If no artifact (or more than one) matches
            InvalidArtifactError: If an artifact file for the name is unreadable
        """
        if contract_name in self._cache:
            return self._cache[contract_name]

        source_name: Optional[str] = None
        name = contract_name
        if ":" in contract_name:
            source_name, name = contract_name.rsplit(":", 1)

        if not name:
            raise ArtifactNotFoundError(contract_name, "Contract name is empty")

        matches = []
        for path in self._artifact_files(name):
            artifact = self._read_artifact(path)
            if artifact.get("contractName") != name:
                continue
            if source_name is not None and artifact.get("sourceName") != source_name:
                continue
            matches.append(artifact)

        if not matches:
            available = ", ".join(self.list_available_contracts()) or "none"
            raise ArtifactNotFoundError(
                contract_name,
                f"Unknown contract: {contract_name}. "
                f"Available contracts: {available}",
            )

        if len(matches) > 1:
            sources = ", ".join(f"{a.get('sourceName')}:{name}" for a in matches)
            raise ArtifactNotFoundError(
                contract_name,
                f"Contract name {contract_name} is ambiguous, use one of: {sources}",
            )

        self._cache[contract_name] = matches[0]
        return matches[0]

    def get_abi(self, contract_name: str) -> list:
        """Get the ABI for a specific contract."""
        artifact = self.load_artifact(contract_name)
        return artifact.get('abi', [])

    def get_bytecode(self, contract_name: str) -> str:
        """
        Get the deployment bytecode for a specific contract.

        Args:
            contract_name: Name of the contract

        Returns:
            Bytecode as a hex string (with '0x' prefix)
        """
        artifact = self.load_artifact(contract_name)
        return artifact.get('bytecode', '0x')

    def get_deployed_bytecode(self, contract_name: str) -> str:
        """Get the runtime bytecode for a specific contract."""
        artifact = self.load_artifact(contract_name)
        return artifact.get('deployedBytecode', '0x')

    def get_contract_metadata(self, contract_name: str) -> Dict[str, Any]:
        """
        Get metadata about the contract compilation.

        Args:
            contract_name: Name of the contract

        Returns:
            Dictionary containing the artifact format, source and link references
        """
        artifact = self.load_artifact(contract_name)

        return {
            'contractName': artifact.get('contractName'),
            'sourceName': artifact.get('sourceName'),
            'format': artifact.get('_format'),
            'linkReferences': artifact.get('linkReferences', {}),
        }

    def get_function_abi(
        self,
        contract_name: str,
        function_name: str,
        arg_count: Optional[int] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Find a function in a contract's ABI.

        Args:
            contract_name: Name of the contract
            function_name: Name of the function
            arg_count: Number of arguments, to pick between overloads

        Returns:
            The function's ABI entry, or None if not found
        """
        candidates = [
            item for item in self.get_abi(contract_name)
            if item.get('type') == 'function' and item.get('name') == function_name
        ]
        if arg_count is not None:
            candidates = [c for c in candidates if len(c.get('inputs', [])) == arg_count]

        return candidates[0] if candidates else None

    def get_function_selector(
        self,
        contract_name: str,
        function_name: str,
        arg_count: Optional[int] = None
    ) -> Optional[str]:
        """
        Get the function selector (4-byte signature) for a specific function.

        Returns:
            Function selector as a hex string, or None if not found
        """
        function_abi = self.get_function_abi(contract_name, function_name, arg_count)
        if function_abi is None:
            return None

        inputs = ','.join(canonical_type(inp) for inp in function_abi.get('inputs', []))
        signature = f"{function_name}({inputs})"

        return Web3.to_hex(Web3.keccak(text=signature)[:4])

    def list_available_contracts(self) -> List[str]:
        """
        List all contract names with an artifact in the artifacts directory.

        Returns:
            Sorted list of contract names
        """
        if not self.artifacts_dir.is_dir():
            return []

        names = set()
        for path in self._artifact_files():
            try:
                artifact = self._read_artifact(path)
            except InvalidArtifactError as e:
                logger.warning(f"Skipping unreadable artifact: {e}")
                continue
            if "contractName" in artifact and "abi" in artifact:
                names.add(artifact["contractName"])

        return sorted(names)
