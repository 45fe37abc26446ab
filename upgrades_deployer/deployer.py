"""
Upgradeable proxy deployment.

``ProxyDeployer`` resolves a compiled contract, deploys it as the
implementation behind a transparent or UUPS proxy and waits for the proxy
deployment to be confirmed.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence

from eth_account import Account
from eth_account.signers.local import LocalAccount
from loguru import logger
from web3 import Web3
from web3.exceptions import TimeExhausted, Web3Exception

from .artifacts.loader import ArtifactRegistry
from .config import DeploymentConfig
from .contracts.implementation import TRANSPARENT, ImplementationContract
from .contracts.proxy import EIP1967_ADMIN_SLOT, PROXY_CONTRACTS
from .exceptions import (
    ConfigurationError,
    ConfirmationError,
    ConfirmationTimeoutError,
    DeploymentRejectedError,
)

# Raised by web3 and its HTTP transport when a node or signer refuses a request
SUBMISSION_ERRORS = (Web3Exception, ValueError, OSError)

# Raised by web3 and its HTTP transport when a node cannot be queried
NODE_ERRORS = (Web3Exception, OSError)


@dataclass
class DeploymentHandle:
    """Reference to an in-flight or confirmed proxy deployment."""

    contract_name: str
    kind: str
    implementation_address: str
    tx_hash: str
    address: Optional[str] = None
    admin_address: Optional[str] = None
    receipt: Optional[Dict[str, Any]] = field(default=None, repr=False)

    @property
    def confirmed(self) -> bool:
        return self.receipt is not None


class ProxyDeployer:
    """
    Deploys contracts behind upgradeable proxies.

    Every deployment sends two transactions: the implementation, which is
    confirmed before anything else is sent, and the proxy pointing at it.
    Nothing is retried or deduplicated, so each call creates a new proxy.
    """

    def __init__(
        self,
        w3: Web3,
        config: DeploymentConfig,
        registry: Optional[ArtifactRegistry] = None,
        account: Optional[LocalAccount] = None,
    ):
        self.w3 = w3
        self.config = config.validate()
        self.registry = registry or ArtifactRegistry(config.artifacts_dir)

        if account is None and config.private_key:
            account = Account.from_key(config.private_key)
        self.account = account

    @classmethod
    def from_config(cls, config: DeploymentConfig) -> "ProxyDeployer":
        """Create a deployer connected to the config's RPC endpoint."""
        w3 = Web3(Web3.HTTPProvider(config.rpc_url))
        return cls(w3=w3, config=config)

    def _get_sender(self) -> str:
        if self.account is not None:
            return self.account.address

        default_account = self.w3.eth.default_account
        if isinstance(default_account, str):
            return default_account

        try:
            accounts = self.w3.eth.accounts
        except SUBMISSION_ERRORS as e:
            raise DeploymentRejectedError(f"Could not list node accounts: {e}") from e
        if not accounts:
            raise ConfigurationError(
                "No deployer account: set DEPLOYER_PRIVATE_KEY or use a node with unlocked accounts"
            )
        return accounts[0]

    def _submit(self, deployment: Dict[str, Any], sender: str) -> str:
        """Send a contract creation transaction and return its hash."""
        name = deployment["contract_name"]
        contract = self.w3.eth.contract(abi=deployment["abi"], bytecode=deployment["bytecode"])
        constructor = contract.constructor(*deployment["constructor_args"])

        try:
            if self.account is not None:
                nonce = self.w3.eth.get_transaction_count(sender, "pending")
                transaction = constructor.build_transaction({"from": sender, "nonce": nonce})
                signed = self.account.sign_transaction(transaction)
                tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
            else:
                tx_hash = constructor.transact({"from": sender})
        except SUBMISSION_ERRORS as e:
            raise DeploymentRejectedError(f"Deployment of {name} was rejected: {e}") from e

        tx_hash = Web3.to_hex(tx_hash)
        logger.info(f"{name} deployment sent from {sender}: {tx_hash}")
        return tx_hash

    def _confirm(self, tx_hash: str, name: str) -> Dict[str, Any]:
        """Block until a transaction is mined and buried under enough blocks."""
        timeout = self.config.timeout
        deadline = time.monotonic() + timeout
        logger.info(f"Waiting for {name} deployment {tx_hash} to be confirmed...")

        try:
            receipt = self.w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=timeout, poll_latency=self.config.poll_latency
            )
        except TimeExhausted as e:
            raise ConfirmationTimeoutError(
                f"{name} deployment {tx_hash} was not mined within {timeout} seconds",
                tx_hash=tx_hash,
                timeout=timeout,
            ) from e
        except NODE_ERRORS as e:
            raise ConfirmationError(
                f"Lost the node while waiting for {name} deployment {tx_hash}: {e}",
                tx_hash=tx_hash,
            ) from e

        if receipt["status"] != 1:
            raise DeploymentRejectedError(f"{name} deployment {tx_hash} reverted", tx_hash=tx_hash)

        target_block = receipt["blockNumber"] + self.config.confirmations - 1
        while self._get_block_number(tx_hash, name) < target_block:
            if time.monotonic() >= deadline:
                raise ConfirmationTimeoutError(
                    f"{name} deployment {tx_hash} did not reach "
                    f"{self.config.confirmations} confirmations within {timeout} seconds",
                    tx_hash=tx_hash,
                    timeout=timeout,
                )
            time.sleep(self.config.poll_latency)

        return receipt

    def _get_block_number(self, tx_hash: str, name: str) -> int:
        try:
            return self.w3.eth.get_block_number()
        except NODE_ERRORS as e:
            raise ConfirmationError(
                f"Lost the node while confirming {name} deployment {tx_hash}: {e}",
                tx_hash=tx_hash,
            ) from e

    def _get_admin(self, proxy_address: str, tx_hash: str) -> Optional[str]:
        try:
            admin_slot = self.w3.eth.get_storage_at(proxy_address, EIP1967_ADMIN_SLOT)
        except NODE_ERRORS as e:
            raise ConfirmationError(
                f"Could not read the admin slot of proxy at {proxy_address}: {e}",
                tx_hash=tx_hash,
            ) from e
        if not any(admin_slot):
            logger.warning(f"Admin slot for proxy at {proxy_address} is empty")
            return None
        return Web3.to_checksum_address(admin_slot[-20:])

    def deploy_proxy(
        self,
        contract_name: Optional[str] = None,
        args: Sequence[Any] = ()
    ) -> DeploymentHandle:
        """
        Deploy ``contract_name`` behind a new proxy without waiting for the proxy.

        Both artifacts are resolved and the initializer is encoded before
        any transaction is sent.

        Args:
            contract_name: Contract to deploy (defaults to the configured one)
            args: Initializer arguments

        Returns:
            Handle for the in-flight proxy deployment

        Raises:
            ArtifactNotFoundError: If the contract or proxy artifact is unknown
            DeploymentRejectedError: If a transaction is refused or reverts
            ConfirmationTimeoutError: If the implementation is not confirmed in time
            ConfirmationError: If the node cannot be queried while confirming it
        """
        contract_name = contract_name or self.config.contract_name
        if not contract_name:
            raise ConfigurationError("No contract name given; set CONTRACT_NAME")

        implementation = ImplementationContract(self.registry, contract_name)
        kind = implementation.resolve_kind(self.config.kind)
        proxy = PROXY_CONTRACTS[kind](self.registry)
        data = implementation.encode_initializer(
            args,
            initializer=self.config.initializer,
            call_initializer=self.config.call_initializer,
        )

        sender = self._get_sender()
        tx_hash = self._submit(implementation.get_deployment_data(), sender)
        receipt = self._confirm(tx_hash, contract_name)
        implementation_address = Web3.to_checksum_address(receipt["contractAddress"])
        logger.info(f"{contract_name} implementation deployed at {implementation_address}")

        if kind == TRANSPARENT:
            deployment = proxy.get_deployment_data(implementation_address, sender, data)
        else:
            deployment = proxy.get_deployment_data(implementation_address, data)

        return DeploymentHandle(
            contract_name=contract_name,
            kind=kind,
            implementation_address=implementation_address,
            tx_hash=self._submit(deployment, sender),
        )

    def wait_for_deployment(self, handle: DeploymentHandle) -> DeploymentHandle:
        """
        Block until the proxy deployment is confirmed.

        Raises:
            ConfirmationTimeoutError: If confirmation does not occur in time
            ConfirmationError: If the node cannot be queried while waiting
            DeploymentRejectedError: If the proxy deployment reverted
        """
        receipt = self._confirm(handle.tx_hash, f"{handle.contract_name} proxy")

        handle.receipt = receipt
        handle.address = Web3.to_checksum_address(receipt["contractAddress"])
        if handle.kind == TRANSPARENT:
            handle.admin_address = self._get_admin(handle.address, handle.tx_hash)

        logger.success(
            f"{handle.contract_name} deployed behind {handle.kind} proxy at {handle.address} "
            f"(implementation: {handle.implementation_address})"
        )
        if handle.admin_address:
            logger.success(f"ProxyAdmin for {handle.contract_name}: {handle.admin_address}")
        return handle

    def deploy(
        self,
        contract_name: Optional[str] = None,
        args: Sequence[Any] = ()
    ) -> DeploymentHandle:
        """Deploy a contract behind a proxy and wait for it to be confirmed."""
        handle = self.deploy_proxy(contract_name, args)
        return self.wait_for_deployment(handle)
