"""
Exceptions raised while resolving, deploying and confirming a proxy.

None of these are recovered inside the package; they propagate to the caller
(or to the process boundary when run from the command line).
"""

from typing import Optional


class DeploymentError(Exception):
    """Base class for every failure raised by this package."""


class ArtifactNotFoundError(DeploymentError):
    """No compiled artifact matches the requested contract name."""

    def __init__(self, contract_name: str, message: Optional[str] = None):
        self.contract_name = contract_name
        super().__init__(message or f"No compiled artifact found for contract '{contract_name}'")


class InvalidArtifactError(DeploymentError):
    """The artifact exists but cannot be deployed as-is."""


class InitializerError(DeploymentError, ValueError):
    """The initializer call could not be encoded."""


class ConfigurationError(DeploymentError, ValueError):
    """Deployment settings are missing or inconsistent."""


class DeploymentRejectedError(DeploymentError):
    """The node or signer refused the transaction, or it reverted."""

    def __init__(self, message: str, tx_hash: Optional[str] = None):
        self.tx_hash = tx_hash
        super().__init__(message)


class ConfirmationError(DeploymentError):
    """The node could not be queried while waiting for a confirmation."""

    def __init__(self, message: str, tx_hash: Optional[str] = None):
        self.tx_hash = tx_hash
        super().__init__(message)


class ConfirmationTimeoutError(ConfirmationError):
    """The transaction was not confirmed before the configured timeout."""

    def __init__(self, message: str, tx_hash: Optional[str] = None, timeout: Optional[float] = None):
        self.timeout = timeout
        super().__init__(message, tx_hash=tx_hash)
