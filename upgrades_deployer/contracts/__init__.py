"""Wrappers for the implementation and proxy contracts of a deployment."""
from .implementation import ImplementationContract
from .proxy import ERC1967ProxyContract, ProxyContract, TransparentProxyContract

__all__ = [
    "ImplementationContract",
    "ProxyContract",
    "TransparentProxyContract",
    "ERC1967ProxyContract",
]
