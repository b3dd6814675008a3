"""Shared domain utilities.

This package is domain-accessible and should not depend on application code.
"""

from .auth_headers import AuthHeaderProvider, HeaderPairs, StaticAuthHeaders
from .facilitator_client_protocol import FacilitatorProtocol
from .ledger_client_protocol import LedgerClientProtocol

__all__ = [
    "AuthHeaderProvider",
    "FacilitatorProtocol",
    "HeaderPairs",
    "LedgerClientProtocol",
    "StaticAuthHeaders",
]
