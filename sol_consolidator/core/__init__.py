"""
Core utilities: shared exceptions and cross-cutting concerns.

Provides the consolidation error taxonomy used by the validator, the backend
client, the transaction signer and the orchestrator.
"""

from sol_consolidator.core.exceptions import (  # noqa: F401
    BackendError,
    ConsolidationError,
    SigningError,
    ValidationError,
)

__all__ = ["BackendError", "ConsolidationError", "SigningError", "ValidationError"]
