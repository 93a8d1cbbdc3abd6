"""
Consolidation pipeline: validate inputs, complete signatures on backend-built
transactions, group them into bundles and submit the bundles under a rate cap.
"""

from sol_consolidator.consolidation.batching import prepare_bundles
from sol_consolidator.consolidation.models import (
    ConsolidationOutcome,
    SubmissionBatch,
    SubmissionError,
    SubmissionResult,
    ValidationResult,
    WalletRecord,
)
from sol_consolidator.consolidation.orchestrator import SubmissionOrchestrator
from sol_consolidator.consolidation.rate_limiter import RateLimiter
from sol_consolidator.consolidation.signer import complete_transaction_signing
from sol_consolidator.consolidation.validator import validate_consolidation_inputs

__all__ = [
    "ConsolidationOutcome",
    "RateLimiter",
    "SubmissionBatch",
    "SubmissionError",
    "SubmissionOrchestrator",
    "SubmissionResult",
    "ValidationResult",
    "WalletRecord",
    "complete_transaction_signing",
    "prepare_bundles",
    "validate_consolidation_inputs",
]
