"""Group signed transactions into bundles of at most `max_size`, preserving order."""

from __future__ import annotations

from collections.abc import Sequence

from sol_consolidator.config.settings import DEFAULT_MAX_TXS_PER_BUNDLE
from sol_consolidator.consolidation.models import SubmissionBatch


def prepare_bundles(
    signed_transactions: Sequence[str],
    max_size: int = DEFAULT_MAX_TXS_PER_BUNDLE,
) -> list[SubmissionBatch]:
    if max_size < 1:
        raise ValueError("max_size must be >= 1")
    return [
        SubmissionBatch(tuple(signed_transactions[i : i + max_size]))
        for i in range(0, len(signed_transactions), max_size)
    ]
