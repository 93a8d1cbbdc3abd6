"""
Data models for the consolidation pipeline.

WalletRecord is built by the caller; SubmissionBatch by the bundle builder;
SubmissionResult from the backend's send response. None of them are persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from sol_consolidator.core.exceptions import ValidationError


@dataclass(frozen=True)
class WalletRecord:
    """One participant (source or receiver): public address and encoded secret key."""

    address: str
    private_key: str = field(repr=False)

    @classmethod
    def from_dict(cls, item: dict[str, Any]) -> "WalletRecord":
        """Accepts both privateKey (backend/UI) and private_key (CSV) spellings."""
        return cls(
            address=(item.get("address") or "").strip(),
            private_key=(item.get("privateKey") or item.get("private_key") or "").strip(),
        )


@dataclass(frozen=True)
class SubmissionBatch:
    """Ordered group of base58-encoded signed transactions sent in one bundle request."""

    transactions: tuple[str, ...]

    def __len__(self) -> int:
        return len(self.transactions)


@dataclass(frozen=True)
class SubmissionError:
    code: int
    message: str


def _error_code(raw: Any) -> int:
    """JSON-RPC error code; 0 when missing or not an integer."""
    if isinstance(raw, bool):
        return 0
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        try:
            return int(raw.strip())
        except ValueError:
            return 0
    return 0


@dataclass(frozen=True)
class SubmissionResult:
    """
    Outcome of one bundle submission as reported by the block engine.

    Either bundle_id is set (accepted) or error is set (JSON-RPC error object).
    raw keeps the backend payload for diagnostics.
    """

    bundle_id: str | None = None
    error: SubmissionError | None = None
    raw: Any = field(default=None, compare=False, repr=False)

    @property
    def ok(self) -> bool:
        return self.error is None and self.bundle_id is not None

    @classmethod
    def from_backend(cls, result: Any) -> "SubmissionResult":
        """Build from the `result` field of the send endpoint: JSON-RPC envelope or bare bundle id."""
        if isinstance(result, str):
            return cls(bundle_id=result, raw=result)
        if isinstance(result, dict):
            err = result.get("error")
            if isinstance(err, dict):
                return cls(
                    error=SubmissionError(
                        code=_error_code(err.get("code")),
                        message=str(err.get("message") or ""),
                    ),
                    raw=result,
                )
            bundle_id = result.get("result")
            return cls(bundle_id=str(bundle_id) if bundle_id is not None else None, raw=result)
        return cls(raw=result)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"bundle_id": self.bundle_id}
        if self.error is not None:
            out["error"] = {"code": self.error.code, "message": self.error.message}
        return out


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: str | None = None

    def raise_for_error(self) -> None:
        if not self.valid:
            raise ValidationError(self.error or "Invalid consolidation input")


@dataclass
class ConsolidationOutcome:
    """Overall result of one consolidate() call: success with ordered results, or a single error."""

    success: bool
    results: list[SubmissionResult] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"success": self.success}
        if self.success:
            out["result"] = [r.to_dict() for r in self.results]
        else:
            out["error"] = self.error
        return out
