"""
Application-level exceptions.

- ValidationError: malformed or insufficient input, reported before any network or signing work.
- BackendError: the trading backend call failed (transport) or reported an unsuccessful outcome.
- SigningError: a partially prepared transaction or a secret key could not be decoded or signed.

Each carries a stable error code so the CLI and callers can branch without parsing messages.
"""

from __future__ import annotations


class ConsolidationError(Exception):
    """Base class for every failure the consolidation pipeline reports."""

    code = "consolidation_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class ValidationError(ConsolidationError):
    code = "validation_error"


class BackendError(ConsolidationError):
    code = "backend_error"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SigningError(ConsolidationError):
    code = "signing_error"
