"""
HTTP client for the trading backend.

Two endpoints are used:
    POST {server_url}/api/wallets/consolidate
        {"sourceAddresses": [...], "receiverAddress": "...", "percentage": 50}
        -> {"success": true, "transactions": ["<base58 tx>", ...]}
    POST {server_url}/api/transactions/send
        {"transactions": ["<base58 tx>", ...]}
        -> {"success": true, "result": {"jsonrpc": "2.0", "id": 1, "result": "<bundle id>"}}

No retries: a bundle resend is not known to be idempotent on the backend side.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import httpx

from sol_consolidator.config.settings import ConsolidatorConfig
from sol_consolidator.consolidation.models import SubmissionResult
from sol_consolidator.core.exceptions import BackendError
from sol_consolidator.logging import get_logger

logger = get_logger(__name__)


def _json_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as e:
        raise BackendError(
            f"Invalid JSON from backend (HTTP {response.status_code})", status_code=response.status_code
        ) from e


class BackendClient:
    """Async client for the partial-transaction and bundle-send endpoints."""

    def __init__(self, config: ConsolidatorConfig, client: httpx.AsyncClient | None = None) -> None:
        self._config = config
        self._client = client
        self._owns_client = client is None

    def _client_ensure(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._config.request_timeout_sec)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _post(self, url: str, payload: dict[str, Any]) -> httpx.Response:
        try:
            return await self._client_ensure().post(url, json=payload)
        except httpx.HTTPError as e:
            raise BackendError(f"Backend request failed: {e}") from e

    async def get_partially_prepared_transactions(
        self,
        source_addresses: Sequence[str],
        receiver_address: str,
        percentage: float,
    ) -> list[str]:
        """Ask the backend to build unsigned consolidation transactions. Returns base58 strings."""
        response = await self._post(
            self._config.partial_transactions_url,
            {
                "sourceAddresses": list(source_addresses),
                "receiverAddress": receiver_address,
                "percentage": percentage,
            },
        )
        if not response.is_success:
            raise BackendError(f"HTTP error! Status: {response.status_code}", status_code=response.status_code)

        data = _json_body(response)
        if not isinstance(data, dict) or not data.get("success"):
            error = data.get("error") if isinstance(data, dict) else None
            raise BackendError(error or "Failed to get partially prepared transactions")

        transactions = data.get("transactions")
        if not isinstance(transactions, list) or not all(isinstance(t, str) for t in transactions):
            raise BackendError("Backend response is missing the transactions list")
        return transactions

    async def submit_bundle(self, transactions: Sequence[str]) -> SubmissionResult:
        """Send one bundle through the backend proxy. A JSON-RPC error in `result` is returned, not raised."""
        response = await self._post(self._config.send_bundle_url, {"transactions": list(transactions)})
        data = _json_body(response)

        if isinstance(data, dict) and data.get("success") is False:
            message = data.get("error") or "Unknown error sending bundle"
            details = data.get("details")
            if details:
                message = f"{message}: {details}"
            raise BackendError(message, status_code=response.status_code)
        if not response.is_success:
            raise BackendError(f"HTTP error! Status: {response.status_code}", status_code=response.status_code)
        if not isinstance(data, dict):
            raise BackendError("Unexpected send response from backend")

        result = SubmissionResult.from_backend(data.get("result"))
        if result.error is not None:
            logger.warning(
                "bundle_rejected",
                code=result.error.code,
                error=result.error.message,
                tx_count=len(transactions),
            )
        return result
