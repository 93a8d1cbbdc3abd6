"""
End-to-end SOL consolidation: validate, fetch, sign, bundle, submit.

    1. validate inputs (no network or key work on failure)
    2. fetch partially prepared transactions from the backend (one call)
    3. derive receiver and source keypairs; map source address -> keypair
    4. complete signatures on every transaction
    5. group signed transactions into bundles of max_txs_per_bundle
    6. per bundle, in order: rate-limit permit, submit, then a fixed pause
       before the next bundle
    7. return success with one SubmissionResult per bundle, or a single failure

Bundles are strictly sequential. Nothing is retried; the first error ends the call.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping, Sequence

from solders.keypair import Keypair

from sol_consolidator.config import ConsolidatorConfig, get_settings
from sol_consolidator.config.env import mask_url
from sol_consolidator.consolidation.backend_client import BackendClient
from sol_consolidator.consolidation.batching import prepare_bundles
from sol_consolidator.consolidation.models import (
    ConsolidationOutcome,
    SubmissionBatch,
    SubmissionResult,
    WalletRecord,
)
from sol_consolidator.consolidation.rate_limiter import RateLimiter, get_rate_limiter
from sol_consolidator.consolidation.signer import complete_transaction_signing
from sol_consolidator.consolidation.validator import validate_consolidation_inputs
from sol_consolidator.core.exceptions import ConsolidationError, SigningError
from sol_consolidator.logging import bind_wallet, get_logger
from sol_consolidator.utils.wallet_utils import keypair_address, load_keypair, short_address

logger = get_logger(__name__)

DRY_RUN_BUNDLE_PLACEHOLDER = "dry_run"


def build_source_keypairs(source_wallets: Sequence[WalletRecord]) -> dict[str, Keypair]:
    """Map each source's derived public address to its keypair. Lives for one consolidate() call."""
    keypairs: dict[str, Keypair] = {}
    for wallet in source_wallets:
        try:
            keypair = load_keypair(wallet.private_key)
        except SigningError:
            bind_wallet(wallet.address).warning("source_keypair_load_failed")
            raise
        keypairs[keypair_address(keypair)] = keypair
    return keypairs


class SubmissionOrchestrator:
    """
    Runs consolidations against one backend. The rate limiter is shared by
    reference, so concurrent consolidate() calls interleave their submissions.
    """

    def __init__(
        self,
        config: ConsolidatorConfig | None = None,
        *,
        rate_limiter: RateLimiter | None = None,
        backend: BackendClient | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._config = config or get_settings()
        self._rate_limiter = rate_limiter or get_rate_limiter(self._config.max_bundles_per_second)
        self._backend = backend or BackendClient(self._config)
        self._sleep = sleep

    @property
    def config(self) -> ConsolidatorConfig:
        return self._config

    async def aclose(self) -> None:
        await self._backend.aclose()

    async def _submit(self, bundle: SubmissionBatch) -> SubmissionResult:
        if self._config.dry_run:
            logger.info("bundle_dry_run", tx_count=len(bundle))
            return SubmissionResult(bundle_id=DRY_RUN_BUNDLE_PLACEHOLDER)
        return await self._backend.submit_bundle(bundle.transactions)

    async def _send_bundles(self, bundles: Sequence[SubmissionBatch], results: list[SubmissionResult]) -> None:
        delay_sec = self._config.bundle_delay_ms / 1000.0
        for i, bundle in enumerate(bundles):
            logger.info(
                "bundle_sending",
                bundle_index=i + 1,
                bundle_count=len(bundles),
                tx_count=len(bundle),
            )
            await self._rate_limiter.acquire()
            result = await self._submit(bundle)
            results.append(result)
            logger.info("bundle_sent", bundle_index=i + 1, bundle_id=result.bundle_id, ok=result.ok)

            if i < len(bundles) - 1:
                await self._sleep(delay_sec)

    async def consolidate(
        self,
        source_wallets: Sequence[WalletRecord],
        receiver_wallet: WalletRecord,
        percentage: float,
        source_balances: Mapping[str, float] | None = None,
    ) -> ConsolidationOutcome:
        """
        Consolidate `percentage`% of SOL from every source wallet into the receiver.

        Never raises for pipeline failures; returns ConsolidationOutcome(success=False, error=...).
        On failure `results` holds whatever bundles were already submitted.
        """
        results: list[SubmissionResult] = []
        try:
            validate_consolidation_inputs(
                source_wallets, receiver_wallet, percentage, source_balances
            ).raise_for_error()

            logger.info(
                "consolidation_started",
                percentage=percentage,
                source_count=len(source_wallets),
                receiver=short_address(receiver_wallet.address) + "...",
                server=mask_url(self._config.server_url),
            )
            source_addresses = [wallet.address for wallet in source_wallets]

            partially_prepared = await self._backend.get_partially_prepared_transactions(
                source_addresses, receiver_wallet.address, percentage
            )
            logger.info("partial_transactions_received", tx_count=len(partially_prepared))

            receiver_keypair = load_keypair(receiver_wallet.private_key)
            source_keypairs = build_source_keypairs(source_wallets)

            signed = complete_transaction_signing(partially_prepared, source_keypairs, receiver_keypair)
            logger.info("transactions_signed", tx_count=len(signed))

            bundles = prepare_bundles(signed, self._config.max_txs_per_bundle)
            logger.info("bundles_prepared", bundle_count=len(bundles))

            await self._send_bundles(bundles, results)
        except ConsolidationError as e:
            logger.warning("consolidation_failed", code=e.code, error=e.message, bundles_submitted=len(results))
            return ConsolidationOutcome(success=False, results=results, error=e.message)
        except Exception as e:
            logger.exception("consolidation_failed", error=str(e), bundles_submitted=len(results))
            return ConsolidationOutcome(success=False, results=results, error=str(e))

        logger.info("consolidation_completed", bundle_count=len(results))
        return ConsolidationOutcome(success=True, results=results)


async def consolidate_sol(
    source_wallets: Sequence[WalletRecord],
    receiver_wallet: WalletRecord,
    percentage: float,
    source_balances: Mapping[str, float] | None = None,
    config: ConsolidatorConfig | None = None,
) -> ConsolidationOutcome:
    """Convenience: create an orchestrator on the shared limiter, run once, close the HTTP client."""
    orchestrator = SubmissionOrchestrator(config)
    try:
        return await orchestrator.consolidate(source_wallets, receiver_wallet, percentage, source_balances)
    finally:
        await orchestrator.aclose()
