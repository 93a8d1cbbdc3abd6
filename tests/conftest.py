"""
Pytest fixtures for consolidator tests.

Partially prepared transactions are real solders v0 messages (system transfers
from each source to the receiver, receiver as fee payer) with empty signature
slots. The backend is an httpx.MockTransport; time is a fake millisecond clock.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from typing import Any

import base58
import httpx
import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import MessageV0, to_bytes_versioned
from solders.signature import Signature
from solders.system_program import TransferParams, transfer
from solders.transaction import VersionedTransaction

from sol_consolidator.config.settings import ConsolidatorConfig
from sol_consolidator.consolidation.backend_client import BackendClient
from sol_consolidator.consolidation.models import WalletRecord

BACKEND_URL = "http://backend.test"


class FakeClock:
    """Millisecond clock advanced only by the recording sleep."""

    def __init__(self, start_ms: float = 0.0) -> None:
        self.now = start_ms
        self.events: list[tuple[str, Any]] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms

    async def sleep(self, seconds: float) -> None:
        self.events.append(("sleep", seconds))
        self.now += seconds * 1000.0

    @property
    def sleeps(self) -> list[float]:
        return [value for kind, value in self.events if kind == "sleep"]


def wallet_record(keypair: Keypair) -> WalletRecord:
    return WalletRecord(address=str(keypair.pubkey()), private_key=str(keypair))


def build_partial_tx(
    receiver: Keypair,
    sources: Sequence[Keypair],
    *,
    co_signer: Keypair | None = None,
    lamports: int = 1_000_000,
) -> str:
    """
    Base58 v0 transaction moving `lamports` from each source to the receiver.
    A co_signer (backend-side party) transfers too and signs its own slot up front.
    """
    payers = list(sources) + ([co_signer] if co_signer is not None else [])
    instructions = [
        transfer(TransferParams(from_pubkey=kp.pubkey(), to_pubkey=receiver.pubkey(), lamports=lamports))
        for kp in payers
    ]
    message = MessageV0.try_compile(receiver.pubkey(), instructions, [], Hash.default())
    signatures = [Signature.default()] * message.header.num_required_signatures
    if co_signer is not None:
        required = list(message.account_keys[: message.header.num_required_signatures])
        signatures[required.index(co_signer.pubkey())] = co_signer.sign_message(to_bytes_versioned(message))
    tx = VersionedTransaction.populate(message, signatures)
    return base58.b58encode(bytes(tx)).decode("ascii")


def decode_tx(tx_base58: str) -> VersionedTransaction:
    return VersionedTransaction.from_bytes(base58.b58decode(tx_base58))


def signature_map(tx: VersionedTransaction) -> dict[str, Signature]:
    """Signer address -> signature in its slot."""
    required = tx.message.account_keys[: tx.message.header.num_required_signatures]
    return {str(key): sig for key, sig in zip(required, tx.signatures)}


def expected_signature(keypair: Keypair, tx: VersionedTransaction) -> Signature:
    return keypair.sign_message(to_bytes_versioned(tx.message))


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def receiver_keypair() -> Keypair:
    return Keypair()


@pytest.fixture
def source_keypairs() -> list[Keypair]:
    return [Keypair() for _ in range(3)]


@pytest.fixture
def config() -> ConsolidatorConfig:
    return ConsolidatorConfig(
        server_url=BACKEND_URL + "/",
        max_bundles_per_second=2,
        max_txs_per_bundle=5,
        bundle_delay_ms=500,
        request_timeout_sec=None,
        dry_run=False,
    )


class MockBackend:
    """Records requests to both endpoints and answers with canned payloads."""

    def __init__(
        self,
        transactions: list[str] | None = None,
        fetch_response: httpx.Response | None = None,
        send_responses: list[httpx.Response] | None = None,
        events: list[tuple[str, Any]] | None = None,
    ) -> None:
        self.transactions = transactions or []
        self.fetch_response = fetch_response
        self.send_responses = list(send_responses or [])
        self.fetch_calls: list[dict[str, Any]] = []
        self.send_calls: list[list[str]] = []
        self.events = events if events is not None else []

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content or b"{}")
        if request.url.path == "/api/wallets/consolidate":
            self.fetch_calls.append(body)
            self.events.append(("fetch", len(body.get("sourceAddresses", []))))
            if self.fetch_response is not None:
                return self.fetch_response
            return httpx.Response(200, json={"success": True, "transactions": self.transactions})
        if request.url.path == "/api/transactions/send":
            self.send_calls.append(body["transactions"])
            self.events.append(("submit", len(body["transactions"])))
            if self.send_responses:
                return self.send_responses.pop(0)
            bundle_id = f"bundle-{len(self.send_calls)}"
            return httpx.Response(
                200, json={"success": True, "result": {"jsonrpc": "2.0", "id": 1, "result": bundle_id}}
            )
        return httpx.Response(404, json={"success": False, "error": "not found"})

    def client(self, config: ConsolidatorConfig) -> BackendClient:
        http = httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
        return BackendClient(config, client=http)


@pytest.fixture
def mock_backend_factory() -> Callable[..., MockBackend]:
    return MockBackend
