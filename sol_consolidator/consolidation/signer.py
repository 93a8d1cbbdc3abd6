"""
Complete signatures on backend-prepared consolidation transactions.

The backend returns base58-encoded versioned transactions whose message is final
but whose source and receiver signatures are still empty. For each transaction:
    - the receiver keypair always signs first (it is the fee payer)
    - every source keypair whose address appears in the message's static
      account keys signs next, in account order
    - signatures already attached by other parties are kept
Any transaction that fails to decode or sign aborts the whole call.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

import base58
from solders.keypair import Keypair
from solders.message import to_bytes_versioned
from solders.signature import Signature
from solders.transaction import VersionedTransaction

from sol_consolidator.core.exceptions import SigningError
from sol_consolidator.utils.wallet_utils import short_address


def decode_transaction(tx_base58: str) -> VersionedTransaction:
    try:
        return VersionedTransaction.from_bytes(base58.b58decode(tx_base58))
    except Exception as e:
        raise SigningError(f"Could not decode transaction: {e}") from e


def encode_transaction(tx: VersionedTransaction) -> str:
    return base58.b58encode(bytes(tx)).decode("ascii")


def collect_signers(
    tx: VersionedTransaction,
    source_keypairs: Mapping[str, Keypair],
    receiver_keypair: Keypair,
) -> list[Keypair]:
    """Receiver first, then each source found among the static account keys. No duplicates."""
    signers = [receiver_keypair]
    seen = {str(receiver_keypair.pubkey())}
    for account_key in tx.message.account_keys:
        pubkey_str = str(account_key)
        if pubkey_str in seen:
            continue
        keypair = source_keypairs.get(pubkey_str)
        if keypair is not None:
            signers.append(keypair)
            seen.add(pubkey_str)
    return signers


def sign_transaction(tx: VersionedTransaction, signers: Sequence[Keypair]) -> VersionedTransaction:
    """Fill in the signature slot of every signer over the versioned message bytes."""
    message = tx.message
    required = message.account_keys[: message.header.num_required_signatures]
    slots = {str(key): i for i, key in enumerate(required)}

    signatures = list(tx.signatures)
    if len(signatures) < len(required):
        signatures.extend(Signature.default() for _ in range(len(required) - len(signatures)))

    message_bytes = to_bytes_versioned(message)
    for keypair in signers:
        pubkey_str = str(keypair.pubkey())
        slot = slots.get(pubkey_str)
        if slot is None:
            raise SigningError(f"Cannot sign with non signer key {short_address(pubkey_str)}...")
        signatures[slot] = keypair.sign_message(message_bytes)

    return VersionedTransaction.populate(message, signatures)


def complete_transaction(
    tx_base58: str,
    source_keypairs: Mapping[str, Keypair],
    receiver_keypair: Keypair,
) -> str:
    tx = decode_transaction(tx_base58)
    signers = collect_signers(tx, source_keypairs, receiver_keypair)
    return encode_transaction(sign_transaction(tx, signers))


def complete_transaction_signing(
    partially_prepared: Sequence[str],
    source_keypairs: Mapping[str, Keypair],
    receiver_keypair: Keypair,
) -> list[str]:
    """
    Sign every partially prepared transaction; output order matches input order.

    Raises SigningError naming the first transaction that could not be completed.
    """
    signed: list[str] = []
    for index, tx_base58 in enumerate(partially_prepared):
        try:
            signed.append(complete_transaction(tx_base58, source_keypairs, receiver_keypair))
        except SigningError as e:
            raise SigningError(f"Transaction {index}: {e.message}") from e
        except Exception as e:
            raise SigningError(f"Transaction {index}: {e}") from e
    return signed
