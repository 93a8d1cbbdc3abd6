"""Wallet validation and keypair derivation utilities."""

from __future__ import annotations

import json

import base58
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from sol_consolidator.core.exceptions import SigningError

SECRET_KEY_LEN = 64


def is_valid_wallet(w: str) -> bool:
    """Return True if w is a valid Solana wallet (Pubkey) address."""
    try:
        Pubkey.from_string(w.strip())
        return True
    except Exception:
        return False


def short_address(address: str, length: int = 6) -> str:
    """First `length` characters of an address, for display and logs."""
    return address[:length]


def load_keypair(private_key: str) -> Keypair:
    """
    Load Keypair from an encoded secret: base58 string or JSON array of 64 bytes.

    Raises SigningError without echoing the secret.
    """
    raw = (private_key or "").strip()
    if raw.startswith("["):
        try:
            arr = json.loads(raw)
            if len(arr) >= SECRET_KEY_LEN:
                return Keypair.from_bytes(bytes(arr[:SECRET_KEY_LEN]))
        except Exception as e:
            raise SigningError("Invalid private key") from e
        raise SigningError("Invalid private key")
    try:
        secret = base58.b58decode(raw)
        return Keypair.from_bytes(secret)
    except Exception as e:
        raise SigningError("Invalid private key") from e


def keypair_address(keypair: Keypair) -> str:
    """Base58 public address of a keypair."""
    return str(keypair.pubkey())
