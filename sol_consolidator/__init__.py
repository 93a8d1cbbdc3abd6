"""
SOL Consolidator: sweep SOL from many source wallets into one receiver.

Fetches partially prepared transactions from the trading backend, completes
their signatures locally, groups them into bundles and submits the bundles
through the backend proxy under a bundles-per-second cap.
"""

__version__ = "0.1.0"
