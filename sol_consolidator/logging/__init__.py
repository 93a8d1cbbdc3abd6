"""
Structured logging for the SOL consolidator.

JSON logs with timestamp, event_type, wallet_id and bundle fields.
Use get_logger() in all consolidation modules for aggregation-friendly output.
"""

from sol_consolidator.logging.logger import bind_wallet, get_logger

__all__ = ["bind_wallet", "get_logger"]
