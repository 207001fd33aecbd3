"""
Structured logging for Backend SuiWallet.

JSON logs with timestamp, event_type and key/value context.
Use get_logger() in all modules for aggregation-friendly output.
"""

from backend_suiwallet.suiwallet_logging.logger import bind_address, get_logger

__all__ = ["bind_address", "get_logger"]
