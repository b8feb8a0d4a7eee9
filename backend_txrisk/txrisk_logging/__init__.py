"""
Structured logging for Backend TxRisk.

JSON logs with timestamp, user_id, event_type and scoring context.
Use get_logger() in all engine modules for aggregation-friendly output.
"""

from backend_txrisk.txrisk_logging.logger import bind_user, configure_structlog, get_logger

__all__ = ["bind_user", "configure_structlog", "get_logger"]
