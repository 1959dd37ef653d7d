"""
Structured logging for Backend BeanTrace.

JSON logs with timestamp, event_type and account / tx_id / kind fields, plus
run and run_id for everything emitted inside run_context().
"""

from backend_beantrace.trace_logging.logger import (
    bind_account,
    bind_transaction,
    get_logger,
    run_context,
)

__all__ = ["bind_account", "bind_transaction", "get_logger", "run_context"]
