"""Observability module for branchbook.

Provides structured logging with a rich console handler and optional
JSONL file output.
"""

from branchbook.observability.logging import (
    close_file_logging,
    configure_logging,
    get_logger,
)

__all__ = [
    "close_file_logging",
    "configure_logging",
    "get_logger",
]
