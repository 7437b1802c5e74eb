"""Service layer logging utilities.

Provides structured logging functions for service operations, enabling
consistent log format and context across the import engine and the menu
services.

Usage:
    from hotel_menu.services.logging_utils import get_service_logger, log_operation

    logger = get_service_logger(__name__)

    log_operation(
        logger,
        operation="import_menu",
        outcome="success",
        business_id="b-1",
        items_inserted=12,
    )
"""

import logging
from typing import Any


def get_service_logger(name: str) -> logging.Logger:
    """
    Get a logger configured for service operations.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Logger instance with the 'hotel_menu.services' prefix.

    Example:
        >>> logger = get_service_logger("hotel_menu.services.menu_import.menu_import_service")
        >>> logger.name
        'hotel_menu.services.menu_import_service'
    """
    # Extract just the module name if full path is provided
    if "." in name:
        name = name.split(".")[-1]
    return logging.getLogger(f"hotel_menu.services.{name}")


def log_operation(
    logger: logging.Logger,
    operation: str,
    outcome: str,
    level: int = logging.INFO,
    **context: Any,
) -> None:
    """
    Log a service operation with structured context.

    The context is passed via the 'extra' parameter for structured logging.

    Args:
        logger: Logger instance to use
        operation: Operation name (e.g., "import_menu", "create_category")
        outcome: Outcome description (e.g., "success", "row_failed", "error")
        level: Log level (default: INFO). Use DEBUG for verbose/frequent logs.
        **context: Additional context fields (business_id, row_no, error, counts)
    """
    extra = {
        "operation": operation,
        "outcome": outcome,
        **context,
    }
    logger.log(level, f"{operation}: {outcome}", extra=extra)
