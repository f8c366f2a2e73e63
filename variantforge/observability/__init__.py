"""Logging configuration for variantforge."""

from variantforge.observability.logging import (
    ROOT_LOGGER,
    StructuredFormatter,
    configure_logging,
    get_context,
    log_context,
    setup_logging,
)

__all__ = [
    "ROOT_LOGGER",
    "StructuredFormatter",
    "configure_logging",
    "setup_logging",
    "log_context",
    "get_context",
]
