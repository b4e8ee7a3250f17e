"""Runtime configuration for ledgerkit."""

from ledgerkit.config.logging import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
