"""Structured logging package."""

from src.log.logger import configure_logging, create_correlation_id, get_logger

__all__ = ["configure_logging", "create_correlation_id", "get_logger"]
