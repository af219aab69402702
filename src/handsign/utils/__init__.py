"""Logging and visualization helpers."""
from .logger import LoggingConfig, WordLogger, setup_logging

__all__ = ["LoggingConfig", "WordLogger", "setup_logging"]
