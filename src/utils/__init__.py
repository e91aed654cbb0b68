"""Configuration and logging helpers."""

from .config import Config
from .logger import setup_logger

__all__ = ["Config", "setup_logger"]
