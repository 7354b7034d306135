"""aksdemo observability package.

Structured logging and user-facing console output.
"""

from aksdemo.observability.console import Console
from aksdemo.observability.logging import configure_logging, get_logger

__all__ = ["Console", "configure_logging", "get_logger"]
