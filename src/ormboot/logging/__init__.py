"""ormboot logging — hexagonal logging port and structlog adapter."""

from ormboot.logging.port import LoggingPort
from ormboot.logging.structlog_adapter import StructlogAdapter

__all__ = ["LoggingPort", "StructlogAdapter"]
