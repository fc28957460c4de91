"""
System configuration package.

Exports:
    - SystemConfig: Complete configuration model
    - load_system_config: Load configuration in lookup order
    - LoggerFactory: Factory for creating configured loggers
    - LoggingConfig: Logging configuration model
"""

from lupo.system.config import SystemConfig, load_system_config
from lupo.system.log_system import LoggerFactory, LoggingConfig

__all__ = [
    "SystemConfig",
    "load_system_config",
    "LoggerFactory",
    "LoggingConfig",
]
