"""Configuration management."""
from .settings import *
from .dialect_loader import (
    DialectConfig,
    DialectConfigLoader,
    get_dialect_loader,
    normalize_operation_code,
)

__all__ = ['DialectConfig', 'DialectConfigLoader', 'get_dialect_loader', 'normalize_operation_code']
