"""
工具模块

包含日志、异常处理和其他通用工具。
"""

from .logger import setup_logger, get_logger, LoggerMixin
from .exceptions import (
    BanqiEngineError, RuleViolationError, ViolationKind,
    ConfigurationError, GameStateError, SessionError
)

__all__ = [
    'setup_logger', 'get_logger', 'LoggerMixin',
    'BanqiEngineError', 'RuleViolationError', 'ViolationKind',
    'ConfigurationError', 'GameStateError', 'SessionError'
]
