"""
对局接口模块

提供会话管理和动作提交接口。
"""

from .game_session import (
    SessionStatus,
    GameResult,
    ActionRecord,
    GameSession,
    GameManager
)

__all__ = [
    'SessionStatus',
    'GameResult',
    'ActionRecord',
    'GameSession',
    'GameManager'
]
