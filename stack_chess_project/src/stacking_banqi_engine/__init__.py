"""
叠子暗棋规则引擎

4x8棋盘上的暗棋变体：棋子可以叠放，吃子按重量与等级判定，支持
收入手牌、打入、收回和连吃。规则引擎为纯函数式状态转换。
"""

__version__ = "0.1.0"
__author__ = "Stack Chess Team"

from .rules_engine import (
    GameState, PlayerAction, ActionType, CaptureResolution,
    RuleEngine, BoardValidator, init_game, apply_action, get_legal_actions
)
from .config import ConfigManager, EngineConfig, GameConfig, SystemConfig
from .game_interface import GameSession, GameManager
from .utils import setup_logger, get_logger, BanqiEngineError, RuleViolationError

__all__ = [
    "__version__", "__author__",
    "GameState", "PlayerAction", "ActionType", "CaptureResolution",
    "RuleEngine", "BoardValidator", "init_game", "apply_action", "get_legal_actions",
    "ConfigManager", "EngineConfig", "GameConfig", "SystemConfig",
    "GameSession", "GameManager",
    "setup_logger", "get_logger", "BanqiEngineError", "RuleViolationError"
]
