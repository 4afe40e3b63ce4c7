"""
配置管理模块

包含引擎配置、对局配置和系统配置。
"""

from .config_manager import ConfigManager
from .game_config import EngineConfig, GameConfig, SystemConfig

__all__ = ['ConfigManager', 'EngineConfig', 'GameConfig', 'SystemConfig']
