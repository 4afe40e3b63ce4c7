"""
配置数据结构

定义引擎、对局和系统配置类及默认参数。
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class EngineConfig:
    """规则引擎配置"""
    default_resolution: str = 'to_hand'  # 未指定结算方式时使用 ('to_hand', 'stack_if_possible')
    validate_invariants: bool = False    # 每次成功动作后运行棋局验证器
    log_rejections: bool = True          # 以DEBUG级别记录被拒绝的动作


@dataclass
class GameConfig:
    """对局配置"""
    seed: Optional[int] = None           # 洗牌随机种子，None表示随机
    first_player: int = 0                # 先手玩家索引
    max_turns: int = 0                   # 最大回合数，0表示不限
    record_history: bool = True          # 是否记录动作历史
    allow_undo: bool = True              # 是否允许悔棋


@dataclass
class SystemConfig:
    """系统配置"""
    log_level: str = 'INFO'              # 日志级别
    log_file: str = ''                   # 日志文件名，为空则不写文件；控制台日志只在 --debug 下输出
    log_dir: str = 'logs'                # 日志目录
    log_max_size: int = 10               # 日志文件最大大小(MB)
    log_backup_count: int = 5            # 日志备份数量


# 默认配置实例
DEFAULT_ENGINE_CONFIG = EngineConfig()
DEFAULT_GAME_CONFIG = GameConfig()
DEFAULT_SYSTEM_CONFIG = SystemConfig()
