"""
叠子暗棋 (Stack Chess)

4x8棋盘上的叠子暗棋规则引擎、对局会话和命令行工具。
"""

__version__ = "0.1.0"
__author__ = "Stack Chess Team"
__description__ = "叠子暗棋 - 纯函数式规则引擎、对局会话与命令行工具"

from stack_chess_project.src import stacking_banqi_engine

__all__ = [
    "stacking_banqi_engine",
    "__version__",
    "__author__",
    "__description__",
]
