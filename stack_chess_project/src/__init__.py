"""
Stack Chess 源代码模块

包含子系统：
- stacking_banqi_engine: 叠子暗棋规则引擎
"""

from . import stacking_banqi_engine

__all__ = [
    "stacking_banqi_engine",
]
