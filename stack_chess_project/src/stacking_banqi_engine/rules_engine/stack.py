"""
叠子数据结构

一个格子上的棋子按从下到上的顺序组成叠子，只有顶部棋子可见、可移动、
可被攻击。
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Dict, Any

from .pieces import PieceInstance, PieceType, STACK_LIMITS


@dataclass
class PieceStack:
    """
    叠子

    pieces[0] 为底部，pieces[-1] 为顶部。棋盘上不保留空叠子。
    """
    pieces: List[PieceInstance] = field(default_factory=list)

    @property
    def top(self) -> PieceInstance:
        """顶部棋子"""
        return self.pieces[-1]

    @property
    def weight(self) -> int:
        """重量 (棋子数量)"""
        return len(self.pieces)

    @property
    def base_type(self) -> PieceType:
        """基础类型"""
        return base_type(self.pieces)

    @property
    def limit(self) -> int:
        """当前基础类型对应的叠子上限"""
        return STACK_LIMITS[self.base_type]

    def piece_ids(self) -> List[str]:
        return [p.id for p in self.pieces]

    def __len__(self) -> int:
        return len(self.pieces)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return {'pieces': [p.to_dict() for p in self.pieces]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PieceStack':
        """从字典创建"""
        return cls(pieces=[PieceInstance.from_dict(p) for p in data['pieces']])


def base_type(pieces: Sequence[PieceInstance]) -> PieceType:
    """
    计算叠子的基础类型

    从底部向上找到第一个非帅/将的棋子，其类型即为基础类型；
    若全部为帅/将，则基础类型为帅/将。

    Args:
        pieces: 从下到上的棋子序列

    Returns:
        PieceType: 基础类型
    """
    if not pieces:
        raise ValueError("空叠子没有基础类型")

    for piece in pieces:
        if piece.type != PieceType.GENERAL:
            return piece.type
    return PieceType.GENERAL


def top_piece(stack: Optional[PieceStack]) -> Optional[PieceInstance]:
    """获取顶部棋子，空格子返回None"""
    if stack is None or not stack.pieces:
        return None
    return stack.pieces[-1]


def weight(stack: Optional[PieceStack]) -> int:
    """叠子重量，空格子为0"""
    return len(stack.pieces) if stack else 0
