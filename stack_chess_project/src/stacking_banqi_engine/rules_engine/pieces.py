"""
棋子数据结构

定义棋子类型、颜色、等级、叠子上限以及棋子实例。
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict, Any


class Color(str, Enum):
    """棋子颜色"""
    RED = "RED"
    BLACK = "BLACK"
    UNKNOWN = "UNKNOWN"  # 首次翻子之前玩家尚未分配颜色

    @property
    def opposite(self) -> 'Color':
        """对方颜色"""
        if self == Color.RED:
            return Color.BLACK
        if self == Color.BLACK:
            return Color.RED
        return Color.UNKNOWN


class PieceType(str, Enum):
    """棋子类型"""
    GENERAL = "GENERAL"    # 帅/将
    ADVISOR = "ADVISOR"    # 仕/士
    ELEPHANT = "ELEPHANT"  # 相/象
    CHARIOT = "CHARIOT"    # 车
    HORSE = "HORSE"        # 马
    CANNON = "CANNON"      # 炮
    SOLDIER = "SOLDIER"    # 兵/卒


# 棋子等级 (同重量时比较)
PIECE_RANKS: Dict[PieceType, int] = {
    PieceType.GENERAL: 6,
    PieceType.ADVISOR: 5,
    PieceType.ELEPHANT: 4,
    PieceType.CHARIOT: 3,
    PieceType.HORSE: 2,
    PieceType.CANNON: 1,
    PieceType.SOLDIER: 0,
}

# 按基础类型的叠子上限
STACK_LIMITS: Dict[PieceType, int] = {
    PieceType.GENERAL: 2,
    PieceType.ADVISOR: 6,
    PieceType.ELEPHANT: 6,
    PieceType.CHARIOT: 6,
    PieceType.HORSE: 6,
    PieceType.CANNON: 6,
    PieceType.SOLDIER: 12,
}

# 每方初始棋子数量
INITIAL_PIECE_COUNTS: Dict[PieceType, int] = {
    PieceType.GENERAL: 1,
    PieceType.ADVISOR: 2,
    PieceType.ELEPHANT: 2,
    PieceType.CHARIOT: 2,
    PieceType.HORSE: 2,
    PieceType.CANNON: 2,
    PieceType.SOLDIER: 5,
}

TOTAL_PIECES = 2 * sum(INITIAL_PIECE_COUNTS.values())  # 32

# 棋子名称映射 (用于文本显示)
PIECE_NAMES = {
    (PieceType.GENERAL, Color.RED): "帅", (PieceType.GENERAL, Color.BLACK): "将",
    (PieceType.ADVISOR, Color.RED): "仕", (PieceType.ADVISOR, Color.BLACK): "士",
    (PieceType.ELEPHANT, Color.RED): "相", (PieceType.ELEPHANT, Color.BLACK): "象",
    (PieceType.CHARIOT, Color.RED): "车", (PieceType.CHARIOT, Color.BLACK): "车",
    (PieceType.HORSE, Color.RED): "马", (PieceType.HORSE, Color.BLACK): "马",
    (PieceType.CANNON, Color.RED): "炮", (PieceType.CANNON, Color.BLACK): "炮",
    (PieceType.SOLDIER, Color.RED): "兵", (PieceType.SOLDIER, Color.BLACK): "卒",
}


@dataclass
class PieceInstance:
    """
    棋子实例

    每个棋子在整局游戏中保持唯一ID；只有规则引擎会修改其颜色、
    翻面状态和所在位置。
    """
    id: str
    type: PieceType
    color: Color
    face_up: bool = False

    @property
    def rank(self) -> int:
        """棋子等级"""
        return PIECE_RANKS[self.type]

    @property
    def display_name(self) -> str:
        """显示名称"""
        return PIECE_NAMES.get((self.type, self.color), self.type.value[0])

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        data = asdict(self)
        data['type'] = self.type.value
        data['color'] = self.color.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PieceInstance':
        """从字典创建"""
        return cls(
            id=data['id'],
            type=PieceType(data['type']),
            color=Color(data['color']),
            face_up=bool(data.get('face_up', False))
        )
