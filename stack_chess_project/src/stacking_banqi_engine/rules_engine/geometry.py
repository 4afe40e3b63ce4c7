"""
走法几何

根据叠子的基础类型判断起止坐标是否构成合法走法形状，并统计
车/炮直线路径上的炮架数量。
"""

from dataclasses import dataclass
from typing import Callable

from .pieces import PieceType
from .action import Location


@dataclass(frozen=True)
class MovePattern:
    """走法形状判定结果"""
    valid: bool
    screens: int = 0  # 起止之间直线上被占据的格子数

    @property
    def is_cannon_jump(self) -> bool:
        return self.valid and self.screens == 1


def count_screens(is_occupied: Callable[[Location], bool],
                  from_pos: Location, to_pos: Location) -> int:
    """
    统计同行或同列两点之间(不含端点)被占据的格子数

    Args:
        is_occupied: 判断格子是否有子的函数
        from_pos: 起点
        to_pos: 终点

    Returns:
        int: 炮架数量，不在同一直线时为0
    """
    count = 0
    if from_pos[0] == to_pos[0]:
        row = from_pos[0]
        low, high = sorted((from_pos[1], to_pos[1]))
        for col in range(low + 1, high):
            if is_occupied((row, col)):
                count += 1
    elif from_pos[1] == to_pos[1]:
        col = from_pos[1]
        low, high = sorted((from_pos[0], to_pos[0]))
        for row in range(low + 1, high):
            if is_occupied((row, col)):
                count += 1
    return count


def get_move_pattern(is_occupied: Callable[[Location], bool], from_pos: Location,
                     to_pos: Location, piece_type: PieceType) -> MovePattern:
    """
    判断走法形状

    - 马：斜走一格
    - 车：同行或同列，路径上无子
    - 炮：同行或同列，路径上0个或1个炮架
    - 帅、仕、相、兵：上下左右一格

    Args:
        is_occupied: 判断格子是否有子的函数
        from_pos: 起点
        to_pos: 终点
        piece_type: 移动叠子的基础类型

    Returns:
        MovePattern: 判定结果
    """
    dr = to_pos[0] - from_pos[0]
    dc = to_pos[1] - from_pos[1]
    is_line = dr == 0 or dc == 0
    distance = abs(dr) + abs(dc)

    if distance == 0:
        return MovePattern(valid=False)

    if piece_type == PieceType.HORSE:
        return MovePattern(valid=abs(dr) == 1 and abs(dc) == 1)

    if piece_type == PieceType.CHARIOT:
        if not is_line:
            return MovePattern(valid=False)
        screens = count_screens(is_occupied, from_pos, to_pos)
        return MovePattern(valid=screens == 0, screens=screens)

    if piece_type == PieceType.CANNON:
        if not is_line:
            return MovePattern(valid=False)
        screens = count_screens(is_occupied, from_pos, to_pos)
        return MovePattern(valid=screens <= 1, screens=screens)

    # 帅、仕、相、兵
    return MovePattern(valid=distance == 1)
