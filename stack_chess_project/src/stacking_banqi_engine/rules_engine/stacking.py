"""
叠子组合规则

判断一组棋子能否叠放到目标叠子之上。
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from .pieces import PieceInstance, PieceType, STACK_LIMITS
from .stack import base_type


@dataclass(frozen=True)
class StackCheck:
    """叠子检查结果"""
    valid: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.valid


def can_stack_on(target: Sequence[PieceInstance], incoming: Sequence[PieceInstance],
                 check_color: bool) -> StackCheck:
    """
    检查 incoming 能否叠放在 target 之上

    依次检查颜色、类型兼容性和数量上限，返回第一个失败的原因。

    Args:
        target: 目标叠子 (从下到上)
        incoming: 叠入的棋子 (从下到上)
        check_color: 是否要求顶部颜色一致 (己方合并、打入时为True，
            叠压吃子时为False)

    Returns:
        StackCheck: 检查结果
    """
    if not target:
        return StackCheck(True)
    if not incoming:
        return StackCheck(False, "没有可叠放的棋子")

    # 1. 颜色
    if check_color and target[-1].color != incoming[-1].color:
        return StackCheck(False, "颜色不一致")

    # 2. 类型兼容：基础类型为帅/将时接受任何棋子
    target_base = base_type(target)
    if target_base != PieceType.GENERAL:
        for piece in incoming:
            if piece.type not in (target_base, PieceType.GENERAL):
                return StackCheck(
                    False,
                    f"类型不符: 叠子为{target_base.value}, 不能加入{piece.type.value}"
                )

    # 3. 上限按合并后的基础类型计算
    combined = list(target) + list(incoming)
    combined_base = base_type(combined)
    limit = STACK_LIMITS[combined_base]
    if len(combined) > limit:
        return StackCheck(
            False,
            f"超出叠子上限: {combined_base.value}最多{limit}个, 合并后{len(combined)}个"
        )

    return StackCheck(True)
