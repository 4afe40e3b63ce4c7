"""
交互结算

当移动落在有子格子时，根据重量/等级判断能否吃子，并按
"收入手牌"或"叠压"两种方式结算。
"""

import logging

from .pieces import PieceType
from .stack import PieceStack
from .action import Location, CaptureResolution
from .geometry import get_move_pattern, MovePattern
from .stacking import can_stack_on
from .game_state import GameState, PlayerState
from ..utils.exceptions import RuleViolationError, ViolationKind

logger = logging.getLogger(__name__)


def is_friendly(attacker: PieceStack, defender: PieceStack) -> bool:
    """双方顶部棋子是否同色"""
    return attacker.top.color == defender.top.color


def can_capture(attacker: PieceStack, defender: PieceStack, screens: int = 0) -> bool:
    """
    重量/等级判定

    同色目标总是可以交互 (合并或收回)。异色目标先比较重量，重量相等时
    比较顶部棋子等级，并处理以下例外：
    - 炮隔一子跳吃时忽略等级
    - 兵/卒可以吃帅/将
    - 帅/将不能吃兵/卒

    Args:
        attacker: 进攻叠子
        defender: 防守叠子
        screens: 走法路径上的炮架数量

    Returns:
        bool: 是否可以交互
    """
    if is_friendly(attacker, defender):
        return True

    if attacker.weight > defender.weight:
        return True
    if attacker.weight < defender.weight:
        return False

    atk_top = attacker.top
    def_top = defender.top

    if attacker.base_type == PieceType.CANNON and screens == 1:
        return True
    if atk_top.type == PieceType.SOLDIER and def_top.type == PieceType.GENERAL:
        return True
    if atk_top.type == PieceType.GENERAL and def_top.type == PieceType.SOLDIER:
        return False

    return atk_top.rank >= def_top.rank


def _is_occupied(state: GameState):
    return lambda loc: state.stack_at(loc) is not None


def pattern_for(state: GameState, from_pos: Location, to_pos: Location) -> MovePattern:
    """按 from_pos 处叠子的基础类型计算走法形状"""
    stack = state.stack_at(from_pos)
    return get_move_pattern(_is_occupied(state), from_pos, to_pos, stack.base_type)


def can_interact(state: GameState, from_pos: Location, to_pos: Location) -> bool:
    """
    from_pos 处的叠子能否与 to_pos 处的已翻开叠子交互

    走法形状合法，且对异色目标满足重量/等级要求。
    """
    if from_pos == to_pos:
        return False
    attacker = state.stack_at(from_pos)
    defender = state.stack_at(to_pos)
    if attacker is None or defender is None or not defender.top.face_up:
        return False

    pattern = pattern_for(state, from_pos, to_pos)
    if not pattern.valid:
        return False
    return can_capture(attacker, defender, pattern.screens)


def resolve_interaction(state: GameState, player: PlayerState, from_pos: Location,
                        to_pos: Location, resolution: CaptureResolution,
                        pattern: MovePattern) -> None:
    """
    在 state 上执行一次交互 (原地修改)

    Args:
        state: 待修改的状态副本
        player: 行动玩家
        from_pos: 移动叠子的位置
        to_pos: 目标叠子的位置
        resolution: 结算方式
        pattern: 已校验的走法形状

    Raises:
        RuleViolationError: 交互不合法时抛出
    """
    source = state.stack_at(from_pos)
    target = state.stack_at(to_pos)

    if not target.top.face_up:
        raise RuleViolationError(ViolationKind.TARGET_STATE, "不能与未翻开的棋子交互")

    friendly = target.top.color == player.color

    if not friendly and not can_capture(source, target, pattern.screens):
        raise RuleViolationError(
            ViolationKind.RANK_WEIGHT,
            f"吃子失败: 重量{source.weight}对{target.weight}, "
            f"{source.top.type.value}对{target.top.type.value}"
        )

    if resolution == CaptureResolution.TO_HAND:
        _move_to_hand(player, target)
        state.set_stack(to_pos, source)
    else:
        check = can_stack_on(target.pieces, source.pieces, check_color=friendly)
        if not check.valid:
            raise RuleViolationError(ViolationKind.STACK_COMPOSITION, f"无法叠放: {check.reason}")
        state.set_stack(to_pos, PieceStack(target.pieces + source.pieces))
    state.set_stack(from_pos, None)

    logger.debug("交互结算: %s -> %s, 方式=%s, 同色=%s", from_pos, to_pos, resolution.value, friendly)


def _move_to_hand(player: PlayerState, target: PieceStack) -> None:
    """目标叠子全部收入手牌并改为行动方颜色，己方叠子下层可能压着对方棋子"""
    for piece in target.pieces:
        piece.color = player.color
        player.hand.append(piece)
