"""
叠子暗棋规则引擎模块

包含棋子与叠子模型、走法几何、叠子组合、交互结算、连吃状态机和合法动作生成。
"""

from .pieces import Color, PieceType, PieceInstance, PIECE_RANKS, STACK_LIMITS, TOTAL_PIECES
from .stack import PieceStack, base_type, top_piece, weight
from .action import Location, ActionType, CaptureResolution, PlayerAction
from .game_state import (
    GameState, PlayerState, Idle, Chaining, RuleViolation, IDLE,
    BOARD_ROWS, BOARD_COLS, is_valid_location
)
from .geometry import MovePattern, get_move_pattern, count_screens
from .stacking import StackCheck, can_stack_on
from .interaction import can_capture, can_interact, resolve_interaction
from .deck import init_game, create_deck, build_deck
from .board_validator import BoardValidator
from .rule_engine import RuleEngine, apply_action, get_legal_actions

__all__ = [
    'Color', 'PieceType', 'PieceInstance', 'PIECE_RANKS', 'STACK_LIMITS', 'TOTAL_PIECES',
    'PieceStack', 'base_type', 'top_piece', 'weight',
    'Location', 'ActionType', 'CaptureResolution', 'PlayerAction',
    'GameState', 'PlayerState', 'Idle', 'Chaining', 'RuleViolation', 'IDLE',
    'BOARD_ROWS', 'BOARD_COLS', 'is_valid_location',
    'MovePattern', 'get_move_pattern', 'count_screens',
    'StackCheck', 'can_stack_on',
    'can_capture', 'can_interact', 'resolve_interaction',
    'init_game', 'create_deck', 'build_deck',
    'BoardValidator',
    'RuleEngine', 'apply_action', 'get_legal_actions',
]
