"""
棋局状态数据结构

定义4x8棋盘、玩家、连吃状态和完整的游戏状态，支持多种表示格式的转换。
"""

import copy
import json
from dataclasses import dataclass, field
from typing import List, Optional, Iterator, Tuple, Dict, Any, Union

import numpy as np

from .pieces import Color, PieceInstance
from .stack import PieceStack
from .action import Location, PlayerAction
from ..utils.exceptions import ViolationKind

BOARD_ROWS = 4
BOARD_COLS = 8

# to_matrix 中暗子的编码
HIDDEN_CODE = 8

Board = List[List[Optional[PieceStack]]]


@dataclass(frozen=True)
class Idle:
    """无连吃：可以执行任何合法动作"""


@dataclass(frozen=True)
class Chaining:
    """连吃中：只能用 location 处的棋子继续交互或跳过"""
    location: Location


ChainState = Union[Idle, Chaining]

IDLE = Idle()


@dataclass(frozen=True)
class RuleViolation:
    """被拒绝动作的错误信息"""
    kind: ViolationKind
    message: str

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"


@dataclass
class PlayerState:
    """玩家状态"""
    color: Color = Color.UNKNOWN
    hand: List[PieceInstance] = field(default_factory=list)

    def hand_count(self, piece_type=None) -> int:
        """统计手牌数量，可按类型过滤"""
        if piece_type is None:
            return len(self.hand)
        return sum(1 for p in self.hand if p.type == piece_type)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'color': self.color.value,
            'hand': [p.to_dict() for p in self.hand],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PlayerState':
        return cls(
            color=Color(data['color']),
            hand=[PieceInstance.from_dict(p) for p in data['hand']],
        )


def empty_board() -> Board:
    """创建空棋盘"""
    return [[None for _ in range(BOARD_COLS)] for _ in range(BOARD_ROWS)]


def is_valid_location(loc: Optional[Location]) -> bool:
    """检查坐标是否在棋盘内"""
    if loc is None or len(loc) != 2:
        return False
    row, col = loc
    return 0 <= row < BOARD_ROWS and 0 <= col < BOARD_COLS


@dataclass
class GameState:
    """
    游戏状态

    由 init_game 创建，此后每次 apply_action 都会生成新的状态对象，
    调用方应将其视为不可变。
    """
    board: Board = field(default_factory=empty_board)
    players: List[PlayerState] = field(default_factory=lambda: [PlayerState(), PlayerState()])
    active_player_index: int = 0
    colors_assigned: bool = False
    turn_count: int = 0
    is_game_over: bool = False
    winner: Optional[int] = None
    last_action: Optional[PlayerAction] = None
    error: Optional[RuleViolation] = None
    chain: ChainState = IDLE

    # ==================== 连吃状态 ====================

    @property
    def pending_chain_capture(self) -> Optional[Location]:
        """必须继续交互的格子，无连吃时为None"""
        if isinstance(self.chain, Chaining):
            return self.chain.location
        return None

    @property
    def is_chaining(self) -> bool:
        return isinstance(self.chain, Chaining)

    # ==================== 棋盘访问 ====================

    def stack_at(self, loc: Location) -> Optional[PieceStack]:
        """获取指定位置的叠子"""
        row, col = loc
        return self.board[row][col]

    def set_stack(self, loc: Location, stack: Optional[PieceStack]) -> None:
        """设置指定位置的叠子，空叠子会被移除"""
        row, col = loc
        if stack is not None and not stack.pieces:
            stack = None
        self.board[row][col] = stack

    def iter_cells(self) -> Iterator[Tuple[Location, Optional[PieceStack]]]:
        """按行遍历所有格子"""
        for row in range(BOARD_ROWS):
            for col in range(BOARD_COLS):
                yield (row, col), self.board[row][col]

    def iter_stacks(self) -> Iterator[Tuple[Location, PieceStack]]:
        """遍历所有有子的格子"""
        for loc, stack in self.iter_cells():
            if stack is not None:
                yield loc, stack

    @property
    def active_player(self) -> PlayerState:
        return self.players[self.active_player_index]

    def board_piece_count(self) -> int:
        """棋盘上的棋子总数"""
        return sum(len(stack) for _, stack in self.iter_stacks())

    def hand_piece_count(self) -> int:
        """双方手牌棋子总数"""
        return sum(len(player.hand) for player in self.players)

    def total_piece_count(self) -> int:
        return self.board_piece_count() + self.hand_piece_count()

    def all_revealed(self) -> bool:
        """棋盘上所有棋子是否都已翻开"""
        return all(p.face_up for _, stack in self.iter_stacks() for p in stack.pieces)

    def stacks_controlled_by(self, color: Color) -> List[Location]:
        """顶部为指定颜色的已翻开叠子位置"""
        return [
            loc for loc, stack in self.iter_stacks()
            if stack.top.face_up and stack.top.color == color
        ]

    def find_piece(self, piece_id: str) -> Optional[Tuple[str, Any]]:
        """
        查找棋子所在位置

        Returns:
            ('board', (row, col)) 或 ('hand', player_index)，找不到返回None
        """
        for loc, stack in self.iter_stacks():
            if piece_id in stack.piece_ids():
                return 'board', loc
        for index, player in enumerate(self.players):
            if any(p.id == piece_id for p in player.hand):
                return 'hand', index
        return None

    # ==================== 格式转换 ====================

    def copy(self) -> 'GameState':
        """创建状态的深拷贝"""
        return copy.deepcopy(self)

    def to_matrix(self) -> np.ndarray:
        """
        转换为矩阵格式

        Returns:
            np.ndarray: 形状为(2, 4, 8)的矩阵。第0层为重量；第1层为顶部棋子
            编码，红方为 等级+1，黑方为 -(等级+1)，暗子为 HIDDEN_CODE，空格为0。
        """
        matrix = np.zeros((2, BOARD_ROWS, BOARD_COLS), dtype=int)
        for (row, col), stack in self.iter_stacks():
            matrix[0, row, col] = len(stack)
            top = stack.top
            if not top.face_up:
                matrix[1, row, col] = HIDDEN_CODE
            else:
                code = top.rank + 1
                matrix[1, row, col] = code if top.color == Color.RED else -code
        return matrix

    def to_visual_string(self) -> str:
        """
        转换为可视化字符串

        Returns:
            str: 可视化的棋盘字符串，每格显示顶部棋子和重量，暗子显示为"##"
        """
        lines = []
        lines.append("    " + "    ".join(str(c) for c in range(BOARD_COLS)))
        lines.append("  +" + "----+" * BOARD_COLS)

        for row in range(BOARD_ROWS):
            line = f"{row} |"
            for col in range(BOARD_COLS):
                stack = self.board[row][col]
                if stack is None:
                    cell = "    "
                elif not stack.top.face_up:
                    cell = " ## "
                else:
                    marker = "r" if stack.top.color == Color.RED else "b"
                    cell = f"{marker}{stack.top.display_name}{len(stack)}"
                line += cell + "|"
            lines.append(line)
            lines.append("  +" + "----+" * BOARD_COLS)

        for index, player in enumerate(self.players):
            hand = ", ".join(p.display_name for p in player.hand) or "-"
            lines.append(f"玩家{index} ({player.color.value}) 手牌: {hand}")

        status = f"回合: {self.turn_count}  当前玩家: {self.active_player_index}"
        if self.pending_chain_capture is not None:
            status += f"  连吃中: {self.pending_chain_capture}"
        if self.is_game_over:
            status += f"  游戏结束，胜者: {self.winner}"
        lines.append(status)
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典 (逐字段序列化)"""
        return {
            'board': [
                [stack.to_dict() if stack else None for stack in row]
                for row in self.board
            ],
            'players': [player.to_dict() for player in self.players],
            'active_player_index': self.active_player_index,
            'colors_assigned': self.colors_assigned,
            'turn_count': self.turn_count,
            'is_game_over': self.is_game_over,
            'winner': self.winner,
            'last_action': self.last_action.to_dict() if self.last_action else None,
            'error': {
                'kind': self.error.kind.value,
                'message': self.error.message,
            } if self.error else None,
            'pending_chain_capture': list(self.pending_chain_capture)
            if self.pending_chain_capture is not None else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GameState':
        """从字典创建"""
        board = [
            [PieceStack.from_dict(cell) if cell else None for cell in row]
            for row in data['board']
        ]
        pending = data.get('pending_chain_capture')
        error = data.get('error')
        return cls(
            board=board,
            players=[PlayerState.from_dict(p) for p in data['players']],
            active_player_index=data['active_player_index'],
            colors_assigned=data['colors_assigned'],
            turn_count=data['turn_count'],
            is_game_over=data['is_game_over'],
            winner=data.get('winner'),
            last_action=PlayerAction.from_dict(data['last_action']) if data.get('last_action') else None,
            error=RuleViolation(ViolationKind(error['kind']), error['message']) if error else None,
            chain=Chaining(tuple(pending)) if pending is not None else IDLE,
        )

    def to_json(self) -> str:
        """转换为JSON格式"""
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2)

    @classmethod
    def from_json(cls, json_str: str) -> 'GameState':
        """从JSON格式创建"""
        return cls.from_dict(json.loads(json_str))

    def __str__(self) -> str:
        return self.to_visual_string()
