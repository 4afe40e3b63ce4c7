"""
牌组与开局

生成32枚棋子、洗牌并面朝下发到4x8棋盘上。随机源由调用方注入，
以便对局可以复现。
"""

import logging
import random
import uuid
from typing import List, Optional, Union

from .pieces import Color, PieceInstance, PieceType, INITIAL_PIECE_COUNTS, TOTAL_PIECES
from .stack import PieceStack
from .game_state import GameState, PlayerState, BOARD_ROWS, BOARD_COLS, empty_board
from ..utils.exceptions import GameStateError

logger = logging.getLogger(__name__)

RandomSource = Union[random.Random, int, None]


def _as_random(rng: RandomSource) -> random.Random:
    if isinstance(rng, random.Random):
        return rng
    return random.Random(rng)


def generate_piece_id(rng: random.Random) -> str:
    """由随机源生成棋子ID"""
    return uuid.UUID(int=rng.getrandbits(128), version=4).hex[:12]


def create_deck(rng: RandomSource = None) -> List[PieceInstance]:
    """
    创建并洗好一副32枚棋子的牌组

    Args:
        rng: random.Random 实例或随机种子，None表示不固定种子

    Returns:
        List[PieceInstance]: 洗好的牌组，全部面朝下
    """
    rng = _as_random(rng)
    deck: List[PieceInstance] = []
    used_ids = set()

    for color in (Color.RED, Color.BLACK):
        for piece_type, count in INITIAL_PIECE_COUNTS.items():
            for _ in range(count):
                piece_id = generate_piece_id(rng)
                while piece_id in used_ids:
                    piece_id = generate_piece_id(rng)
                used_ids.add(piece_id)
                deck.append(PieceInstance(id=piece_id, type=piece_type, color=color, face_up=False))

    rng.shuffle(deck)
    return deck


def validate_deck(deck: List[PieceInstance]) -> None:
    """
    校验预先构造的牌组

    Raises:
        GameStateError: 数量、ID或棋子构成不正确时抛出
    """
    if len(deck) != TOTAL_PIECES:
        raise GameStateError("牌组", f"应有{TOTAL_PIECES}枚棋子, 实际{len(deck)}枚")

    ids = [p.id for p in deck]
    if len(set(ids)) != len(ids):
        raise GameStateError("牌组", "棋子ID重复")

    for color in (Color.RED, Color.BLACK):
        for piece_type, count in INITIAL_PIECE_COUNTS.items():
            actual = sum(1 for p in deck if p.color == color and p.type == piece_type)
            if actual != count:
                raise GameStateError(
                    "牌组", f"{color.value} {piece_type.value} 应有{count}枚, 实际{actual}枚"
                )


def init_game(rng: RandomSource = None, deck: Optional[List[PieceInstance]] = None,
              first_player: int = 0) -> GameState:
    """
    创建开局状态

    Args:
        rng: random.Random 实例或随机种子 (未提供 deck 时用于洗牌)
        deck: 预先洗好的牌组，按行优先顺序发到棋盘上
        first_player: 先手玩家索引

    Returns:
        GameState: 全部暗子的开局状态
    """
    if first_player not in (0, 1):
        raise GameStateError("开局", f"先手玩家索引无效: {first_player}")

    if deck is None:
        deck = create_deck(rng)
    else:
        validate_deck(deck)
        deck = [
            PieceInstance(id=p.id, type=p.type, color=p.color, face_up=False)
            for p in deck
        ]

    board = empty_board()
    for index, piece in enumerate(deck):
        row, col = divmod(index, BOARD_COLS)
        board[row][col] = PieceStack([piece])

    logger.debug("开局发牌完成: %d枚棋子, %dx%d棋盘", len(deck), BOARD_ROWS, BOARD_COLS)

    return GameState(
        board=board,
        players=[PlayerState(), PlayerState()],
        active_player_index=first_player,
    )


def build_deck(entries: List[tuple]) -> List[PieceInstance]:
    """
    由 (ID, 类型, 颜色) 列表构造牌组，便于测试和复盘

    Args:
        entries: [(piece_id, PieceType, Color), ...]
    """
    return [PieceInstance(id=pid, type=PieceType(ptype), color=Color(color)) for pid, ptype, color in entries]
