"""
测试棋子与叠子数据结构

测试棋子属性、基础类型计算、重量和序列化。
"""

import pytest

from stack_chess_project.src.stacking_banqi_engine.rules_engine import (
    Color, PieceType, PieceInstance, PieceStack, PIECE_RANKS, STACK_LIMITS, TOTAL_PIECES,
    base_type, top_piece, weight
)
from stack_chess_project.src.stacking_banqi_engine.rules_engine.pieces import INITIAL_PIECE_COUNTS


def piece(pid, piece_type, color=Color.RED, face_up=True):
    return PieceInstance(id=pid, type=piece_type, color=color, face_up=face_up)


class TestPieceConstants:
    """测试棋子常量"""

    def test_ranks(self):
        """测试等级顺序"""
        assert PIECE_RANKS[PieceType.GENERAL] == 6
        assert PIECE_RANKS[PieceType.ADVISOR] == 5
        assert PIECE_RANKS[PieceType.ELEPHANT] == 4
        assert PIECE_RANKS[PieceType.CHARIOT] == 3
        assert PIECE_RANKS[PieceType.HORSE] == 2
        assert PIECE_RANKS[PieceType.CANNON] == 1
        assert PIECE_RANKS[PieceType.SOLDIER] == 0

    def test_stack_limits(self):
        """测试叠子上限"""
        assert STACK_LIMITS[PieceType.GENERAL] == 2
        assert STACK_LIMITS[PieceType.SOLDIER] == 12
        for piece_type in (PieceType.ADVISOR, PieceType.ELEPHANT, PieceType.CHARIOT,
                           PieceType.HORSE, PieceType.CANNON):
            assert STACK_LIMITS[piece_type] == 6

    def test_piece_counts(self):
        """测试每方16枚、共32枚"""
        assert sum(INITIAL_PIECE_COUNTS.values()) == 16
        assert TOTAL_PIECES == 32

    def test_color_opposite(self):
        """测试对方颜色"""
        assert Color.RED.opposite == Color.BLACK
        assert Color.BLACK.opposite == Color.RED
        assert Color.UNKNOWN.opposite == Color.UNKNOWN


class TestPieceInstance:
    """测试棋子实例"""

    def test_rank_and_name(self):
        """测试等级和显示名称"""
        general = piece("g", PieceType.GENERAL, Color.BLACK)
        assert general.rank == 6
        assert general.display_name == "将"
        assert piece("s", PieceType.SOLDIER).display_name == "兵"

    def test_dict_conversion(self):
        """测试字典转换"""
        original = piece("abc", PieceType.HORSE, Color.BLACK, face_up=False)
        data = original.to_dict()
        assert data == {'id': 'abc', 'type': 'HORSE', 'color': 'BLACK', 'face_up': False}
        assert PieceInstance.from_dict(data) == original


class TestPieceStack:
    """测试叠子"""

    def test_top_and_weight(self):
        """测试顶部棋子和重量"""
        stack = PieceStack([piece("a", PieceType.SOLDIER), piece("b", PieceType.GENERAL)])
        assert stack.top.id == "b"
        assert stack.weight == 2
        assert len(stack) == 2
        assert stack.piece_ids() == ["a", "b"]

    def test_base_type_skips_generals(self):
        """测试基础类型为自底向上第一个非帅/将棋子"""
        pieces = [piece("g", PieceType.GENERAL), piece("c", PieceType.CHARIOT),
                  piece("g2", PieceType.GENERAL, Color.BLACK)]
        assert base_type(pieces) == PieceType.CHARIOT
        assert PieceStack(pieces).limit == 6

    def test_base_type_all_generals(self):
        """测试全部为帅/将时基础类型为帅/将"""
        pieces = [piece("g", PieceType.GENERAL), piece("g2", PieceType.GENERAL, Color.BLACK)]
        assert base_type(pieces) == PieceType.GENERAL
        assert PieceStack(pieces).limit == 2

    def test_base_type_empty(self):
        """测试空叠子没有基础类型"""
        with pytest.raises(ValueError):
            base_type([])

    def test_helpers_on_empty_cell(self):
        """测试空格子的辅助函数"""
        assert top_piece(None) is None
        assert weight(None) == 0
        stack = PieceStack([piece("a", PieceType.CANNON)])
        assert top_piece(stack).id == "a"
        assert weight(stack) == 1

    def test_stack_dict_conversion(self):
        """测试叠子字典转换"""
        stack = PieceStack([piece("a", PieceType.SOLDIER), piece("b", PieceType.SOLDIER, Color.BLACK)])
        restored = PieceStack.from_dict(stack.to_dict())
        assert restored == stack
