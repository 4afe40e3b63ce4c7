"""
测试游戏状态数据结构

测试状态查询、矩阵表示、可视化和序列化。
"""

import numpy as np

from stack_chess_project.src.stacking_banqi_engine.rules_engine import (
    Color, PieceType, PieceInstance, PieceStack, GameState, PlayerState, PlayerAction,
    Chaining, RuleViolation, IDLE, is_valid_location, init_game
)
from stack_chess_project.src.stacking_banqi_engine.rules_engine.game_state import empty_board, HIDDEN_CODE
from stack_chess_project.src.stacking_banqi_engine.utils import ViolationKind


class TestGameState:
    """测试 GameState"""

    def setup_method(self):
        """每个测试方法前的设置"""
        board = empty_board()
        board[0][0] = PieceStack([
            PieceInstance("r1", PieceType.SOLDIER, Color.RED, True),
            PieceInstance("r2", PieceType.SOLDIER, Color.RED, True),
        ])
        board[1][2] = PieceStack([PieceInstance("b1", PieceType.GENERAL, Color.BLACK, True)])
        board[3][7] = PieceStack([PieceInstance("x", PieceType.HORSE, Color.BLACK, False)])
        players = [PlayerState(Color.RED, [PieceInstance("h", PieceType.CANNON, Color.RED, True)]),
                   PlayerState(Color.BLACK)]
        self.state = GameState(board=board, players=players, colors_assigned=True, turn_count=5)

    def test_location_validity(self):
        """测试坐标检查"""
        assert is_valid_location((0, 0))
        assert is_valid_location((3, 7))
        assert not is_valid_location((4, 0))
        assert not is_valid_location((0, -1))
        assert not is_valid_location(None)

    def test_counts(self):
        """测试棋子统计"""
        assert self.state.board_piece_count() == 4
        assert self.state.hand_piece_count() == 1
        assert self.state.total_piece_count() == 5
        assert self.state.players[0].hand_count() == 1
        assert self.state.players[0].hand_count(PieceType.SOLDIER) == 0

    def test_control_and_reveal(self):
        """测试控制叠子与翻开状态"""
        assert self.state.stacks_controlled_by(Color.RED) == [(0, 0)]
        assert self.state.stacks_controlled_by(Color.BLACK) == [(1, 2)]
        assert not self.state.all_revealed()

    def test_find_piece(self):
        """测试查找棋子"""
        assert self.state.find_piece("r2") == ('board', (0, 0))
        assert self.state.find_piece("h") == ('hand', 0)
        assert self.state.find_piece("none") is None

    def test_set_stack_removes_empty(self):
        """测试空叠子会被移除"""
        self.state.set_stack((0, 0), PieceStack([]))
        assert self.state.stack_at((0, 0)) is None

    def test_chain_properties(self):
        """测试连吃属性"""
        assert self.state.chain == IDLE
        assert self.state.pending_chain_capture is None
        self.state.chain = Chaining((0, 0))
        assert self.state.is_chaining
        assert self.state.pending_chain_capture == (0, 0)

    def test_to_matrix(self):
        """测试矩阵表示"""
        matrix = self.state.to_matrix()
        assert matrix.shape == (2, 4, 8)
        assert matrix[0, 0, 0] == 2
        assert matrix[1, 0, 0] == 1            # 红兵 等级0 -> 1
        assert matrix[1, 1, 2] == -7           # 黑将 等级6 -> -7
        assert matrix[1, 3, 7] == HIDDEN_CODE
        assert int(np.sum(matrix[0])) == 4

    def test_visual_string(self):
        """测试可视化字符串"""
        text = self.state.to_visual_string()
        assert "##" in text
        assert "r兵2" in text
        assert "b将1" in text
        assert str(self.state) == text

    def test_copy_is_deep(self):
        """测试深拷贝"""
        copied = self.state.copy()
        copied.board[0][0].pieces.pop()
        copied.players[0].hand.clear()
        assert len(self.state.stack_at((0, 0))) == 2
        assert len(self.state.players[0].hand) == 1

    def test_json_round_trip(self):
        """测试JSON序列化保留连吃、错误和最后动作"""
        self.state.chain = Chaining((0, 0))
        self.state.error = RuleViolation(ViolationKind.RESOURCE, "手牌不足")
        self.state.last_action = PlayerAction.move(0, (1, 0), (0, 0))

        restored = GameState.from_json(self.state.to_json())
        assert restored.to_dict() == self.state.to_dict()
        assert restored.chain == Chaining((0, 0))
        assert restored.error.kind == ViolationKind.RESOURCE
        assert restored.last_action == self.state.last_action

    def test_initial_state_dict(self):
        """测试开局状态字典"""
        data = init_game(rng=1).to_dict()
        assert data['pending_chain_capture'] is None
        assert data['error'] is None
        assert len(data['board']) == 4
        assert all(len(row) == 8 for row in data['board'])
