"""
棋局合法性验证器

检查棋子守恒、叠子构成、ID唯一性、暗子位置以及连吃状态等不变量。
"""

from collections import Counter
from typing import List, Tuple, Dict, Any

import numpy as np

from .pieces import Color, PieceType, INITIAL_PIECE_COUNTS, TOTAL_PIECES
from .game_state import GameState, BOARD_ROWS, BOARD_COLS, is_valid_location


class BoardValidator:
    """
    棋局合法性验证器

    每项检查返回 (是否合法, 错误信息列表)，不会修改状态。
    """

    def __init__(self):
        """初始化验证器"""
        # 双方合计的各类型棋子数量
        self.type_totals = {
            piece_type: 2 * count for piece_type, count in INITIAL_PIECE_COUNTS.items()
        }

    def validate_board_structure(self, state: GameState) -> Tuple[bool, List[str]]:
        """
        验证棋盘基本结构

        Args:
            state: 要验证的状态

        Returns:
            Tuple[bool, List[str]]: (是否合法, 错误信息列表)
        """
        errors = []

        if len(state.board) != BOARD_ROWS or any(len(row) != BOARD_COLS for row in state.board):
            errors.append(f"棋盘尺寸错误, 应为({BOARD_ROWS}, {BOARD_COLS})")
            return False, errors

        matrix = state.to_matrix()
        if matrix.shape != (2, BOARD_ROWS, BOARD_COLS):
            errors.append(f"矩阵尺寸错误: {matrix.shape}")
        if np.any(matrix[0] < 0):
            errors.append("存在负重量的格子")
        if int(matrix[0].sum()) != state.board_piece_count():
            errors.append("矩阵重量之和与棋盘棋子数不一致")

        for loc, stack in state.iter_cells():
            if stack is not None and not stack.pieces:
                errors.append(f"{loc}存在空叠子")

        if state.active_player_index not in (0, 1):
            errors.append(f"当前玩家值错误: {state.active_player_index}, 应为0或1")

        return len(errors) == 0, errors

    def validate_piece_counts(self, state: GameState) -> Tuple[bool, List[str]]:
        """
        验证棋子守恒：棋盘与手牌合计32枚，各类型数量不变

        Args:
            state: 要验证的状态

        Returns:
            Tuple[bool, List[str]]: (是否合法, 错误信息列表)
        """
        errors = []

        total = state.total_piece_count()
        if total != TOTAL_PIECES:
            errors.append(f"棋子总数错误: {total}, 应为{TOTAL_PIECES}")

        type_counts = Counter()
        for _, stack in state.iter_stacks():
            type_counts.update(p.type for p in stack.pieces)
        for player in state.players:
            type_counts.update(p.type for p in player.hand)

        for piece_type, expected in self.type_totals.items():
            actual = type_counts.get(piece_type, 0)
            if actual != expected:
                errors.append(f"{piece_type.value}数量错误: {actual}, 应为{expected}")

        return len(errors) == 0, errors

    def validate_unique_ids(self, state: GameState) -> Tuple[bool, List[str]]:
        """验证每个棋子ID只出现一次"""
        ids = []
        for _, stack in state.iter_stacks():
            ids.extend(stack.piece_ids())
        for player in state.players:
            ids.extend(p.id for p in player.hand)

        duplicates = sorted(piece_id for piece_id, n in Counter(ids).items() if n > 1)
        errors = [f"棋子ID重复: {piece_id}" for piece_id in duplicates]
        return len(errors) == 0, errors

    def validate_stacks(self, state: GameState) -> Tuple[bool, List[str]]:
        """
        验证叠子构成：数量上限、类型兼容和暗子位置

        Args:
            state: 要验证的状态

        Returns:
            Tuple[bool, List[str]]: (是否合法, 错误信息列表)
        """
        errors = []

        for loc, stack in state.iter_stacks():
            if len(stack) > stack.limit:
                errors.append(
                    f"{loc}超出叠子上限: {stack.base_type.value}最多{stack.limit}个, 实际{len(stack)}个"
                )

            base = stack.base_type
            for piece in stack.pieces:
                if piece.type not in (base, PieceType.GENERAL):
                    errors.append(f"{loc}叠子类型不符: 基础类型{base.value}, 含有{piece.type.value}")
                    break

            if any(not p.face_up for p in stack.pieces) and len(stack) != 1:
                errors.append(f"{loc}暗子不能处于叠子中")

        for index, player in enumerate(state.players):
            if any(not p.face_up for p in player.hand):
                errors.append(f"玩家{index}手牌中有暗子")

        return len(errors) == 0, errors

    def validate_players(self, state: GameState) -> Tuple[bool, List[str]]:
        """验证颜色分配"""
        errors = []
        first, second = state.players

        if state.colors_assigned:
            if first.color == Color.UNKNOWN or second.color != first.color.opposite:
                errors.append(f"玩家颜色分配错误: {first.color.value}, {second.color.value}")
            for index, player in enumerate(state.players):
                for piece in player.hand:
                    if piece.color != player.color:
                        errors.append(f"玩家{index}手牌中的棋子{piece.id}颜色为{piece.color.value}")
        else:
            if first.color != Color.UNKNOWN or second.color != Color.UNKNOWN:
                errors.append("颜色尚未分配, 玩家颜色应为UNKNOWN")
            if any(p.face_up for _, stack in state.iter_stacks() for p in stack.pieces):
                errors.append("颜色尚未分配, 棋盘上不应有已翻开的棋子")
            if state.hand_piece_count():
                errors.append("颜色尚未分配, 手牌应为空")

        return len(errors) == 0, errors

    def validate_chain_state(self, state: GameState) -> Tuple[bool, List[str]]:
        """验证连吃位置由当前玩家的已翻开叠子占据"""
        errors = []
        loc = state.pending_chain_capture
        if loc is None:
            return True, errors

        if not is_valid_location(loc):
            errors.append(f"连吃位置无效: {loc}")
            return False, errors

        stack = state.stack_at(loc)
        if stack is None:
            errors.append(f"连吃位置{loc}没有棋子")
        elif not stack.top.face_up or stack.top.color != state.active_player.color:
            errors.append(f"连吃位置{loc}不是当前玩家的叠子")

        if state.is_game_over:
            errors.append("游戏已结束但仍处于连吃状态")

        return len(errors) == 0, errors

    def _validations(self):
        return {
            'structure': self.validate_board_structure,
            'piece_counts': self.validate_piece_counts,
            'unique_ids': self.validate_unique_ids,
            'stacks': self.validate_stacks,
            'players': self.validate_players,
            'chain_state': self.validate_chain_state,
        }

    def full_validation(self, state: GameState) -> Tuple[bool, List[str]]:
        """
        完整的棋局验证

        Args:
            state: 要验证的状态

        Returns:
            Tuple[bool, List[str]]: (是否合法, 所有错误信息列表)
        """
        all_errors = []
        for validation_func in self._validations().values():
            _, errors = validation_func(state)
            all_errors.extend(errors)
        return len(all_errors) == 0, all_errors

    def get_validation_report(self, state: GameState) -> Dict[str, Any]:
        """
        获取详细的验证报告

        Args:
            state: 要验证的状态

        Returns:
            Dict[str, Any]: 验证报告
        """
        report = {
            'overall_valid': True,
            'total_errors': 0,
            'validations': {}
        }

        for test_name, test_func in self._validations().items():
            is_valid, errors = test_func(state)
            report['validations'][test_name] = {
                'valid': is_valid,
                'errors': errors,
                'error_count': len(errors)
            }
            if not is_valid:
                report['overall_valid'] = False
                report['total_errors'] += len(errors)

        return report
