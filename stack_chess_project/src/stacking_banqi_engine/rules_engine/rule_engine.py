"""
叠子暗棋规则引擎

实现动作分发、连吃状态机、回合切换、胜负判定和合法动作生成。
"""

from typing import List, Optional, Dict, Any

from .pieces import PieceType, STACK_LIMITS
from .stack import PieceStack
from .action import Location, ActionType, CaptureResolution, PlayerAction
from .game_state import GameState, PlayerState, Chaining, RuleViolation, IDLE, is_valid_location
from .interaction import can_capture, can_interact, pattern_for, resolve_interaction
from .stacking import can_stack_on
from .deck import init_game, RandomSource
from .board_validator import BoardValidator
from ..config.game_config import EngineConfig
from ..utils.exceptions import RuleViolationError, ViolationKind
from ..utils.logger import LoggerMixin


def parse_resolution(value: str) -> CaptureResolution:
    """将配置中的结算方式名称转换为枚举"""
    try:
        return CaptureResolution(value.upper())
    except ValueError:
        raise ValueError(f"未知的结算方式: {value}")


class RuleEngine(LoggerMixin):
    """
    叠子暗棋规则引擎

    apply_action 是唯一的状态转换入口：输入状态不会被修改，成功时返回
    推进后的新状态，失败时返回带有 error 的输入副本。
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        """
        初始化规则引擎

        Args:
            config: 引擎配置，None表示使用默认配置
        """
        self.config = config or EngineConfig()
        self.default_resolution = parse_resolution(self.config.default_resolution)
        self.validator = BoardValidator() if self.config.validate_invariants else None

        self._handlers = {
            ActionType.FLIP: self._apply_flip,
            ActionType.MOVE: self._apply_move,
            ActionType.DEPLOY: self._apply_deploy,
            ActionType.RETRIEVE: self._apply_retrieve,
            ActionType.PASS: self._apply_pass,
        }

    def new_game(self, rng: RandomSource = None, deck=None, first_player: int = 0) -> GameState:
        """创建开局状态"""
        return init_game(rng=rng, deck=deck, first_player=first_player)

    # ==================== 状态转换 ====================

    def apply_action(self, state: GameState, action: PlayerAction) -> GameState:
        """
        执行一个玩家动作

        Args:
            state: 当前状态 (不会被修改)
            action: 玩家动作

        Returns:
            GameState: 新状态；动作被拒绝时为输入状态的副本，error 字段说明原因
        """
        new_state = state.copy()
        new_state.error = None

        try:
            self._dispatch(new_state, action)
        except RuleViolationError as e:
            if self.config.log_rejections:
                self.log_debug(f"动作被拒绝: {action.to_notation()} - {e}")
            rejected = state.copy()
            rejected.error = RuleViolation(e.kind, e.reason)
            return rejected

        new_state.last_action = action

        if not new_state.is_chaining:
            self._check_game_over(new_state)

        if self.validator is not None:
            is_valid, errors = self.validator.full_validation(new_state)
            if not is_valid:
                self.log_warning(f"动作 {action.to_notation()} 之后棋局不一致: {errors}")

        return new_state

    def is_legal_action(self, state: GameState, action: PlayerAction) -> bool:
        """
        试执行动作检查其合法性

        Args:
            state: 当前状态
            action: 要检查的动作

        Returns:
            bool: 动作是否会被接受
        """
        return self.apply_action(state, action).error is None

    def _dispatch(self, state: GameState, action: PlayerAction) -> None:
        """校验回合与连吃协议后分发到具体动作处理函数"""
        if state.is_game_over:
            raise RuleViolationError(ViolationKind.TURN, "游戏已结束")
        if action.player_id != state.active_player_index:
            raise RuleViolationError(ViolationKind.TURN, f"不是玩家{action.player_id}的回合")

        chain = state.chain
        if isinstance(chain, Chaining):
            if action.action_type == ActionType.MOVE:
                if not is_valid_location(action.from_pos) or tuple(action.from_pos) != chain.location:
                    raise RuleViolationError(
                        ViolationKind.CHAIN_PROTOCOL,
                        f"连吃状态下只能移动{chain.location}处的棋子"
                    )
            elif action.action_type != ActionType.PASS:
                raise RuleViolationError(
                    ViolationKind.CHAIN_PROTOCOL, "连吃状态下必须继续吃子或跳过"
                )
        elif action.action_type == ActionType.PASS:
            raise RuleViolationError(ViolationKind.CHAIN_PROTOCOL, "没有进行中的连吃, 不能跳过")

        self._handlers[action.action_type](state, action)

    def _end_turn(self, state: GameState) -> None:
        """结束当前回合"""
        state.chain = IDLE
        state.active_player_index = 1 - state.active_player_index
        state.turn_count += 1

    @staticmethod
    def _require_location(loc: Optional[Location], name: str) -> Location:
        if not is_valid_location(loc):
            raise RuleViolationError(ViolationKind.GEOMETRY, f"{name}坐标无效: {loc}")
        return tuple(loc)

    # ==================== 各类动作 ====================

    def _apply_pass(self, state: GameState, action: PlayerAction) -> None:
        """跳过：结束连吃并交换行动方"""
        self._end_turn(state)

    def _apply_flip(self, state: GameState, action: PlayerAction) -> None:
        """翻子：首次翻子决定双方颜色，翻子总是结束回合"""
        loc = self._require_location(action.location, "翻子")
        stack = state.stack_at(loc)
        if stack is None:
            raise RuleViolationError(ViolationKind.TARGET_STATE, f"{loc}没有棋子")
        if stack.top.face_up:
            raise RuleViolationError(ViolationKind.TARGET_STATE, f"{loc}的棋子已翻开")

        piece = stack.top
        piece.face_up = True

        if not state.colors_assigned:
            player = state.players[action.player_id]
            opponent = state.players[1 - action.player_id]
            player.color = piece.color
            opponent.color = piece.color.opposite
            state.colors_assigned = True
            self.log_info(f"玩家{action.player_id}翻出{piece.color.value}, 颜色分配完成")

        self._end_turn(state)

    def _apply_move(self, state: GameState, action: PlayerAction) -> None:
        """移动：落在空格为普通移动，落在有子格为交互"""
        from_pos = self._require_location(action.from_pos, "起点")
        to_pos = self._require_location(action.to_pos, "终点")
        player = state.players[action.player_id]

        if from_pos == to_pos:
            raise RuleViolationError(ViolationKind.TARGET_STATE, "不能原地移动")

        source = state.stack_at(from_pos)
        if source is None:
            raise RuleViolationError(ViolationKind.TARGET_STATE, f"{from_pos}没有棋子")
        if not source.top.face_up:
            raise RuleViolationError(ViolationKind.TARGET_STATE, "不能移动未翻开的棋子")
        if state.colors_assigned and source.top.color != player.color:
            raise RuleViolationError(ViolationKind.TARGET_STATE, "不能移动对方的棋子")

        pattern = pattern_for(state, from_pos, to_pos)
        if not pattern.valid:
            raise RuleViolationError(
                ViolationKind.GEOMETRY,
                f"{source.base_type.value}不能从{from_pos}走到{to_pos}"
            )

        target = state.stack_at(to_pos)
        if target is None:
            if state.is_chaining:
                raise RuleViolationError(ViolationKind.CHAIN_PROTOCOL, "连吃状态下必须吃子或交互")
            if pattern.screens > 0:
                raise RuleViolationError(ViolationKind.GEOMETRY, "炮不能隔子移动到空格")
            state.set_stack(to_pos, source)
            state.set_stack(from_pos, None)
            self._end_turn(state)
            return

        resolution = action.resolution or self.default_resolution
        resolve_interaction(state, player, from_pos, to_pos, resolution, pattern)

        if self.has_chain_options(state, to_pos):
            state.chain = Chaining(to_pos)
            self.log_debug(f"玩家{action.player_id}进入连吃: {to_pos}")
        else:
            self._end_turn(state)

    def _apply_deploy(self, state: GameState, action: PlayerAction) -> None:
        """打入：把手牌中指定类型的棋子放到空格或己方叠子上"""
        destination = self._require_location(action.destination, "打入")
        player = state.players[action.player_id]

        if action.piece_type is None:
            raise RuleViolationError(ViolationKind.RESOURCE, "未指定打入的棋子类型")
        if action.count < 1:
            raise RuleViolationError(ViolationKind.RESOURCE, "打入数量必须至少为1")

        available = [p for p in player.hand if p.type == action.piece_type]
        if len(available) < action.count:
            raise RuleViolationError(
                ViolationKind.RESOURCE,
                f"手牌中{action.piece_type.value}不足: 需要{action.count}, 只有{len(available)}"
            )
        pieces = available[:action.count]

        target = state.stack_at(destination)
        if target is None:
            limit = STACK_LIMITS[action.piece_type]
            if len(pieces) > limit:
                raise RuleViolationError(
                    ViolationKind.STACK_COMPOSITION,
                    f"超出叠子上限: {action.piece_type.value}最多{limit}个"
                )
            state.set_stack(destination, PieceStack(list(pieces)))
        else:
            if not target.top.face_up:
                raise RuleViolationError(ViolationKind.TARGET_STATE, "不能打入到未翻开的棋子上")
            if target.top.color != player.color:
                raise RuleViolationError(ViolationKind.TARGET_STATE, "不能打入到对方叠子上")
            check = can_stack_on(target.pieces, pieces, check_color=True)
            if not check.valid:
                raise RuleViolationError(ViolationKind.STACK_COMPOSITION, f"打入失败: {check.reason}")
            target.pieces.extend(pieces)

        deployed = {id(p) for p in pieces}
        player.hand = [p for p in player.hand if id(p) not in deployed]
        self._end_turn(state)

    def _apply_retrieve(self, state: GameState, action: PlayerAction) -> None:
        """收回：把己方叠子中的指定棋子收回手牌，叠子至少保留一枚"""
        source = self._require_location(action.source, "收回")
        player = state.players[action.player_id]

        stack = state.stack_at(source)
        if stack is None:
            raise RuleViolationError(ViolationKind.TARGET_STATE, f"{source}没有棋子")
        if not stack.top.face_up or stack.top.color != player.color:
            raise RuleViolationError(ViolationKind.TARGET_STATE, "只能收回己方已翻开的叠子")

        piece_ids = list(action.piece_ids)
        if not piece_ids:
            raise RuleViolationError(ViolationKind.RESOURCE, "未指定要收回的棋子")
        if len(set(piece_ids)) != len(piece_ids):
            raise RuleViolationError(ViolationKind.RESOURCE, "收回的棋子ID重复")

        stack_ids = set(stack.piece_ids())
        for piece_id in piece_ids:
            if piece_id not in stack_ids:
                raise RuleViolationError(ViolationKind.RESOURCE, f"棋子{piece_id}不在该叠子中")

        if len(stack) - len(piece_ids) < 1:
            raise RuleViolationError(ViolationKind.STACK_COMPOSITION, "叠子中至少要保留一枚棋子")

        wanted = set(piece_ids)
        for piece in stack.pieces:
            if piece.id in wanted:
                piece.color = player.color
                player.hand.append(piece)
        stack.pieces = [p for p in stack.pieces if p.id not in wanted]
        self._end_turn(state)

    # ==================== 连吃与胜负 ====================

    def has_chain_options(self, state: GameState, loc: Location) -> bool:
        """
        检查 loc 处的叠子是否还能与任何已翻开的叠子交互

        Args:
            state: 当前状态
            loc: 刚完成交互的落点

        Returns:
            bool: 是否存在可继续的交互
        """
        if state.stack_at(loc) is None:
            return False
        for target_loc, target in state.iter_stacks():
            if target_loc == loc or not target.top.face_up:
                continue
            if can_interact(state, loc, target_loc):
                return True
        return False

    def _check_game_over(self, state: GameState) -> None:
        """为即将行动的玩家检查全灭和无子可动"""
        next_index = state.active_player_index
        next_color = state.players[next_index].color

        if (state.colors_assigned and state.all_revealed()
                and not state.stacks_controlled_by(next_color)):
            state.is_game_over = True
            state.winner = 1 - next_index
            self.log_info(f"玩家{next_index}棋盘上已无棋子, 玩家{state.winner}获胜")
            return

        if not self.get_legal_actions(state, next_index):
            state.is_game_over = True
            state.winner = 1 - next_index
            self.log_info(f"玩家{next_index}无合法动作, 玩家{state.winner}获胜")

    # ==================== 合法动作生成 ====================

    def get_legal_actions(self, state: GameState, player_index: int) -> List[PlayerAction]:
        """
        生成指定玩家的所有合法动作

        Args:
            state: 当前状态
            player_index: 玩家索引

        Returns:
            List[PlayerAction]: 合法动作列表 (顺序无意义)
        """
        if state.is_game_over:
            return []

        player = state.players[player_index]

        if isinstance(state.chain, Chaining):
            loc = state.chain.location
            actions = [PlayerAction.pass_turn(player_index)]
            source = state.stack_at(loc)
            if source is None:
                return actions
            for target_loc, target in state.iter_stacks():
                if target_loc == loc or not target.top.face_up:
                    continue
                if can_interact(state, loc, target_loc):
                    actions.extend(self._interaction_actions(player_index, loc, target_loc, source, target))
            return actions

        actions: List[PlayerAction] = []
        hand_types = self._hand_types(player)

        for loc, stack in state.iter_cells():
            if stack is None:
                for piece_type in hand_types:
                    actions.append(PlayerAction.deploy(player_index, piece_type, 1, loc))
                continue

            if not stack.top.face_up:
                actions.append(PlayerAction.flip(player_index, loc))
                continue

            if not state.colors_assigned or stack.top.color != player.color:
                continue

            if len(stack) > 1:
                actions.append(PlayerAction.retrieve(player_index, loc, [stack.top.id]))

            actions.extend(self._move_actions(state, player_index, loc, stack))

            for piece_type in hand_types:
                sample = next(p for p in player.hand if p.type == piece_type)
                if can_stack_on(stack.pieces, [sample], check_color=True):
                    actions.append(PlayerAction.deploy(player_index, piece_type, 1, loc))

        return actions

    def _move_actions(self, state: GameState, player_index: int, loc: Location,
                      stack: PieceStack) -> List[PlayerAction]:
        """生成某个己方叠子的全部移动与交互动作"""
        actions = []
        for target_loc, target in state.iter_cells():
            if target_loc == loc:
                continue
            pattern = pattern_for(state, loc, target_loc)
            if not pattern.valid:
                continue

            if target is None:
                if pattern.screens == 0:
                    actions.append(PlayerAction.move(player_index, loc, target_loc))
                continue

            if not target.top.face_up:
                continue
            if can_capture(stack, target, pattern.screens):
                actions.extend(self._interaction_actions(player_index, loc, target_loc, stack, target))
        return actions

    @staticmethod
    def _interaction_actions(player_index: int, from_pos: Location, to_pos: Location,
                             source: PieceStack, target: PieceStack) -> List[PlayerAction]:
        """按两种结算方式生成交互动作"""
        actions = [PlayerAction.move(player_index, from_pos, to_pos, CaptureResolution.TO_HAND)]
        friendly = source.top.color == target.top.color
        if can_stack_on(target.pieces, source.pieces, check_color=friendly):
            actions.append(
                PlayerAction.move(player_index, from_pos, to_pos, CaptureResolution.STACK_IF_POSSIBLE)
            )
        return actions

    @staticmethod
    def _hand_types(player: PlayerState) -> List[PieceType]:
        """手牌中出现的棋子类型 (保持首次出现的顺序)"""
        types: List[PieceType] = []
        for piece in player.hand:
            if piece.type not in types:
                types.append(piece.type)
        return types

    # ==================== 状态查询 ====================

    def get_game_status(self, state: GameState) -> Dict[str, Any]:
        """
        获取游戏状态摘要

        Args:
            state: 当前状态

        Returns:
            Dict[str, Any]: 状态信息
        """
        active = state.active_player_index
        legal_actions = self.get_legal_actions(state, active)
        return {
            'active_player': active,
            'active_color': state.players[active].color.value,
            'turn_count': state.turn_count,
            'colors_assigned': state.colors_assigned,
            'chaining': state.is_chaining,
            'pending_chain_capture': state.pending_chain_capture,
            'game_over': state.is_game_over,
            'winner': state.winner,
            'legal_actions_count': len(legal_actions),
            'legal_actions': legal_actions,
            'board_pieces': state.board_piece_count(),
            'hand_pieces': [len(p.hand) for p in state.players],
        }


# 模块级默认引擎，供外部协作方直接调用
_default_engine = RuleEngine()


def apply_action(state: GameState, action: PlayerAction) -> GameState:
    """使用默认引擎执行动作"""
    return _default_engine.apply_action(state, action)


def get_legal_actions(state: GameState, player_index: int) -> List[PlayerAction]:
    """使用默认引擎生成合法动作"""
    return _default_engine.get_legal_actions(state, player_index)
