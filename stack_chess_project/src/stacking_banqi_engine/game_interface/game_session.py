"""
游戏接口和会话管理

提供对局会话管理功能，包括状态跟踪、动作历史、悔棋、提示和回合上限。
"""

import json
import threading
import uuid
import logging
from datetime import datetime
from enum import Enum
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Tuple, Union

from ..config.game_config import GameConfig, EngineConfig
from ..rules_engine import GameState, PlayerAction, RuleEngine, init_game
from ..utils.exceptions import SessionError


class SessionStatus(Enum):
    """会话状态枚举"""
    PLAYING = "playing"         # 对局进行中
    FINISHED = "finished"       # 已结束


class GameResult(Enum):
    """游戏结果枚举"""
    ONGOING = "ongoing"         # 进行中
    PLAYER0_WIN = "player0_win"
    PLAYER1_WIN = "player1_win"
    DRAW = "draw"               # 达到回合上限


@dataclass
class ActionRecord:
    """动作记录"""
    action: PlayerAction
    player: int
    turn: int                   # 执行前的回合数
    timestamp: datetime
    accepted: bool
    error: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return {
            'action': self.action.to_dict(),
            'player': self.player,
            'turn': self.turn,
            'timestamp': self.timestamp.isoformat(),
            'accepted': self.accepted,
            'error': self.error
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ActionRecord':
        """从字典创建"""
        return cls(
            action=PlayerAction.from_dict(data['action']),
            player=data['player'],
            turn=data['turn'],
            timestamp=datetime.fromisoformat(data['timestamp']),
            accepted=data['accepted'],
            error=data.get('error', '')
        )


@dataclass
class GameSession:
    """
    游戏会话

    持有当前状态和历史快照。所有修改都在会话锁内进行，规则引擎本身
    不保存任何状态。
    """
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    config: GameConfig = field(default_factory=GameConfig)
    engine: RuleEngine = field(default_factory=RuleEngine)
    state: Optional[GameState] = None

    status: SessionStatus = SessionStatus.PLAYING
    result: GameResult = GameResult.ONGOING

    history: List[ActionRecord] = field(default_factory=list)
    snapshots: List[GameState] = field(default_factory=list)

    created_at: datetime = field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None

    def __post_init__(self):
        """初始化后处理"""
        self._lock = threading.Lock()
        self.logger = logging.getLogger(__name__)
        if self.state is None:
            self.state = init_game(rng=self.config.seed, first_player=self.config.first_player)

    def submit(self, action: Union[PlayerAction, Dict[str, Any]]) -> Tuple[bool, str]:
        """
        提交一个动作

        Args:
            action: 玩家动作 (PlayerAction 或字典)

        Returns:
            (是否成功, 错误信息)
        """
        if isinstance(action, dict):
            action = PlayerAction.from_dict(action)

        with self._lock:
            if self.status != SessionStatus.PLAYING:
                return False, f"会话状态错误: {self.status.value}"

            previous = self.state
            new_state = self.engine.apply_action(previous, action)
            accepted = new_state.error is None
            error = "" if accepted else str(new_state.error)

            if self.config.record_history:
                self.history.append(ActionRecord(
                    action=action,
                    player=action.player_id,
                    turn=previous.turn_count,
                    timestamp=datetime.now(),
                    accepted=accepted,
                    error=error
                ))

            if not accepted:
                self.logger.debug(f"会话 {self.session_id} 拒绝动作: {error}")
                return False, error

            self.snapshots.append(previous)
            self.state = new_state
            self._check_finished()
            return True, ""

    def hints(self) -> List[PlayerAction]:
        """当前行动方的合法动作"""
        with self._lock:
            if self.status != SessionStatus.PLAYING:
                return []
            return self.engine.get_legal_actions(self.state, self.state.active_player_index)

    def undo(self) -> bool:
        """
        悔棋：恢复到上一个被接受动作之前的状态

        Returns:
            是否成功撤销
        """
        with self._lock:
            if not self.config.allow_undo or not self.snapshots:
                return False

            self.state = self.snapshots.pop()
            for index in range(len(self.history) - 1, -1, -1):
                if self.history[index].accepted:
                    del self.history[index:]
                    break

            if self.status == SessionStatus.FINISHED:
                self.status = SessionStatus.PLAYING
                self.result = GameResult.ONGOING
                self.finished_at = None

            self.logger.debug(f"会话 {self.session_id} 悔棋, 回合: {self.state.turn_count}")
            return True

    def _check_finished(self) -> None:
        """检查游戏结束条件"""
        if self.state.is_game_over:
            self.status = SessionStatus.FINISHED
            self.result = (GameResult.PLAYER0_WIN if self.state.winner == 0
                           else GameResult.PLAYER1_WIN)
        elif (self.config.max_turns > 0 and self.state.turn_count >= self.config.max_turns
              and not self.state.is_chaining):
            self.status = SessionStatus.FINISHED
            self.result = GameResult.DRAW
        else:
            return

        self.finished_at = datetime.now()
        self.logger.info(f"会话 {self.session_id} 结束: {self.result.value}")

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return {
            'session_id': self.session_id,
            'config': {
                'seed': self.config.seed,
                'first_player': self.config.first_player,
                'max_turns': self.config.max_turns,
                'record_history': self.config.record_history,
                'allow_undo': self.config.allow_undo
            },
            'state': self.state.to_dict(),
            'status': self.status.value,
            'result': self.result.value,
            'history': [record.to_dict() for record in self.history],
            'created_at': self.created_at.isoformat(),
            'finished_at': self.finished_at.isoformat() if self.finished_at else None
        }


class GameManager:
    """会话管理器"""

    def __init__(self, engine_config: Optional[EngineConfig] = None,
                 save_directory: Optional[str] = None):
        """
        初始化会话管理器

        Args:
            engine_config: 各会话共享的引擎配置
            save_directory: 对局记录保存目录，None表示不保存
        """
        self.logger = logging.getLogger(__name__)
        self.engine = RuleEngine(engine_config)
        self.sessions: Dict[str, GameSession] = {}
        self._lock = threading.Lock()

        self.save_directory = Path(save_directory) if save_directory else None
        if self.save_directory is not None:
            self.save_directory.mkdir(parents=True, exist_ok=True)

    def create_session(self, config: Optional[GameConfig] = None) -> str:
        """
        创建新的对局会话

        Args:
            config: 对局配置

        Returns:
            会话ID
        """
        session = GameSession(config=config or GameConfig(), engine=self.engine)
        with self._lock:
            self.sessions[session.session_id] = session
        self.logger.info(f"创建新会话: {session.session_id}")
        return session.session_id

    def get_session(self, session_id: str) -> GameSession:
        """获取会话，不存在时抛出 SessionError"""
        with self._lock:
            session = self.sessions.get(session_id)
        if session is None:
            raise SessionError(session_id, "会话不存在")
        return session

    def submit_action(self, session_id: str,
                      action: Union[PlayerAction, Dict[str, Any]]) -> Tuple[bool, str]:
        """向指定会话提交动作"""
        return self.get_session(session_id).submit(action)

    def get_hints(self, session_id: str) -> List[PlayerAction]:
        """获取指定会话当前行动方的合法动作"""
        return self.get_session(session_id).hints()

    def undo(self, session_id: str) -> bool:
        """悔棋"""
        return self.get_session(session_id).undo()

    def save_session(self, session_id: str) -> Path:
        """
        将会话记录保存为JSON文件

        Returns:
            保存的文件路径
        """
        if self.save_directory is None:
            raise SessionError(session_id, "未配置保存目录")

        session = self.get_session(session_id)
        path = self.save_directory / f"{session_id}.json"
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(session.to_dict(), f, ensure_ascii=False, indent=2)

        self.logger.info(f"会话已保存: {path}")
        return path

    def close_session(self, session_id: str) -> bool:
        """
        关闭会话

        Returns:
            会话是否存在
        """
        with self._lock:
            session = self.sessions.pop(session_id, None)
        if session is None:
            return False
        self.logger.info(f"关闭会话: {session_id}")
        return True

    def list_sessions(self) -> List[Dict[str, Any]]:
        """列出所有会话的摘要"""
        with self._lock:
            sessions = list(self.sessions.values())
        return [
            {
                'session_id': s.session_id,
                'status': s.status.value,
                'result': s.result.value,
                'turn_count': s.state.turn_count,
                'active_player': s.state.active_player_index,
                'created_at': s.created_at.isoformat()
            }
            for s in sessions
        ]
