"""
对局会话测试

测试会话的动作提交、历史记录、悔棋、回合上限和会话管理。
"""

import json
import tempfile
import threading
from pathlib import Path

import pytest

from stack_chess_project.src.stacking_banqi_engine.config import GameConfig
from stack_chess_project.src.stacking_banqi_engine.game_interface import (
    GameSession, GameManager, SessionStatus, GameResult, ActionRecord
)
from stack_chess_project.src.stacking_banqi_engine.rules_engine import PlayerAction, ActionType
from stack_chess_project.src.stacking_banqi_engine.utils import SessionError


class TestGameSession:
    """测试 GameSession"""

    def setup_method(self):
        """每个测试方法前的设置"""
        self.session = GameSession(config=GameConfig(seed=42))

    def test_session_creation(self):
        """测试会话创建"""
        assert self.session.session_id
        assert self.session.status == SessionStatus.PLAYING
        assert self.session.result == GameResult.ONGOING
        assert self.session.state.board_piece_count() == 32
        assert self.session.history == []

    def test_seed_reproducible(self):
        """测试相同种子的会话开局相同"""
        other = GameSession(config=GameConfig(seed=42))
        assert other.state.to_dict() == self.session.state.to_dict()

    def test_submit_accepted(self):
        """测试提交合法动作"""
        ok, error = self.session.submit(PlayerAction.flip(0, (0, 0)))
        assert ok
        assert error == ""
        assert self.session.state.active_player_index == 1
        assert len(self.session.history) == 1
        assert self.session.history[0].accepted

    def test_submit_rejected(self):
        """测试提交非法动作"""
        before = self.session.state
        ok, error = self.session.submit(PlayerAction.flip(1, (0, 0)))
        assert not ok
        assert "TURN_VIOLATION" in error
        assert self.session.state is before
        assert not self.session.history[-1].accepted

    def test_submit_dict(self):
        """测试以字典提交动作"""
        ok, _ = self.session.submit(PlayerAction.flip(0, (2, 3)).to_dict())
        assert ok

    def test_hints(self):
        """测试提示"""
        hints = self.session.hints()
        assert len(hints) == 32
        assert all(h.action_type == ActionType.FLIP for h in hints)

    def test_undo(self):
        """测试悔棋"""
        initial = self.session.state.to_dict()
        self.session.submit(PlayerAction.flip(0, (0, 0)))
        self.session.submit(PlayerAction.flip(0, (0, 1)))  # 被拒绝
        assert self.session.undo()
        assert self.session.state.to_dict() == initial
        assert self.session.history == []
        assert not self.session.undo()

    def test_undo_disabled(self):
        """测试禁止悔棋"""
        session = GameSession(config=GameConfig(seed=1, allow_undo=False))
        session.submit(PlayerAction.flip(0, (0, 0)))
        assert not session.undo()

    def test_max_turns_draw(self):
        """测试达到回合上限时和棋"""
        session = GameSession(config=GameConfig(seed=3, max_turns=2))
        session.submit(PlayerAction.flip(0, (0, 0)))
        assert session.status == SessionStatus.PLAYING
        session.submit(PlayerAction.flip(1, (0, 1)))
        assert session.status == SessionStatus.FINISHED
        assert session.result == GameResult.DRAW
        assert session.finished_at is not None

        ok, error = session.submit(PlayerAction.flip(0, (0, 2)))
        assert not ok
        assert session.hints() == []

        assert session.undo()
        assert session.status == SessionStatus.PLAYING
        assert session.result == GameResult.ONGOING

    def test_history_disabled(self):
        """测试不记录历史"""
        session = GameSession(config=GameConfig(seed=1, record_history=False))
        session.submit(PlayerAction.flip(0, (0, 0)))
        assert session.history == []

    def test_to_dict(self):
        """测试转换为字典"""
        self.session.submit(PlayerAction.flip(0, (0, 0)))
        data = self.session.to_dict()
        assert data['session_id'] == self.session.session_id
        assert data['status'] == 'playing'
        assert data['config']['seed'] == 42
        assert len(data['history']) == 1
        json.dumps(data, ensure_ascii=False)

        record = ActionRecord.from_dict(data['history'][0])
        assert record.action == PlayerAction.flip(0, (0, 0))

    def test_concurrent_submissions(self):
        """测试并发提交时只有一个动作被接受"""
        results = []

        def worker(col):
            results.append(self.session.submit(PlayerAction.flip(0, (0, col))))

        threads = [threading.Thread(target=worker, args=(col,)) for col in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sum(1 for ok, _ in results if ok) == 1
        assert self.session.state.turn_count == 1


class TestGameManager:
    """测试 GameManager"""

    def setup_method(self):
        """每个测试方法前的设置"""
        self.temp_dir = tempfile.TemporaryDirectory()
        self.manager = GameManager(save_directory=self.temp_dir.name)

    def teardown_method(self):
        """每个测试方法后的清理"""
        self.temp_dir.cleanup()

    def test_create_and_get(self):
        """测试创建与获取会话"""
        session_id = self.manager.create_session(GameConfig(seed=5))
        session = self.manager.get_session(session_id)
        assert session.session_id == session_id
        assert session.engine is self.manager.engine

    def test_unknown_session(self):
        """测试获取不存在的会话"""
        with pytest.raises(SessionError):
            self.manager.get_session("missing")
        with pytest.raises(SessionError):
            self.manager.submit_action("missing", PlayerAction.flip(0, (0, 0)))

    def test_submit_and_hints(self):
        """测试提交动作和提示"""
        session_id = self.manager.create_session(GameConfig(seed=5))
        ok, _ = self.manager.submit_action(session_id, PlayerAction.flip(0, (1, 1)))
        assert ok
        hints = self.manager.get_hints(session_id)
        assert all(h.player_id == 1 for h in hints)
        assert self.manager.undo(session_id)

    def test_list_and_close(self):
        """测试列出与关闭会话"""
        first = self.manager.create_session()
        second = self.manager.create_session()
        listed = {s['session_id'] for s in self.manager.list_sessions()}
        assert listed == {first, second}

        assert self.manager.close_session(first)
        assert not self.manager.close_session(first)
        assert [s['session_id'] for s in self.manager.list_sessions()] == [second]

    def test_save_session(self):
        """测试保存会话记录"""
        session_id = self.manager.create_session(GameConfig(seed=8))
        self.manager.submit_action(session_id, PlayerAction.flip(0, (0, 0)))
        path = self.manager.save_session(session_id)
        assert path == Path(self.temp_dir.name) / f"{session_id}.json"

        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        assert data['session_id'] == session_id
        assert data['state']['turn_count'] == 1

    def test_save_without_directory(self):
        """测试未配置保存目录"""
        manager = GameManager()
        session_id = manager.create_session()
        with pytest.raises(SessionError):
            manager.save_session(session_id)
