"""
测试日志与异常工具
"""

import logging
import tempfile
from pathlib import Path

from stack_chess_project.src.stacking_banqi_engine.utils import (
    setup_logger, get_logger, LoggerMixin,
    BanqiEngineError, RuleViolationError, ViolationKind,
    ConfigurationError, GameStateError, SessionError
)


class TestLogger:
    """测试日志系统"""

    def test_setup_logger_with_file(self):
        """测试文件日志"""
        with tempfile.TemporaryDirectory() as temp_dir:
            logger = setup_logger(
                name="stack_chess.test_file",
                level="DEBUG",
                log_file="engine.log",
                log_dir=temp_dir,
                console_output=False
            )
            logger.debug("测试消息")
            for handler in logger.handlers:
                handler.flush()

            log_path = Path(temp_dir) / "engine.log"
            assert log_path.exists()
            assert "测试消息" in log_path.read_text(encoding='utf-8')

            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)

    def test_setup_logger_idempotent(self):
        """测试重复设置不会重复添加处理器"""
        first = setup_logger(name="stack_chess.test_idempotent", level="INFO")
        count = len(first.handlers)
        second = setup_logger(name="stack_chess.test_idempotent", level="DEBUG")
        assert first is second
        assert len(second.handlers) == count
        assert first.level == logging.INFO

    def test_get_logger(self):
        """测试获取日志记录器"""
        assert get_logger().name == "stack_chess"
        assert get_logger("stack_chess.x").name == "stack_chess.x"

    def test_logger_mixin(self):
        """测试日志混入类"""
        class Worker(LoggerMixin):
            pass

        worker = Worker()
        assert worker.logger.name == "stack_chess.Worker"
        worker.log_debug("debug")
        worker.log_info("info")


class TestExceptions:
    """测试异常层次"""

    def test_rule_violation(self):
        """测试规则违例异常"""
        error = RuleViolationError(ViolationKind.RESOURCE, "手牌不足")
        assert isinstance(error, BanqiEngineError)
        assert error.kind == ViolationKind.RESOURCE
        assert error.reason == "手牌不足"
        assert error.error_code == "RESOURCE_VIOLATION"
        assert str(error).startswith("[RESOURCE_VIOLATION]")

    def test_error_codes(self):
        """测试错误码"""
        assert ConfigurationError("engine", "无效").error_code == "CONFIG_ERROR"
        assert GameStateError("牌组", "重复").error_code == "GAME_STATE_ERROR"
        assert SessionError("abc").error_code == "SESSION_ERROR"
        assert BanqiEngineError("x").error_code == "BanqiEngineError"

    def test_violation_kinds(self):
        """测试违例类别"""
        assert {kind.name for kind in ViolationKind} == {
            'TURN', 'GEOMETRY', 'TARGET_STATE', 'RANK_WEIGHT',
            'STACK_COMPOSITION', 'CHAIN_PROTOCOL', 'RESOURCE'
        }
