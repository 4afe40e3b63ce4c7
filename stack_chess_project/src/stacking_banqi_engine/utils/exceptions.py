"""
异常定义

定义叠子暗棋引擎的各种异常类型。
"""

from enum import Enum


class ViolationKind(str, Enum):
    """规则违例类别"""
    TURN = "TURN_VIOLATION"                            # 非当前回合或游戏已结束
    GEOMETRY = "GEOMETRY_VIOLATION"                    # 走法形状不合法
    TARGET_STATE = "TARGET_STATE_VIOLATION"            # 目标为暗子、移动暗子、原地移动等
    RANK_WEIGHT = "RANK_WEIGHT_VIOLATION"              # 重量或等级不足
    STACK_COMPOSITION = "STACK_COMPOSITION_VIOLATION"  # 叠子类型不符或超出上限
    CHAIN_PROTOCOL = "CHAIN_PROTOCOL_VIOLATION"        # 连吃状态下的非法动作
    RESOURCE = "RESOURCE_VIOLATION"                    # 手牌不足、棋子ID未知


class BanqiEngineError(Exception):
    """
    叠子暗棋引擎基础异常

    所有引擎相关异常的基类。
    """

    def __init__(self, message: str, error_code: str = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__

    def __str__(self):
        return f"[{self.error_code}] {self.message}"


class RuleViolationError(BanqiEngineError):
    """
    规则违例异常

    由规则校验函数抛出，只在 apply_action 边界被捕获并写入状态的
    error 字段，不会传播到引擎之外。
    """

    def __init__(self, kind: ViolationKind, reason: str = ""):
        message = f"非法动作: {kind.value}"
        if reason:
            message += f" - {reason}"
        super().__init__(message, kind.value)
        self.kind = kind
        self.reason = reason


class ConfigurationError(BanqiEngineError):
    """
    配置错误异常

    当配置参数无效时抛出。
    """

    def __init__(self, config_name: str, reason: str = ""):
        message = f"配置错误 - {config_name}"
        if reason:
            message += f": {reason}"
        super().__init__(message, "CONFIG_ERROR")
        self.config_name = config_name
        self.reason = reason


class GameStateError(BanqiEngineError):
    """
    游戏状态异常

    当初始牌组或游戏状态无效、不一致时抛出。
    """

    def __init__(self, state_description: str, reason: str = ""):
        message = f"游戏状态错误: {state_description}"
        if reason:
            message += f" - {reason}"
        super().__init__(message, "GAME_STATE_ERROR")
        self.state_description = state_description
        self.reason = reason


class SessionError(BanqiEngineError):
    """
    会话异常

    当会话不存在或已结束时抛出。
    """

    def __init__(self, session_id: str, reason: str = ""):
        message = f"会话错误 - {session_id}"
        if reason:
            message += f": {reason}"
        super().__init__(message, "SESSION_ERROR")
        self.session_id = session_id
        self.reason = reason
