"""
玩家动作数据结构

定义翻子、移动、打入、收回和跳过五种动作，以及吃子结算方式。
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, List, Dict, Any

from .pieces import PieceType

Location = Tuple[int, int]  # (行, 列)


class ActionType(str, Enum):
    """动作类型"""
    FLIP = "FLIP"          # 翻子
    MOVE = "MOVE"          # 移动 (落在有子格即为交互：吃子/合并/收回)
    DEPLOY = "DEPLOY"      # 从手牌打入
    RETRIEVE = "RETRIEVE"  # 从己方叠子收回到手牌
    PASS = "PASS"          # 结束连吃


class CaptureResolution(str, Enum):
    """交互结算方式"""
    TO_HAND = "TO_HAND"                      # 目标叠子全部收入手牌
    STACK_IF_POSSIBLE = "STACK_IF_POSSIBLE"  # 叠在目标叠子之上


@dataclass(frozen=True)
class PlayerAction:
    """
    玩家动作

    不同类型的动作只使用其相关字段，推荐使用类方法构造。
    """
    action_type: ActionType
    player_id: int

    # FLIP
    location: Optional[Location] = None

    # MOVE
    from_pos: Optional[Location] = None
    to_pos: Optional[Location] = None
    resolution: Optional[CaptureResolution] = None

    # DEPLOY
    piece_type: Optional[PieceType] = None
    count: int = 0
    destination: Optional[Location] = None

    # RETRIEVE
    source: Optional[Location] = None
    piece_ids: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def flip(cls, player_id: int, location: Location) -> 'PlayerAction':
        return cls(ActionType.FLIP, player_id, location=tuple(location))

    @classmethod
    def move(cls, player_id: int, from_pos: Location, to_pos: Location,
             resolution: Optional[CaptureResolution] = None) -> 'PlayerAction':
        return cls(ActionType.MOVE, player_id, from_pos=tuple(from_pos),
                   to_pos=tuple(to_pos), resolution=resolution)

    @classmethod
    def deploy(cls, player_id: int, piece_type: PieceType, count: int,
               destination: Location) -> 'PlayerAction':
        return cls(ActionType.DEPLOY, player_id, piece_type=piece_type,
                   count=count, destination=tuple(destination))

    @classmethod
    def retrieve(cls, player_id: int, source: Location,
                 piece_ids: List[str]) -> 'PlayerAction':
        return cls(ActionType.RETRIEVE, player_id, source=tuple(source),
                   piece_ids=tuple(piece_ids))

    @classmethod
    def pass_turn(cls, player_id: int) -> 'PlayerAction':
        return cls(ActionType.PASS, player_id)

    def to_notation(self) -> str:
        """
        转换为简短记法

        Returns:
            str: 如 "flip 0,3"、"move 2,0>2,2 hand"
        """
        def loc(pos: Optional[Location]) -> str:
            return f"{pos[0]},{pos[1]}" if pos is not None else "?"

        if self.action_type == ActionType.FLIP:
            return f"flip {loc(self.location)}"
        if self.action_type == ActionType.MOVE:
            mode = "stack" if self.resolution == CaptureResolution.STACK_IF_POSSIBLE else "hand"
            return f"move {loc(self.from_pos)}>{loc(self.to_pos)} {mode}"
        if self.action_type == ActionType.DEPLOY:
            type_name = self.piece_type.value if self.piece_type else "?"
            return f"deploy {type_name}x{self.count} {loc(self.destination)}"
        if self.action_type == ActionType.RETRIEVE:
            return f"retrieve {loc(self.source)} [{','.join(self.piece_ids)}]"
        return "pass"

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return {
            'action_type': self.action_type.value,
            'player_id': self.player_id,
            'location': list(self.location) if self.location else None,
            'from_pos': list(self.from_pos) if self.from_pos else None,
            'to_pos': list(self.to_pos) if self.to_pos else None,
            'resolution': self.resolution.value if self.resolution else None,
            'piece_type': self.piece_type.value if self.piece_type else None,
            'count': self.count,
            'destination': list(self.destination) if self.destination else None,
            'source': list(self.source) if self.source else None,
            'piece_ids': list(self.piece_ids),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PlayerAction':
        """从字典创建"""
        def loc(value) -> Optional[Location]:
            return tuple(value) if value is not None else None

        return cls(
            action_type=ActionType(data['action_type']),
            player_id=data['player_id'],
            location=loc(data.get('location')),
            from_pos=loc(data.get('from_pos')),
            to_pos=loc(data.get('to_pos')),
            resolution=CaptureResolution(data['resolution']) if data.get('resolution') else None,
            piece_type=PieceType(data['piece_type']) if data.get('piece_type') else None,
            count=data.get('count', 0),
            destination=loc(data.get('destination')),
            source=loc(data.get('source')),
            piece_ids=tuple(data.get('piece_ids', ())),
        )
