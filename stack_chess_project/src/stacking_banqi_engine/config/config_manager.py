"""
配置管理器

负责加载、保存和管理各种配置。
"""

import copy
import json

import yaml
from pathlib import Path
from typing import Dict, Any, Type, TypeVar
from dataclasses import asdict, fields
import logging

from .game_config import (
    EngineConfig, GameConfig, SystemConfig,
    DEFAULT_ENGINE_CONFIG, DEFAULT_GAME_CONFIG, DEFAULT_SYSTEM_CONFIG
)
from ..utils.exceptions import ConfigurationError

T = TypeVar('T')

logger = logging.getLogger(__name__)

VALID_RESOLUTIONS = ('to_hand', 'stack_if_possible')
VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


class ConfigManager:
    """
    配置管理器

    负责加载、保存和管理系统的各种配置。
    """

    def __init__(self, config_dir: str = "stack_chess_project/configs/stacking_banqi_engine"):
        """
        初始化配置管理器

        Args:
            config_dir: 配置文件目录
        """
        self.config_dir = Path(config_dir)
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self.config_files = {
            'engine': self.config_dir / 'engine_config.yaml',
            'game': self.config_dir / 'game_config.yaml',
            'system': self.config_dir / 'system_config.yaml'
        }

        self.default_configs = {
            'engine': DEFAULT_ENGINE_CONFIG,
            'game': DEFAULT_GAME_CONFIG,
            'system': DEFAULT_SYSTEM_CONFIG
        }

        self.config_types = {
            'engine': EngineConfig,
            'game': GameConfig,
            'system': SystemConfig
        }

        self._initialize_default_configs()

    def _initialize_default_configs(self):
        """初始化默认配置文件"""
        for config_name, config_obj in self.default_configs.items():
            config_file = self.config_files[config_name]
            if not config_file.exists():
                self.save_config(config_name, config_obj)
                logger.info(f"创建默认配置文件: {config_file}")

    def load_config(self, config_name: str, config_class: Type[T]) -> T:
        """
        加载配置

        Args:
            config_name: 配置名称
            config_class: 配置类

        Returns:
            配置对象
        """
        config_file = self.config_files.get(config_name)
        if not config_file or not config_file.exists():
            logger.warning(f"配置文件不存在: {config_file}，使用默认配置")
            return copy.deepcopy(self.default_configs[config_name])

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                if config_file.suffix == '.yaml':
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)

            config = self._dict_to_dataclass(data or {}, config_class)
            logger.info(f"成功加载配置: {config_file}")
            return config

        except (OSError, yaml.YAMLError, json.JSONDecodeError, TypeError) as e:
            logger.error(f"加载配置文件失败: {config_file}, 错误: {e}")
            return copy.deepcopy(self.default_configs[config_name])

    def save_config(self, config_name: str, config_obj: Any):
        """
        保存配置

        Args:
            config_name: 配置名称
            config_obj: 配置对象
        """
        config_file = self.config_files.get(config_name)
        if not config_file:
            raise ConfigurationError(config_name, "未知的配置名称")

        data = asdict(config_obj)
        with open(config_file, 'w', encoding='utf-8') as f:
            yaml.dump(data, f, default_flow_style=False, allow_unicode=True, indent=2)

        logger.info(f"成功保存配置: {config_file}")

    def get_engine_config(self) -> EngineConfig:
        """获取引擎配置"""
        return self.load_config('engine', EngineConfig)

    def get_game_config(self) -> GameConfig:
        """获取对局配置"""
        return self.load_config('game', GameConfig)

    def get_system_config(self) -> SystemConfig:
        """获取系统配置"""
        return self.load_config('system', SystemConfig)

    def update_config(self, config_name: str, **kwargs):
        """
        更新配置

        Args:
            config_name: 配置名称
            **kwargs: 要更新的配置项
        """
        if config_name not in self.config_types:
            raise ConfigurationError(config_name, "未知的配置名称")

        config_class = self.config_types[config_name]
        config = self.load_config(config_name, config_class)

        for key, value in kwargs.items():
            if hasattr(config, key):
                setattr(config, key, value)
            else:
                logger.warning(f"配置项不存在: {key}")

        self.save_config(config_name, config)

    def reset_config(self, config_name: str):
        """
        重置配置为默认值

        Args:
            config_name: 配置名称
        """
        default_config = self.default_configs[config_name]
        self.save_config(config_name, default_config)
        logger.info(f"配置已重置为默认值: {config_name}")

    def validate_config(self, config_name: str) -> bool:
        """
        验证配置的有效性

        Args:
            config_name: 配置名称

        Returns:
            bool: 配置是否有效
        """
        config_class = self.config_types[config_name]
        config = self.load_config(config_name, config_class)
        return validate_config_object(config_name, config)

    def get_all_configs(self) -> Dict[str, Any]:
        """
        获取所有配置

        Returns:
            Dict[str, Any]: 所有配置的字典
        """
        return {
            config_name: self.load_config(config_name, config_class)
            for config_name, config_class in self.config_types.items()
        }

    @classmethod
    def load_combined(cls, path: str) -> Dict[str, Any]:
        """
        从单个YAML文件加载全部配置

        文件按 engine / game / system 分节，缺失的节使用默认配置。

        Args:
            path: 配置文件路径

        Returns:
            Dict[str, Any]: {配置名称: 配置对象}
        """
        config_file = Path(path)
        if not config_file.exists():
            raise ConfigurationError(str(path), "配置文件不存在")

        with open(config_file, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        result = {}
        for config_name, config_class in (('engine', EngineConfig), ('game', GameConfig),
                                          ('system', SystemConfig)):
            config = cls._dict_to_dataclass(data.get(config_name) or {}, config_class)
            if not validate_config_object(config_name, config):
                raise ConfigurationError(config_name, f"配置无效: {asdict(config)}")
            result[config_name] = config
        return result

    @staticmethod
    def _dict_to_dataclass(data: Dict[str, Any], dataclass_type: Type[T]) -> T:
        """
        将字典转换为数据类对象

        Args:
            data: 字典数据
            dataclass_type: 数据类类型

        Returns:
            数据类对象
        """
        field_names = {f.name for f in fields(dataclass_type)}
        filtered_data = {k: v for k, v in data.items() if k in field_names}
        return dataclass_type(**filtered_data)


def validate_config_object(config_name: str, config: Any) -> bool:
    """检查配置对象的取值范围"""
    if config_name == 'engine':
        return config.default_resolution in VALID_RESOLUTIONS
    if config_name == 'game':
        return config.first_player in (0, 1) and config.max_turns >= 0
    if config_name == 'system':
        return (config.log_level.upper() in VALID_LOG_LEVELS and
                config.log_max_size > 0 and
                config.log_backup_count >= 0)
    return True
