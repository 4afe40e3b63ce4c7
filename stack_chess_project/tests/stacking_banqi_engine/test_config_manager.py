"""
测试配置管理器
"""

import tempfile
from pathlib import Path

import pytest
import yaml

from stack_chess_project.src.stacking_banqi_engine.config import (
    ConfigManager, EngineConfig, GameConfig, SystemConfig
)
from stack_chess_project.src.stacking_banqi_engine.utils import ConfigurationError


class TestConfigManager:
    """测试 ConfigManager"""

    def setup_method(self):
        """每个测试方法前的设置"""
        self.temp_dir = tempfile.TemporaryDirectory()
        self.config_dir = Path(self.temp_dir.name) / "configs"
        self.manager = ConfigManager(str(self.config_dir))

    def teardown_method(self):
        """每个测试方法后的清理"""
        self.temp_dir.cleanup()

    def test_default_files_created(self):
        """测试初始化时创建默认配置文件"""
        for name in ('engine_config.yaml', 'game_config.yaml', 'system_config.yaml'):
            assert (self.config_dir / name).exists()

    def test_load_defaults(self):
        """测试加载默认配置"""
        assert self.manager.get_engine_config() == EngineConfig()
        assert self.manager.get_game_config() == GameConfig()
        assert self.manager.get_system_config() == SystemConfig()

    def test_update_config(self):
        """测试更新配置"""
        self.manager.update_config('game', max_turns=100, seed=7, unknown_key=1)
        config = self.manager.get_game_config()
        assert config.max_turns == 100
        assert config.seed == 7

    def test_update_unknown_config(self):
        """测试更新未知配置"""
        with pytest.raises(ConfigurationError):
            self.manager.update_config('model', x=1)

    def test_save_unknown_config(self):
        """测试保存未知配置"""
        with pytest.raises(ConfigurationError):
            self.manager.save_config('model', EngineConfig())

    def test_reset_config(self):
        """测试重置配置"""
        self.manager.update_config('engine', default_resolution='stack_if_possible')
        assert self.manager.get_engine_config().default_resolution == 'stack_if_possible'
        self.manager.reset_config('engine')
        assert self.manager.get_engine_config().default_resolution == 'to_hand'

    def test_validate_config(self):
        """测试验证配置"""
        assert self.manager.validate_config('engine')
        self.manager.update_config('engine', default_resolution='sideways')
        assert not self.manager.validate_config('engine')

        self.manager.update_config('system', log_level='verbose')
        assert not self.manager.validate_config('system')

    def test_corrupted_file_falls_back(self):
        """测试配置文件损坏时使用默认配置"""
        (self.config_dir / 'game_config.yaml').write_text("seed: [unclosed", encoding='utf-8')
        assert self.manager.get_game_config() == GameConfig()

    def test_unknown_keys_ignored(self):
        """测试忽略未知配置项"""
        with open(self.config_dir / 'engine_config.yaml', 'w', encoding='utf-8') as f:
            yaml.dump({'default_resolution': 'to_hand', 'mcts_simulations': 800}, f)
        assert self.manager.get_engine_config() == EngineConfig()

    def test_get_all_configs(self):
        """测试获取所有配置"""
        configs = self.manager.get_all_configs()
        assert set(configs) == {'engine', 'game', 'system'}


class TestLoadCombined:
    """测试单文件配置加载"""

    def setup_method(self):
        """每个测试方法前的设置"""
        self.temp_dir = tempfile.TemporaryDirectory()
        self.path = Path(self.temp_dir.name) / "default.yaml"

    def teardown_method(self):
        """每个测试方法后的清理"""
        self.temp_dir.cleanup()

    def test_partial_sections(self):
        """测试缺失的节使用默认值"""
        self.path.write_text("game:\n  seed: 11\n  max_turns: 50\n", encoding='utf-8')
        configs = ConfigManager.load_combined(str(self.path))
        assert configs['game'].seed == 11
        assert configs['game'].max_turns == 50
        assert configs['engine'] == EngineConfig()
        assert configs['system'] == SystemConfig()

    def test_invalid_values(self):
        """测试无效取值"""
        self.path.write_text("engine:\n  default_resolution: nowhere\n", encoding='utf-8')
        with pytest.raises(ConfigurationError):
            ConfigManager.load_combined(str(self.path))

    def test_missing_file(self):
        """测试文件不存在"""
        with pytest.raises(ConfigurationError):
            ConfigManager.load_combined(str(self.path))

    def test_project_default_file(self):
        """测试项目自带的默认配置文件"""
        path = Path(__file__).parent.parent.parent / "configs" / "default.yaml"
        configs = ConfigManager.load_combined(str(path))
        assert configs['engine'] == EngineConfig()
        assert configs['game'] == GameConfig()
        assert configs['system'] == SystemConfig()
