"""
基础测试模块

测试项目的基本功能和导入。
"""

import pytest
from pathlib import Path

project_root = Path(__file__).parent.parent.parent


def test_project_import():
    """测试项目主模块是否可以正常导入"""
    try:
        import stack_chess_project
        assert stack_chess_project.__version__ == "0.1.0"
        assert stack_chess_project.__author__ == "Stack Chess Team"
    except ImportError as e:
        pytest.fail(f"无法导入stack_chess_project模块: {e}")


def test_submodules_import():
    """测试子模块是否可以正常导入"""
    try:
        from stack_chess_project.src import stacking_banqi_engine
        from stack_chess_project.src.stacking_banqi_engine import (
            rules_engine, config, game_interface, utils
        )

        assert stacking_banqi_engine.__version__ == "0.1.0"
        assert rules_engine.RuleEngine is stacking_banqi_engine.RuleEngine
    except ImportError as e:
        pytest.fail(f"无法导入子模块: {e}")


def test_config_file_exists():
    """测试配置文件是否存在"""
    config_path = project_root / "stack_chess_project" / "configs" / "default.yaml"
    assert config_path.exists(), "默认配置文件不存在"


def test_main_entry_point():
    """测试主入口文件是否存在"""
    assert (project_root / "stack_chess_project" / "main.py").exists()


def test_directory_structure():
    """测试项目目录结构是否正确"""
    expected_dirs = [
        "stack_chess_project",
        "stack_chess_project/src",
        "stack_chess_project/src/stacking_banqi_engine",
        "stack_chess_project/src/stacking_banqi_engine/rules_engine",
        "stack_chess_project/src/stacking_banqi_engine/config",
        "stack_chess_project/src/stacking_banqi_engine/game_interface",
        "stack_chess_project/src/stacking_banqi_engine/utils",
        "stack_chess_project/tests",
        "stack_chess_project/configs",
    ]

    for dir_path in expected_dirs:
        full_path = project_root / dir_path
        assert full_path.exists(), f"目录 {dir_path} 不存在"
        assert full_path.is_dir(), f"{dir_path} 不是目录"
