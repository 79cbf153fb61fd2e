"""
配置管理模組
"""

from .config_manager import (
    ConfigManager,
    config_manager,
    get_config,
    get_project_root,
    DEFAULT_CONFIG,
)

__all__ = [
    'ConfigManager',
    'config_manager',
    'get_config',
    'get_project_root',
    'DEFAULT_CONFIG',
]
