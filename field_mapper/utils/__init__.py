"""
工具模組
提供日誌、配置管理等通用工具
"""
from .config import (
    config_manager,
    ConfigManager,
    get_project_root,
    get_config,
)
from .logging import (
    get_logger,
    get_structured_logger,
    Logger,
    StructuredLogger,
    logger_manager,
)

__all__ = [
    # 配置管理
    'config_manager',
    'ConfigManager',
    'get_project_root',
    'get_config',
    # 日誌
    'get_logger',
    'get_structured_logger',
    'Logger',
    'StructuredLogger',
    'logger_manager',
]
