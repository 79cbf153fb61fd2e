"""
日誌處理模組
"""

from .logger import (
    Logger,
    StructuredLogger,
    ColoredFormatter,
    ColorCodes,
    logger_manager,
    get_logger,
    get_structured_logger,
    ROOT_LOGGER_NAME,
)

__all__ = [
    'Logger',
    'StructuredLogger',
    'ColoredFormatter',
    'ColorCodes',
    'logger_manager',
    'get_logger',
    'get_structured_logger',
    'ROOT_LOGGER_NAME',
]
