"""
日誌處理模組
為 field_mapper 提供統一的日誌記錄功能（控制台 + 可選的輪替檔案）
"""

import sys
import logging
import threading
from typing import Optional, Dict
from datetime import datetime, timezone, timedelta
from pathlib import Path
from logging.handlers import RotatingFileHandler

from ..config.config_manager import config_manager


ROOT_LOGGER_NAME = 'field_mapper'


# ANSI 顏色代碼
class ColorCodes:
    """終端顏色代碼"""
    GREY = '\033[90m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    BOLD_RED = '\033[1;91m'
    RESET = '\033[0m'
    CYAN = '\033[96m'


class ColoredFormatter(logging.Formatter):
    """彩色日誌格式化器"""

    COLORS = {
        logging.DEBUG: ColorCodes.GREY,
        logging.INFO: ColorCodes.GREEN,
        logging.WARNING: ColorCodes.YELLOW,
        logging.ERROR: ColorCodes.RED,
        logging.CRITICAL: ColorCodes.BOLD_RED
    }

    def __init__(self, fmt: str = None, datefmt: str = None, use_color: bool = True):
        super().__init__(fmt, datefmt)
        self.use_color = use_color and self._supports_color()

    @staticmethod
    def _supports_color() -> bool:
        """檢測終端是否支援顏色"""
        return hasattr(sys.stdout, 'isatty') and sys.stdout.isatty()

    def format(self, record: logging.LogRecord) -> str:
        """格式化日誌記錄"""
        if not self.use_color:
            return super().format(record)

        original_levelname = record.levelname
        original_name = record.name

        color = self.COLORS.get(record.levelno, ColorCodes.RESET)
        record.levelname = f"{color}{original_levelname}{ColorCodes.RESET}"
        record.name = f"{ColorCodes.CYAN}{original_name}{ColorCodes.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original_levelname
            record.name = original_name


class Logger:
    """
    日誌處理器，單例模式（線程安全）
    """

    _instance = None
    _initialized = False
    _lock = threading.Lock()
    _logger_lock = threading.Lock()

    DETAILED_FORMAT = (
        '%(asctime)s | %(levelname)-8s | '
        '%(name)s | '
        '%(funcName)s:%(lineno)d | '
        '%(message)s'
    )

    SIMPLE_FORMAT = '%(asctime)s %(levelname)s: %(message)s'

    FILE_FORMAT = (
        '%(asctime)s | %(levelname)-8s | '
        '%(name)s | '
        '%(module)s.%(funcName)s:%(lineno)d | '
        '%(process)d-%(thread)d | '
        '%(message)s'
    )

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(Logger, cls).__new__(cls)
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._loggers: Dict[str, logging.Logger] = {}
        self._handlers: Dict[str, logging.Handler] = {}
        self._setup_logging()
        self._initialized = True

    def _setup_logging(self) -> None:
        """依 [logging] 配置段設置日誌系統"""
        log_level = config_manager.get('logging', 'level', 'INFO')
        use_detailed = config_manager.get_boolean('logging', 'detailed', True)
        console_format = self.DETAILED_FORMAT if use_detailed else self.SIMPLE_FORMAT
        use_color = config_manager.get_boolean('logging', 'color', True)
        log_to_console = config_manager.get_boolean('logging', 'log_to_console', True)
        log_to_file = config_manager.get_boolean('logging', 'log_to_file', False)

        self._setup_root_logger(log_level, console_format, use_color, log_to_console, log_to_file)

    def _setup_root_logger(self, log_level: str, console_format: str,
                           use_color: bool = True,
                           log_to_console: bool = True,
                           log_to_file: bool = False) -> None:
        """設置根日誌記錄器"""
        root_logger = self._loggers.get('root')
        if root_logger is None:
            root_logger = logging.getLogger(ROOT_LOGGER_NAME)
            root_logger.propagate = False
            self._loggers['root'] = root_logger
        root_logger.setLevel(getattr(logging, str(log_level).upper(), logging.INFO))

        # 先清理既有 handlers，避免重複輸出
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
            handler.close()
        self._handlers.clear()

        if log_to_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(ColoredFormatter(
                fmt=console_format,
                datefmt='%Y-%m-%d %H:%M:%S',
                use_color=use_color
            ))
            root_logger.addHandler(console_handler)
            self._handlers['console'] = console_handler

        if log_to_file:
            log_path = config_manager.get('paths', 'log_path')
            if log_path:
                self._setup_file_handler(root_logger, log_path)

        if not root_logger.handlers:
            root_logger.addHandler(logging.NullHandler())

    def _setup_file_handler(self, logger: logging.Logger, log_path: str) -> None:
        """設置輪替檔案處理器"""
        try:
            log_dir = Path(log_path)
            log_dir.mkdir(parents=True, exist_ok=True)

            tz_offset = timezone(timedelta(hours=8))
            timestamp = datetime.now(tz_offset).strftime('%Y%m%d_%H%M%S')
            log_file_path = log_dir / f"{ROOT_LOGGER_NAME}_{timestamp}.log"

            max_bytes = config_manager.get_int('logging', 'max_file_size_mb', 10) * 1024 * 1024
            backup_count = config_manager.get_int('logging', 'backup_count', 5)

            file_handler = RotatingFileHandler(
                log_file_path,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding='utf-8'
            )
        except OSError as e:
            sys.stderr.write(f"創建檔案處理器失敗: {e}\n")
            return

        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            self.FILE_FORMAT,
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(file_handler)
        self._handlers['file'] = file_handler

    def get_logger(self, name: Optional[str] = None) -> logging.Logger:
        """
        獲取日誌記錄器（線程安全）

        Args:
            name: 日誌記錄器名稱，None 時返回根記錄器

        Returns:
            logging.Logger: 日誌記錄器
        """
        if name is None:
            name = 'root'

        with Logger._logger_lock:
            if name not in self._loggers:
                if name == 'root':
                    self._loggers['root'] = logging.getLogger(ROOT_LOGGER_NAME)
                else:
                    self._loggers[name] = logging.getLogger(f'{ROOT_LOGGER_NAME}.{name}')

            return self._loggers[name]


class StructuredLogger:
    """
    結構化日誌記錄器
    """

    def __init__(self, logger_name: str = None):
        self.logger = Logger().get_logger(logger_name)

    @staticmethod
    def _details(**kwargs) -> str:
        return ' '.join(f"{k}={v}" for k, v in kwargs.items())

    def log_operation_start(self, operation: str, **kwargs) -> None:
        """記錄操作開始"""
        msg = f"▶ 開始執行: {operation}"
        details = self._details(**kwargs)
        if details:
            msg += f" | {details}"
        self.logger.debug(msg)

    def log_operation_end(self, operation: str, success: bool = True, **kwargs) -> None:
        """記錄操作結束"""
        status = "✓ 成功" if success else "✗ 失敗"
        msg = f"{status}: {operation}"
        details = self._details(**kwargs)
        if details:
            msg += f" | {details}"

        if success:
            self.logger.debug(msg)
        else:
            self.logger.error(msg)

    def log_error(self, error: Exception, context: str = None, **kwargs) -> None:
        """記錄錯誤信息"""
        context_info = f"[{context}] " if context else ""
        msg = f"❌ {context_info}錯誤: {error}"
        details = self._details(**kwargs)
        if details:
            msg += f" | {details}"

        self.logger.error(msg, exc_info=True)


# 全域日誌管理器實例
logger_manager = Logger()


# 便利函數
def get_logger(name: str = None) -> logging.Logger:
    """
    獲取日誌記錄器

    Args:
        name: 日誌記錄器名稱

    Returns:
        logging.Logger: 日誌記錄器
    """
    return logger_manager.get_logger(name)


def get_structured_logger(name: str = None) -> StructuredLogger:
    """
    獲取結構化日誌記錄器

    Args:
        name: 日誌記錄器名稱

    Returns:
        StructuredLogger: 結構化日誌記錄器
    """
    return StructuredLogger(name)
