"""
配置管理器
提供 field_mapper 的 TOML 配置載入與查詢功能
"""

import sys
import logging
import threading
from typing import Dict, List, Any
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # Python 3.10 及以下需要安裝 tomli


CONFIG_FILENAME = 'config.toml'


def get_project_root() -> Path:
    """
    獲取專案根目錄

    Returns:
        Path: 專案根目錄路徑
    """
    # 從當前檔案位置向上查找，直到找到包含 config/config.toml 的層級
    current = Path(__file__).parent
    while current.parent != current:
        if (current / 'config' / CONFIG_FILENAME).is_file():
            return current
        current = current.parent

    return Path.cwd()


DEFAULT_CONFIG: Dict[str, Any] = {
    'general': {
        'project_name': 'field_mapper',
        'version': '1.0.0',
    },
    'logging': {
        'level': 'INFO',
        'detailed': True,
        'color': True,
        'max_file_size_mb': 10,
        'backup_count': 5,
        'log_to_file': False,
        'log_to_console': True,
    },
    'paths': {
        'log_path': './logs',
    },
    'mapper': {
        'trace_skipped': True,
    },
}


class ConfigManager:
    """配置管理器，單例模式（線程安全）"""

    _instance = None
    _initialized = False
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(ConfigManager, cls).__new__(cls)
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        with ConfigManager._lock:
            if self._initialized:
                return
            self._config_data: Dict[str, Any] = {}
            self._simple_logger = self._setup_simple_logger()
            self._load_config()
            self._initialized = True

    @staticmethod
    def _setup_simple_logger() -> logging.Logger:
        """設置簡單的日誌記錄器，避免與 logging 模組循環導入"""
        simple_logger = logging.getLogger('field_mapper.config_manager')

        if not simple_logger.handlers:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(logging.WARNING)
            formatter = logging.Formatter(
                '[%(asctime)s] %(levelname)s %(name)s: %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(formatter)
            simple_logger.addHandler(console_handler)
            simple_logger.propagate = False

        return simple_logger

    def _candidate_paths(self) -> List[Path]:
        """配置檔案的候選路徑（依優先順序）"""
        return [
            get_project_root() / 'config' / CONFIG_FILENAME,
            Path(__file__).parent.parent.parent.parent / 'config' / CONFIG_FILENAME,
            Path.cwd() / 'config' / CONFIG_FILENAME,
        ]

    def _load_config(self) -> None:
        """加載配置檔案，並與預設配置合併"""
        self._config_data = self._default_config()

        possible_paths = self._candidate_paths()
        config_path = next((p for p in possible_paths if p.is_file()), None)

        if config_path is None:
            self._simple_logger.debug(
                f"配置檔案不存在，使用預設配置。嘗試路徑: {[str(p) for p in possible_paths]}"
            )
            return

        try:
            with open(config_path, 'rb') as f:
                loaded = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            self._simple_logger.error(f"載入配置檔案時出錯: {e}")
            return

        for section, values in loaded.items():
            if isinstance(values, dict):
                self._config_data.setdefault(section, {}).update(values)
            else:
                self._config_data[section] = values

        self._simple_logger.debug(f"成功載入配置檔案: {config_path}")

    @staticmethod
    def _default_config() -> Dict[str, Any]:
        """預設配置的深拷貝"""
        return {section: dict(values) for section, values in DEFAULT_CONFIG.items()}

    def get(self, section: str, key: str = None, fallback: Any = None) -> Any:
        """
        獲取配置值

        支援兩種調用方式：
        - get('section', 'key') - 獲取 section 下的 key
        - get('section.key') - 使用點號分隔的路徑

        Args:
            section: 配置段落名稱或完整路徑
            key: 配置鍵名（可選）
            fallback: 預設值

        Returns:
            Any: 配置值
        """
        if key is None and '.' in section:
            return self.get_nested(*section.split('.'), fallback=fallback)

        if key is None:
            return self._config_data.get(section, fallback)

        section_data = self._config_data.get(section, {})
        if not isinstance(section_data, dict):
            return fallback
        return section_data.get(key, fallback)

    def get_int(self, section: str, key: str = None, fallback: int = 0) -> int:
        """獲取整數配置值"""
        try:
            value = self.get(section, key)
            return int(value) if value is not None else fallback
        except (ValueError, TypeError):
            return fallback

    def get_float(self, section: str, key: str = None, fallback: float = 0.0) -> float:
        """獲取浮點數配置值"""
        try:
            value = self.get(section, key)
            return float(value) if value is not None else fallback
        except (ValueError, TypeError):
            return fallback

    def get_boolean(self, section: str, key: str = None, fallback: bool = False) -> bool:
        """獲取布林配置值"""
        value = self.get(section, key)
        if value is None:
            return fallback
        if isinstance(value, bool):
            return value
        return str(value).lower() in ('true', '1', 'yes', 'on')

    def get_list(self, section: str, key: str = None, fallback: List = None) -> List:
        """獲取列表配置值"""
        if fallback is None:
            fallback = []

        value = self.get(section, key)
        if value is None:
            return fallback
        if isinstance(value, list):
            return value
        # 如果是字串，嘗試用逗號分隔
        if isinstance(value, str):
            return [item.strip() for item in value.split(',') if item.strip()]
        return fallback

    def has_section(self, section: str) -> bool:
        """檢查是否存在配置段落"""
        return section in self._config_data

    def set_config(self, section: str, key: str, value: Any) -> None:
        """設定配置值（運行時配置）"""
        with ConfigManager._lock:
            self._config_data.setdefault(section, {})[key] = value

    def get_nested(self, *keys: str, fallback: Any = None) -> Any:
        """
        獲取嵌套配置值

        Example:
            config.get_nested('logging', 'level')

        Args:
            *keys: 嵌套的鍵名
            fallback: 預設值

        Returns:
            Any: 配置值
        """
        try:
            value = self._config_data
            for key in keys:
                value = value[key]
            return value
        except (KeyError, TypeError):
            return fallback

    def to_dict(self) -> Dict[str, Any]:
        """返回完整的配置字典"""
        return {
            section: dict(values) if isinstance(values, dict) else values
            for section, values in self._config_data.items()
        }

    def __repr__(self) -> str:
        return f"ConfigManager(sections={list(self._config_data.keys())})"


# 全域配置管理器實例
config_manager = ConfigManager()


# 便利函數
def get_config(section: str, key: str = None, fallback: Any = None) -> Any:
    """獲取配置值的便利函數"""
    return config_manager.get(section, key, fallback)
