"""
Field Mapper - 記錄欄位映射工具

依欄位名稱把來源記錄的值複製到目標記錄，並在型別不同時自動轉換
（數值寬度、字串與數值互轉、nullable 包裝拆包、Optional 拆包）。

主要模組：
- core.types: 型別種類與 nullable 包裝
- core.mapping: 欄位映射與值轉換
- utils: 日誌、配置等工具函數
"""

__version__ = "1.0.0"

from .core.exceptions import FieldMapperError, InvalidRecordError
from .core.types import (
    NullValue,
    NullInt64,
    NullInt32,
    NullInt16,
    NullString,
    NullFloat64,
)
from .core.mapping import (
    FieldMapper,
    RecordDescriptor,
    FieldSlot,
    coerce,
    get_named_field,
    set_named_field,
    map_fields,
    map_rows,
)
from .utils import get_logger, get_structured_logger, config_manager

__all__ = [
    # 版本
    '__version__',
    # 映射
    'map_fields',
    'map_rows',
    'coerce',
    'FieldMapper',
    'RecordDescriptor',
    'FieldSlot',
    'get_named_field',
    'set_named_field',
    # Nullable 包裝
    'NullValue',
    'NullInt64',
    'NullInt32',
    'NullInt16',
    'NullString',
    'NullFloat64',
    # 異常
    'FieldMapperError',
    'InvalidRecordError',
    # 工具
    'get_logger',
    'get_structured_logger',
    'config_manager',
]
