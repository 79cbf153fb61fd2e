"""
型別模組

提供型別種類解析與 nullable 基本型別包裝。
"""

from .kinds import (
    Kind,
    TypeInfo,
    resolve_type,
    info_of_value,
    SCALAR_TYPE_MAPPING,
)
from .nullable import (
    NullValue,
    NullInt64,
    NullInt32,
    NullInt16,
    NullString,
    NullFloat64,
    NULLABLE_TYPES,
)

__all__ = [
    # 型別種類
    'Kind',
    'TypeInfo',
    'resolve_type',
    'info_of_value',
    'SCALAR_TYPE_MAPPING',
    # Nullable 包裝
    'NullValue',
    'NullInt64',
    'NullInt32',
    'NullInt16',
    'NullString',
    'NullFloat64',
    'NULLABLE_TYPES',
]
