"""
映射模組

提供記錄描述器、值轉換與欄位映射。
"""

from .descriptor import (
    RecordDescriptor,
    FieldSlot,
    get_named_field,
    set_named_field,
)
from .coercion import coerce, format_float
from .field_mapper import FieldMapper, map_fields
from .frame import map_rows, iter_row_records

__all__ = [
    'RecordDescriptor',
    'FieldSlot',
    'get_named_field',
    'set_named_field',
    'coerce',
    'format_float',
    'FieldMapper',
    'map_fields',
    'map_rows',
    'iter_row_records',
]
