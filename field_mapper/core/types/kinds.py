"""
型別種類 (Kind) 解析模組

將欄位的宣告型別 (annotation) 與執行期的值歸類為固定的幾種種類，
並記錄數值型別的位元寬度，供 coercion 規則判斷使用。

寬度對照:
- int   -> 有號 64 位元
- float -> 64 位元浮點
- numpy.int8 / int16 / int32 / int64、uint8 ~ uint64、float16 / float32 / float64
  依 dtype 決定寬度

Example:
    >>> resolve_type(np.int32)
    TypeInfo(kind=<Kind.INT: 'int'>, bits=32, py_type=<class 'numpy.int32'>, inner=None)
    >>> info_of_value("1234").kind
    <Kind.STRING: 'string'>
"""

import math
import types
import typing
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import numpy as np


class Kind(Enum):
    """欄位/值的種類"""
    INVALID = "invalid"
    BOOL = "bool"
    INT = "int"
    UINT = "uint"
    FLOAT = "float"
    STRING = "string"
    ANY = "any"
    OPTIONAL = "optional"
    OTHER = "other"


NUMERIC_KINDS = frozenset({Kind.INT, Kind.UINT, Kind.FLOAT})
SCALAR_KINDS = NUMERIC_KINDS | {Kind.STRING, Kind.BOOL}


# Python / numpy 型別到 (Kind, 位元寬度) 的映射表
SCALAR_TYPE_MAPPING: Dict[type, Tuple[Kind, int]] = {
    # 布林
    bool: (Kind.BOOL, 0),
    np.bool_: (Kind.BOOL, 0),

    # 有號整數
    int: (Kind.INT, 64),
    np.int8: (Kind.INT, 8),
    np.int16: (Kind.INT, 16),
    np.int32: (Kind.INT, 32),
    np.int64: (Kind.INT, 64),

    # 無號整數
    np.uint8: (Kind.UINT, 8),
    np.uint16: (Kind.UINT, 16),
    np.uint32: (Kind.UINT, 32),
    np.uint64: (Kind.UINT, 64),

    # 浮點數
    float: (Kind.FLOAT, 64),
    np.float16: (Kind.FLOAT, 16),
    np.float32: (Kind.FLOAT, 32),
    np.float64: (Kind.FLOAT, 64),

    # 字串
    str: (Kind.STRING, 0),
    np.str_: (Kind.STRING, 0),
}


@dataclass(frozen=True)
class TypeInfo:
    """
    型別資訊

    Attributes:
        kind: 種類
        bits: 數值型別的位元寬度，非數值為 0
        py_type: 用於建構值與 isinstance 判斷的類別；ANY 為 None
        inner: OPTIONAL 包裝的內部型別
    """
    kind: Kind
    bits: int = 0
    py_type: Any = None
    inner: Optional["TypeInfo"] = None

    @property
    def is_text(self) -> bool:
        return self.kind is Kind.STRING

    @property
    def is_numeric(self) -> bool:
        return self.kind in NUMERIC_KINDS

    @property
    def is_canonical(self) -> bool:
        """py_type 是否為映射表中的標準型別（而非其子類別）"""
        return self.py_type in SCALAR_TYPE_MAPPING

    def accepts(self, value: Any, info: "TypeInfo") -> bool:
        """
        判斷值是否可直接指派給此型別（相同或結構相容）

        Args:
            value: 待指派的值
            info: 值的型別資訊

        Returns:
            bool: 可直接指派時為 True
        """
        if self.kind is Kind.ANY:
            return True

        if self.kind in SCALAR_KINDS:
            if info.kind is not self.kind or info.bits != self.bits:
                return False
            return self.is_canonical or isinstance(value, self.py_type)

        if self.kind is Kind.OTHER and self.py_type is not None:
            return isinstance(value, self.py_type)

        return False

    def build(self, value: Any) -> Any:
        """
        將值轉為此型別的實例

        ANY、或值本身已是 py_type 時原樣返回。

        Raises:
            TypeError, ValueError, OverflowError: 建構失敗
        """
        if self.py_type is None or self.kind is Kind.OTHER:
            return value
        if type(value) is self.py_type:
            return value
        if self.kind is Kind.STRING:
            return self.py_type(str.__str__(value))
        return self.py_type(value)


ANY_INFO = TypeInfo(Kind.ANY)
INVALID_INFO = TypeInfo(Kind.INVALID)


def _scalar_info(cls: type) -> Optional[TypeInfo]:
    """查詢標準型別或其子類別的 TypeInfo"""
    mapped = SCALAR_TYPE_MAPPING.get(cls)
    if mapped is not None:
        return TypeInfo(mapped[0], mapped[1], cls)

    # numpy 平台別名 (intc、longlong...) 依 dtype 判斷寬度
    if issubclass(cls, np.bool_):
        return TypeInfo(Kind.BOOL, 0, cls)
    if issubclass(cls, np.signedinteger):
        return TypeInfo(Kind.INT, np.dtype(cls).itemsize * 8, cls)
    if issubclass(cls, np.unsignedinteger):
        return TypeInfo(Kind.UINT, np.dtype(cls).itemsize * 8, cls)
    if issubclass(cls, np.floating):
        return TypeInfo(Kind.FLOAT, np.dtype(cls).itemsize * 8, cls)

    # Python 內建型別的子類別 (IntEnum、StrEnum ...)；bool 必須先於 int 判斷
    for base in (bool, int, float, str):
        if issubclass(cls, base):
            kind, bits = SCALAR_TYPE_MAPPING[base]
            return TypeInfo(kind, bits, cls)

    return None


def resolve_type(annotation: Any) -> Optional[TypeInfo]:
    """
    解析欄位的宣告型別

    Args:
        annotation: 型別註記（已由 typing.get_type_hints 解析）

    Returns:
        Optional[TypeInfo]: 型別資訊；無註記時為 None
    """
    if annotation is None:
        return None

    if annotation is Any or annotation is object:
        return ANY_INFO

    # typing.NewType 以其基底型別解析
    supertype = getattr(annotation, "__supertype__", None)
    if supertype is not None:
        return resolve_type(supertype)

    origin = typing.get_origin(annotation)

    if origin is typing.Union or origin is types.UnionType:
        args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        has_none = len(args) < len(typing.get_args(annotation))
        if len(args) == 1:
            inner = resolve_type(args[0])
        else:
            classes = tuple(typing.get_origin(arg) or arg for arg in args)
            classes = tuple(cls for cls in classes if isinstance(cls, type))
            inner = TypeInfo(Kind.OTHER, 0, classes or None)
        if has_none:
            return TypeInfo(Kind.OPTIONAL, 0, None, inner)
        return inner

    if origin is not None:
        # list[int]、dict[str, Any] 等泛型只比較其原始類別
        return TypeInfo(Kind.OTHER, 0, origin if isinstance(origin, type) else None)

    if isinstance(annotation, type):
        return _scalar_info(annotation) or TypeInfo(Kind.OTHER, 0, annotation)

    return TypeInfo(Kind.OTHER)


def info_of_value(value: Any) -> TypeInfo:
    """
    取得執行期值的型別資訊

    Args:
        value: 任意值

    Returns:
        TypeInfo: None 時為 INVALID
    """
    if value is None:
        return INVALID_INFO
    cls = type(value)
    return _scalar_info(cls) or TypeInfo(Kind.OTHER, 0, cls)


def signed_range(bits: int) -> Tuple[int, int]:
    """有號整數的 (最小值, 最大值)"""
    return -(1 << (bits - 1)), (1 << (bits - 1)) - 1


def unsigned_max(bits: int) -> int:
    """無號整數的最大值"""
    return (1 << bits) - 1


def wrap_signed(value: int, bits: int) -> int:
    """以二補數截斷至指定寬度"""
    value &= unsigned_max(bits)
    if value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


def wrap_unsigned(value: int, bits: int) -> int:
    """以 2^bits 取模截斷至指定寬度"""
    return value & unsigned_max(bits)


def is_finite(value: float) -> bool:
    return not (math.isnan(value) or math.isinf(value))
