"""
值轉換 (Value Coercion)

把一個來源值轉換後寫入目標欄位。所有規則都不會拋出異常：
無法轉換時目標欄位保留原值。

規則依序套用，第一個命中的規則生效:
1. Optional 拆包: 來源為 None 時略過；目標宣告 Optional[X] 且目前有值時以 X 接收，
   目前為 None 時不寫入
2. Any 拆包: 來源宣告為 Any/object 時取其實際值；可直接指派則寫入，
   目標為字串時依規則 4 格式化，否則以實際值繼續後續規則
3. Nullable 拆包: NullInt64/32/16、NullString、NullFloat64 取 payload，
   無效時取預設值 (0、0.0、" ")
4. 目標為字串: 整數轉十進位、浮點數轉不含指數的最短表示、字串原樣複製
5. 來源為字串: 去除前後空白與所有逗號後，依目標寬度解析整數/無號整數/浮點數
6. 跨數值家族: 整數 -> 浮點依值轉換；浮點 -> 整數向零截斷並依目標寬度環繞
7. 相同或結構相容的型別: 原樣寫入
8. 其餘: 不動作

Example:
    >>> slot = RecordDescriptor(to).slot('ID')
    >>> coerce(" 1,234 ", slot)
    True
    >>> to.ID
    1234
"""

import math
import re
from typing import Any, Callable, List, Optional

import numpy as np

from ..types.kinds import (
    ANY_INFO,
    Kind,
    TypeInfo,
    info_of_value,
    is_finite,
    signed_range,
    unsigned_max,
    wrap_signed,
    wrap_unsigned,
)
from ..types.nullable import NullValue
from .descriptor import FieldSlot


class _Outcome:
    """規則結果標記"""

    def __init__(self, name: str):
        self.name = name

    def __repr__(self) -> str:
        return self.name


# 規則不適用，交給下一條規則
NOT_APPLICABLE = _Outcome("NOT_APPLICABLE")
# 規則命中但不寫入
SKIP = _Outcome("SKIP")

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_UINT_PATTERN = re.compile(r"[0-9]+")
_FLOAT_PATTERN = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_FLOAT_SPECIAL_PATTERN = re.compile(r"[+-]?(?:inf|infinity|nan)", re.IGNORECASE)

_CONVERSION_ERRORS = (TypeError, ValueError, OverflowError)


def format_float(value: float) -> str:
    """
    浮點數轉為可還原的最短十進位表示（不使用指數記號）

    以 64 位元精度格式化；非有限值為 'NaN'、'+Inf'、'-Inf'。

    Example:
        >>> format_float(123.345)
        '123.345'
        >>> format_float(1e21)
        '1000000000000000000000'
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    return np.format_float_positional(value, unique=True, trim='-')


def format_text(value: Any, info: TypeInfo) -> Optional[str]:
    """
    將數值或字串格式化為字串

    Returns:
        Optional[str]: 不支援的種類返回 None
    """
    match info.kind:
        case Kind.INT | Kind.UINT:
            return str(int(value))
        case Kind.FLOAT:
            return format_float(float(value))
        case Kind.STRING:
            return str.__str__(value)
        case _:
            return None


def clean_numeric_text(text: str) -> str:
    """去除前後空白與所有千分位逗號"""
    return text.strip().replace(",", "")


def parse_int(text: str, bits: int) -> Optional[int]:
    """解析十進位有號整數，超出寬度範圍時返回 None"""
    if not _INT_PATTERN.fullmatch(text):
        return None
    value = int(text)
    low, high = signed_range(bits)
    return value if low <= value <= high else None


def parse_uint(text: str, bits: int) -> Optional[int]:
    """解析十進位無號整數（不接受正負號），超出寬度範圍時返回 None"""
    if not _UINT_PATTERN.fullmatch(text):
        return None
    value = int(text)
    return value if value <= unsigned_max(bits) else None


def parse_float(text: str, bits: int) -> Optional[float]:
    """
    解析浮點數

    接受十進位與指數記號，以及 inf / infinity / nan（不分大小寫）。
    超出目標寬度的值視為失敗。
    """
    special = bool(_FLOAT_SPECIAL_PATTERN.fullmatch(text))
    if not special and not _FLOAT_PATTERN.fullmatch(text):
        return None

    value = float(text)
    if bits < 64:
        with np.errstate(over='ignore'):
            value = float(np.dtype(f"float{bits}").type(value))
    if math.isinf(value) and not special:
        return None
    return value


# --- 規則 4 ~ 7 --------------------------------------------------------------
# 每條規則回傳 NOT_APPLICABLE、SKIP 或待寫入的值

def _format_into_text(value: Any, source: TypeInfo, target: TypeInfo) -> Any:
    if not target.is_text:
        return NOT_APPLICABLE
    text = format_text(value, source)
    return SKIP if text is None else text


def _parse_text(value: Any, source: TypeInfo, target: TypeInfo) -> Any:
    if not source.is_text:
        return NOT_APPLICABLE

    clean = clean_numeric_text(str.__str__(value))
    match target.kind:
        case Kind.INT:
            parsed = parse_int(clean, target.bits)
        case Kind.UINT:
            parsed = parse_uint(clean, target.bits)
        case Kind.FLOAT:
            parsed = parse_float(clean, target.bits)
        case Kind.STRING:
            parsed = clean
        case _:
            return NOT_APPLICABLE
    return SKIP if parsed is None else parsed


def _convert_numeric(value: Any, source: TypeInfo, target: TypeInfo) -> Any:
    if source.kind in (Kind.INT, Kind.UINT) and target.kind is Kind.FLOAT:
        try:
            return float(int(value))
        except OverflowError:
            return SKIP

    if source.kind is Kind.FLOAT and target.kind in (Kind.INT, Kind.UINT):
        number = float(value)
        if not is_finite(number):
            return SKIP
        truncated = math.trunc(number)
        if target.kind is Kind.INT:
            return wrap_signed(truncated, target.bits)
        return wrap_unsigned(truncated, target.bits)

    return NOT_APPLICABLE


def _assign_compatible(value: Any, source: TypeInfo, target: TypeInfo) -> Any:
    return value if target.accepts(value, source) else NOT_APPLICABLE


CoercionRule = Callable[[Any, TypeInfo, TypeInfo], Any]

RULES: List[CoercionRule] = [
    _format_into_text,
    _parse_text,
    _convert_numeric,
    _assign_compatible,
]


def _receiving_type(slot: FieldSlot) -> Optional[TypeInfo]:
    """
    目標欄位用於接收的型別

    Optional[X] 目前為 None 時視為不存在，返回 None。
    沒有註記的欄位依目前值推斷；目前值為 None 時可接收任何值。
    """
    declared = slot.declared
    if declared is None:
        current = slot.get()
        return ANY_INFO if current is None else info_of_value(current)

    if declared.kind is Kind.OPTIONAL:
        if slot.get() is None:
            return None
        return declared.inner or ANY_INFO

    return declared


def _source_type(value: Any, declared: Optional[TypeInfo]) -> TypeInfo:
    """
    來源值的型別

    宣告型別與實際值屬於同一種類時採用宣告型別（保留寬度），否則以實際值為準。
    """
    actual = info_of_value(value)
    if declared is not None and declared.kind is actual.kind and declared.kind is not Kind.OTHER:
        return declared
    return actual


def _assign(slot: FieldSlot, target: TypeInfo, value: Any) -> bool:
    try:
        converted = target.build(value)
    except _CONVERSION_ERRORS:
        return False
    return slot.set(converted)


def coerce(from_value: Any, into_slot: FieldSlot, declared: Optional[TypeInfo] = None) -> bool:
    """
    將來源值轉換後寫入目標欄位

    Args:
        from_value: 來源值
        into_slot: 目標欄位
        declared: 來源欄位的宣告型別；None 表示依實際值判斷

    Returns:
        bool: 是否有寫入
    """
    # 1. Optional 拆包
    if from_value is None or not into_slot.settable:
        return False
    target = _receiving_type(into_slot)
    if target is None:
        return False
    if declared is not None and declared.kind is Kind.OPTIONAL:
        declared = declared.inner

    # 2. Any 拆包
    if declared is not None and declared.kind is Kind.ANY:
        held = info_of_value(from_value)
        if target.accepts(from_value, held):
            return _assign(into_slot, target, from_value)
        if target.is_text:
            text = format_text(from_value, held)
            return text is not None and _assign(into_slot, target, text)
        declared = None

    # 3. Nullable 拆包
    if isinstance(from_value, NullValue):
        try:
            from_value = from_value.unwrap()
        except _CONVERSION_ERRORS:
            return False
        if from_value is None:
            return False
        declared = None

    source = _source_type(from_value, declared)

    # 4 ~ 8
    for rule in RULES:
        outcome = rule(from_value, source, target)
        if outcome is SKIP:
            return False
        if outcome is not NOT_APPLICABLE:
            return _assign(into_slot, target, outcome)
    return False
