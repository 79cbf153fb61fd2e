"""
記錄描述器 (Record Descriptor)

以反射方式取得記錄實例的欄位清單、宣告型別，並提供欄位的讀寫 handle。

支援的記錄:
- dataclass 實例: 欄位順序依 dataclasses.fields
- named tuple: 欄位順序依 _fields（唯讀，只能作為來源）
- 一般物件: 類別層級的型別註記（依 MRO，排除 ClassVar），
  再加上 __slots__ 宣告的名稱（未賦值的 slot 讀取時視為不存在），
  以及 __dict__ 中沒有註記的實例屬性

欄位可寫入的條件:
- 記錄本身可變（非 frozen dataclass、非 tuple）
- 欄位名稱非底線開頭
- 同名 property 必須有 setter

Example:
    >>> descriptor = RecordDescriptor(record)
    >>> descriptor.field_names
    ['ID', 'Balance']
    >>> slot = descriptor.slot('ID')
    >>> slot.read()
    ('1234', True)
"""

import dataclasses
import typing
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple

from ..exceptions import InvalidRecordError
from ..types.kinds import TypeInfo, resolve_type


def _is_class_var(hint: Any) -> bool:
    return hint is typing.ClassVar or typing.get_origin(hint) is typing.ClassVar


@lru_cache(maxsize=None)
def declared_types(cls: type) -> Dict[str, TypeInfo]:
    """
    取得類別所有欄位的宣告型別（依類別快取）

    無法解析的前向參照 (NameError) 會退回逐類別讀取非字串註記。

    Args:
        cls: 記錄類別

    Returns:
        Dict[str, TypeInfo]: 欄位名稱 -> 型別資訊（保留宣告順序）
    """
    try:
        hints = typing.get_type_hints(cls)
    except (NameError, TypeError):
        hints = {}
        for klass in reversed(cls.__mro__):
            for name, hint in vars(klass).get('__annotations__', {}).items():
                if not isinstance(hint, str):
                    hints[name] = hint

    return {
        name: resolve_type(hint)
        for name, hint in hints.items()
        if not _is_class_var(hint)
    }


def _slot_names(cls: type) -> List[str]:
    """依 MRO 列出類別宣告的 __slots__ 名稱（不含 __dict__、__weakref__）"""
    names: List[str] = []
    for klass in reversed(cls.__mro__):
        slots = vars(klass).get('__slots__', ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name not in ('__dict__', '__weakref__') and name not in names:
                names.append(name)
    return names


def _is_named_tuple(record: Any) -> bool:
    return isinstance(record, tuple) and hasattr(type(record), '_fields')


def _is_read_only(record: Any) -> bool:
    if _is_named_tuple(record):
        return True
    if dataclasses.is_dataclass(record):
        return type(record).__dataclass_params__.frozen
    return False


@dataclass
class FieldSlot:
    """
    記錄中單一欄位的讀寫 handle

    只在單次映射呼叫中使用，不應保存。

    Attributes:
        record: 所屬記錄實例
        name: 欄位名稱
        declared: 宣告型別；無註記時為 None
        settable: 是否可寫入
    """
    record: Any
    name: str
    declared: Optional[TypeInfo]
    settable: bool

    def read(self) -> Tuple[Any, bool]:
        """
        讀取欄位值

        Returns:
            Tuple[Any, bool]: (值, 是否存在)
        """
        try:
            return getattr(self.record, self.name), True
        except AttributeError:
            return None, False

    def get(self) -> Any:
        """讀取欄位值；欄位不存在時返回 None"""
        return self.read()[0]

    def set(self, value: Any) -> bool:
        """
        寫入欄位值（不做任何轉換）

        Returns:
            bool: 是否寫入成功
        """
        if not self.settable:
            return False
        try:
            setattr(self.record, self.name, value)
        except (AttributeError, TypeError):
            return False
        return True


class RecordDescriptor:
    """
    記錄實例的反射視圖

    每次映射呼叫建立一次，不跨呼叫共享；
    只有類別的宣告型別會被快取。

    Attributes:
        record: 記錄實例
        read_only: 記錄是否不可變
    """

    def __init__(self, record: Any, role: str = "record"):
        """
        初始化 RecordDescriptor

        Args:
            record: 記錄實例
            role: 錯誤訊息中使用的角色名稱

        Raises:
            InvalidRecordError: record 不是記錄實例
        """
        if record is None or isinstance(record, type):
            raise InvalidRecordError(record, role)

        self.record = record
        self.read_only = _is_read_only(record)
        self._declared = declared_types(type(record))
        self._field_names = self._discover_fields()

        if not self._field_names and not self._is_record_type(record):
            raise InvalidRecordError(record, role)

    @staticmethod
    def _is_record_type(record: Any) -> bool:
        return (
            dataclasses.is_dataclass(record)
            or _is_named_tuple(record)
            or hasattr(record, '__dict__')
        )

    def _discover_fields(self) -> List[str]:
        """依宣告順序列出欄位名稱"""
        record = self.record

        if dataclasses.is_dataclass(record):
            return [f.name for f in dataclasses.fields(record)]

        if _is_named_tuple(record):
            return list(type(record)._fields)

        names = [name for name in self._declared if hasattr(record, name)]
        names.extend(
            name for name in _slot_names(type(record))
            if name not in names
        )
        instance_attrs = getattr(record, '__dict__', None) or {}
        names.extend(name for name in instance_attrs if name not in names)
        return names

    @property
    def field_names(self) -> List[str]:
        """欄位名稱列表（宣告順序）"""
        return list(self._field_names)

    def has_field(self, name: str) -> bool:
        return name in self._field_names

    def _is_settable(self, name: str) -> bool:
        if self.read_only or name.startswith('_'):
            return False
        attr = getattr(type(self.record), name, None)
        if isinstance(attr, property):
            return attr.fset is not None
        return True

    def slot(self, name: str) -> Optional[FieldSlot]:
        """
        取得欄位 handle

        Args:
            name: 欄位名稱

        Returns:
            Optional[FieldSlot]: 欄位不存在時為 None
        """
        if name not in self._field_names:
            return None
        return FieldSlot(
            record=self.record,
            name=name,
            declared=self._declared.get(name),
            settable=self._is_settable(name),
        )

    def __repr__(self) -> str:
        return f"RecordDescriptor({type(self.record).__name__}, fields={self._field_names})"


def get_named_field(record: Any, name: str) -> Tuple[Any, bool]:
    """
    依名稱讀取記錄欄位

    Returns:
        Tuple[Any, bool]: (值, 是否存在)
    """
    slot = RecordDescriptor(record).slot(name)
    if slot is None:
        return None, False
    return slot.read()


def set_named_field(record: Any, name: str, value: Any) -> bool:
    """
    依名稱寫入記錄欄位（原樣寫入，不做轉換）

    Returns:
        bool: 欄位不存在或不可寫入時為 False
    """
    slot = RecordDescriptor(record).slot(name)
    return slot is not None and slot.set(value)
