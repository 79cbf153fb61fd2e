"""
可為 NULL 的基本型別包裝

每個包裝都帶有 payload (value) 與有效旗標 (valid)。
作為來源值時會被拆包：valid 為 True 取 payload，否則取該型別的固定預設值。

注意 NullString 無效時的預設值是單一空白 " "，不是空字串。

Example:
    >>> NullInt64(42, valid=True).unwrap()
    42
    >>> NullString.of(None).unwrap()
    ' '
"""

from dataclasses import dataclass
from typing import Any, ClassVar

import numpy as np


@dataclass(frozen=True)
class NullValue:
    """
    Nullable 包裝的基礎類

    Attributes:
        value: payload
        valid: payload 是否有效
    """
    value: Any = None
    valid: bool = False

    PAYLOAD_TYPE: ClassVar[type] = object
    DEFAULT: ClassVar[Any] = None

    def unwrap(self) -> Any:
        """
        取出 payload；無效時返回預設值

        Raises:
            TypeError, ValueError, OverflowError: payload 無法轉為 PAYLOAD_TYPE
        """
        if not self.valid:
            return self.DEFAULT
        if type(self.value) is self.PAYLOAD_TYPE:
            return self.value
        return self.PAYLOAD_TYPE(self.value)

    @classmethod
    def of(cls, value: Any) -> "NullValue":
        """由可能為 None 的值建立包裝"""
        if value is None:
            return cls(cls.DEFAULT, False)
        return cls(value, True)


@dataclass(frozen=True)
class NullInt64(NullValue):
    PAYLOAD_TYPE: ClassVar[type] = int
    DEFAULT: ClassVar[Any] = 0


@dataclass(frozen=True)
class NullInt32(NullValue):
    PAYLOAD_TYPE: ClassVar[type] = np.int32
    DEFAULT: ClassVar[Any] = np.int32(0)


@dataclass(frozen=True)
class NullInt16(NullValue):
    PAYLOAD_TYPE: ClassVar[type] = np.int16
    DEFAULT: ClassVar[Any] = np.int16(0)


@dataclass(frozen=True)
class NullString(NullValue):
    PAYLOAD_TYPE: ClassVar[type] = str
    DEFAULT: ClassVar[Any] = " "


@dataclass(frozen=True)
class NullFloat64(NullValue):
    PAYLOAD_TYPE: ClassVar[type] = float
    DEFAULT: ClassVar[Any] = 0.0


NULLABLE_TYPES = (NullInt64, NullInt32, NullInt16, NullString, NullFloat64)
