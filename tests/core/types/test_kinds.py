"""型別種類解析測試"""

import enum
from typing import Any, NewType, Optional

import numpy as np
import pytest

from field_mapper.core.types.kinds import (
    ANY_INFO,
    Kind,
    TypeInfo,
    info_of_value,
    resolve_type,
    signed_range,
    unsigned_max,
    wrap_signed,
    wrap_unsigned,
)


class Color(enum.IntEnum):
    RED = 1


UserId = NewType("UserId", int)


class TestResolveType:
    """宣告型別解析"""

    @pytest.mark.parametrize("annotation, kind, bits", [
        (int, Kind.INT, 64),
        (np.int8, Kind.INT, 8),
        (np.int32, Kind.INT, 32),
        (np.uint16, Kind.UINT, 16),
        (np.uint64, Kind.UINT, 64),
        (float, Kind.FLOAT, 64),
        (np.float32, Kind.FLOAT, 32),
        (str, Kind.STRING, 0),
        (bool, Kind.BOOL, 0),
    ])
    def test_scalar_types(self, annotation, kind, bits):
        info = resolve_type(annotation)
        assert info.kind is kind
        assert info.bits == bits
        assert info.py_type is annotation

    def test_any_and_object(self):
        assert resolve_type(Any) is ANY_INFO
        assert resolve_type(object) is ANY_INFO

    def test_optional(self):
        for annotation in (Optional[int], int | None):
            info = resolve_type(annotation)
            assert info.kind is Kind.OPTIONAL
            assert info.inner.kind is Kind.INT

    def test_generic_alias_uses_origin(self):
        info = resolve_type(list[int])
        assert info.kind is Kind.OTHER
        assert info.py_type is list

    def test_new_type_resolves_supertype(self):
        assert resolve_type(UserId).kind is Kind.INT

    def test_plain_class(self):
        class Money:
            pass

        info = resolve_type(Money)
        assert info.kind is Kind.OTHER
        assert info.py_type is Money

    def test_missing_annotation(self):
        assert resolve_type(None) is None


class TestInfoOfValue:
    """執行期值的型別"""

    def test_bool_is_not_integer(self):
        assert info_of_value(True).kind is Kind.BOOL
        assert info_of_value(np.bool_(True)).kind is Kind.BOOL

    def test_numpy_widths(self):
        assert info_of_value(np.uint8(3)) == TypeInfo(Kind.UINT, 8, np.uint8)
        assert info_of_value(np.float32(1.0)).bits == 32

    def test_int_enum_keeps_its_class(self):
        info = info_of_value(Color.RED)
        assert info.kind is Kind.INT
        assert info.py_type is Color

    def test_none_is_invalid(self):
        assert info_of_value(None).kind is Kind.INVALID


class TestAccepts:
    """直接指派判斷"""

    def test_same_kind_and_width(self):
        target = resolve_type(np.int64)
        assert target.accepts(5, info_of_value(5))

    def test_width_mismatch(self):
        target = resolve_type(np.int32)
        assert not target.accepts(5, info_of_value(5))

    def test_bool_not_accepted_as_int(self):
        assert not resolve_type(int).accepts(True, info_of_value(True))

    def test_any_accepts_everything(self):
        assert ANY_INFO.accepts(object(), info_of_value(object()))

    def test_subclass_instance_accepted(self):
        class Base:
            pass

        class Child(Base):
            pass

        value = Child()
        assert resolve_type(Base).accepts(value, info_of_value(value))


class TestWidthHelpers:
    """寬度運算"""

    def test_ranges(self):
        assert signed_range(8) == (-128, 127)
        assert unsigned_max(16) == 65535

    def test_wrap(self):
        assert wrap_signed(200, 8) == -56
        assert wrap_signed(-129, 8) == 127
        assert wrap_unsigned(-1, 8) == 255
        assert wrap_unsigned(256, 8) == 0
