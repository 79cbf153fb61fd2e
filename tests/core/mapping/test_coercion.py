"""值轉換規則測試"""

import math
from dataclasses import dataclass, field
from typing import Any, Optional

import numpy as np
import pytest

from field_mapper import (
    NullFloat64,
    NullInt32,
    NullInt64,
    NullString,
    RecordDescriptor,
    coerce,
)
from field_mapper.core.mapping.coercion import format_float, parse_float, parse_int, parse_uint
from field_mapper.core.types.kinds import ANY_INFO, resolve_type


class Money:
    def __init__(self, cents):
        self.cents = cents


class Euro(Money):
    pass


@dataclass
class Target:
    text: str = "unchanged"
    number: int = 7
    real: float = 1.5
    int8: np.int8 = np.int8(0)
    int32: np.int32 = np.int32(0)
    int64: np.int64 = np.int64(0)
    uint8: np.uint8 = np.uint8(0)
    uint64: np.uint64 = np.uint64(0)
    float32: np.float32 = np.float32(0)
    flag: bool = False
    money: Optional[Money] = None
    wallet: Money = None
    anything: Any = None
    maybe: Optional[int] = None
    items: list = field(default_factory=list)


def slot_of(record, name):
    return RecordDescriptor(record).slot(name)


def run(value, name, declared=None):
    target = Target()
    applied = coerce(value, slot_of(target, name), declared)
    return applied, getattr(target, name)


class TestOptionalUnwrap:
    """規則 1: Optional 拆包"""

    def test_absent_source_skips(self):
        assert run(None, "number") == (False, 7)

    def test_optional_source_declared(self):
        assert run("3", "number", resolve_type(Optional[str])) == (True, 3)

    def test_present_optional_destination_receives_inner_type(self):
        target = Target(maybe=5)
        assert coerce("12", slot_of(target, "maybe")) is True
        assert target.maybe == 12

    def test_absent_optional_destination_not_assigned(self):
        target = Target()
        assert coerce(12, slot_of(target, "maybe")) is False
        assert target.maybe is None


class TestAnyUnwrap:
    """規則 2: Any 拆包"""

    def test_held_float_formatted_into_text(self):
        assert run(123.345, "text", ANY_INFO) == (True, "123.345")

    def test_held_int_formatted_into_text(self):
        assert run(np.uint16(65535), "text", ANY_INFO) == (True, "65535")

    def test_held_value_assignable(self):
        assert run(5, "number", ANY_INFO) == (True, 5)

    def test_held_unsupported_kind_into_text_is_noop(self):
        assert run(True, "text", ANY_INFO) == (False, "unchanged")
        assert run(NullInt64(1, True), "text", ANY_INFO) == (False, "unchanged")

    def test_held_value_continues_through_later_rules(self):
        assert run("42", "number", ANY_INFO) == (True, 42)
        assert run(NullInt64(3, True), "number", ANY_INFO) == (True, 3)

    def test_any_destination_takes_value_as_is(self):
        money = Money(10)
        assert run(money, "anything") == (True, money)
        assert run("1,234", "anything") == (True, "1,234")


class TestNullableUnwrap:
    """規則 3: Nullable 拆包"""

    def test_valid_payload(self):
        assert run(NullInt64(7, True), "number") == (True, 7)
        assert run(NullString("1,000", True), "number") == (True, 1000)
        assert run(NullFloat64(2.5, True), "text") == (True, "2.5")

    def test_invalid_numeric_maps_to_zero(self):
        assert run(NullInt64(99, False), "number") == (True, 0)
        assert run(NullFloat64(9.5, False), "real") == (True, 0.0)
        assert run(NullInt64(99, False), "text") == (True, "0")

    def test_invalid_sized_default_needs_matching_width(self):
        assert run(NullInt32(5, False), "number") == (False, 7)
        assert run(NullFloat64(1.0, False), "float32") == (False, 0)
        assert run(NullInt32(5, False), "int32") == (True, 0)
        assert type(run(NullInt32(5, False), "int32")[1]) is np.int32

    def test_invalid_string_maps_to_single_space(self):
        assert run(NullString("x", False), "text") == (True, " ")

    def test_sized_payload_keeps_width(self):
        applied, value = run(NullInt32(12, True), "int32")
        assert applied is True
        assert value == 12
        assert type(value) is np.int32

    def test_same_wrapper_type_is_not_copied(self):
        @dataclass
        class Holder:
            amount: NullInt64 = None

        holder = Holder(amount=NullInt64(1, True))
        assert coerce(NullInt64(5, True), slot_of(holder, "amount")) is False
        assert holder.amount == NullInt64(1, True)


class TestFormatIntoText:
    """規則 4: 轉為字串"""

    @pytest.mark.parametrize("value, expected", [
        (42, "42"),
        (-42, "-42"),
        (np.int8(-5), "-5"),
        (np.uint64(2 ** 64 - 1), "18446744073709551615"),
        (0.1, "0.1"),
        (123.0, "123"),
        (1e21, "1000000000000000000000"),
        (1e-7, "0.0000001"),
        (-0.0, "-0"),
        (np.float32(0.1), "0.10000000149011612"),
        (float("nan"), "NaN"),
        (float("inf"), "+Inf"),
        (float("-inf"), "-Inf"),
        (" a,b ", " a,b "),
    ])
    def test_formatting(self, value, expected):
        assert run(value, "text") == (True, expected)

    def test_unsupported_kinds_are_noop(self):
        assert run(True, "text") == (False, "unchanged")
        assert run([1, 2], "text") == (False, "unchanged")
        assert run(Money(1), "text") == (False, "unchanged")


class TestParseText:
    """規則 5: 字串解析"""

    def test_float_with_thousands_separator(self):
        assert run(" 1,234.50 ", "real") == (True, 1234.5)

    def test_decimal_point_fails_for_integer(self):
        assert run(" 1,234.50 ", "number") == (False, 7)

    @pytest.mark.parametrize("text, name, expected", [
        ("1234", "number", 1234),
        ("-12", "int8", -12),
        ("+12", "int8", 12),
        ("007", "number", 7),
        ("255", "uint8", 255),
        ("1e3", "real", 1000.0),
        (".5", "real", 0.5),
        ("3.25", "float32", 3.25),
    ])
    def test_successful_parse(self, text, name, expected):
        applied, value = run(text, name)
        assert applied is True
        assert value == expected

    @pytest.mark.parametrize("text, name", [
        ("128", "int8"),
        ("-1", "uint8"),
        ("+5", "uint8"),
        ("256", "uint8"),
        ("abc", "number"),
        ("", "number"),
        ("1_000", "number"),
        ("1e400", "real"),
        ("1e39", "float32"),
        ("12abc", "real"),
    ])
    def test_failed_parse_keeps_previous_value(self, text, name):
        target = Target()
        before = getattr(target, name)
        assert coerce(text, slot_of(target, name)) is False
        assert getattr(target, name) == before

    def test_parsed_value_uses_destination_type(self):
        applied, value = run("-12", "int8")
        assert type(value) is np.int8

    def test_special_float_literals(self):
        assert run("inf", "real") == (True, math.inf)
        applied, value = run("NaN", "real")
        assert applied is True
        assert math.isnan(value)

    def test_text_into_bool_is_noop(self):
        assert run("true", "flag") == (False, False)


class TestNumericConversion:
    """規則 6: 跨數值家族轉換"""

    def test_float_truncates_toward_zero(self):
        assert run(9.9, "number") == (True, 9)
        assert run(-9.9, "number") == (True, -9)

    def test_float_wraps_to_destination_width(self):
        applied, value = run(300.7, "int8")
        assert applied is True
        assert value == 44
        assert type(value) is np.int8

    def test_negative_float_into_unsigned_wraps(self):
        assert run(-1.5, "uint8") == (True, 255)

    def test_non_finite_float_into_integer_is_noop(self):
        assert run(float("nan"), "number") == (False, 7)
        assert run(float("inf"), "uint64") == (False, 0)

    def test_integer_into_float(self):
        assert run(3, "real") == (True, 3.0)
        applied, value = run(np.uint16(7), "float32")
        assert applied is True
        assert type(value) is np.float32
        assert value == np.float32(7.0)

    def test_integer_into_float32_rounds(self):
        assert run(2 ** 24 + 1, "float32") == (True, np.float32(2 ** 24))


class TestAssignable:
    """規則 7、8: 直接指派與其餘情況"""

    def test_same_type(self):
        assert run(True, "flag") == (True, True)
        assert run(2.5, "real") == (True, 2.5)

    def test_same_kind_and_width_converts_to_declared_type(self):
        applied, value = run(5, "int64")
        assert applied is True
        assert type(value) is np.int64

    def test_width_mismatch_is_noop(self):
        assert run(np.int32(5), "number") == (False, 7)
        assert run(5, "int32") == (False, 0)
        assert run(2.5, "float32") == (False, 0)

    def test_bool_and_int_do_not_mix(self):
        assert run(True, "number") == (False, 7)
        assert run(1, "flag") == (False, False)

    def test_class_instances(self):
        euro = Euro(5)
        assert run(euro, "wallet") == (True, euro)
        assert run(Money(1), "items") == (False, [])

    def test_list_of_same_type(self):
        items = [1, 2]
        assert run(items, "items") == (True, items)


class TestNotSettable:
    """不可寫入的目標"""

    def test_frozen_destination(self):
        @dataclass(frozen=True)
        class Frozen:
            number: int = 1

        frozen = Frozen()
        assert coerce(5, slot_of(frozen, "number")) is False
        assert frozen.number == 1


class TestParsers:
    """解析函數"""

    def test_parse_int_range(self):
        assert parse_int("127", 8) == 127
        assert parse_int("-128", 8) == -128
        assert parse_int("-129", 8) is None

    def test_parse_uint_rejects_sign(self):
        assert parse_uint("+1", 8) is None
        assert parse_uint("1", 8) == 1

    def test_parse_float(self):
        assert parse_float("5.", 64) == 5.0
        assert parse_float("-infinity", 64) == -math.inf
        assert parse_float("1e400", 64) is None

    def test_format_float_round_trip(self):
        for value in (0.1, 123.345, 1 / 3, 2.5e-10):
            assert float(format_float(value)) == value
