import pytest

from declscope.constants import Constant, constant_type, to_decimal
from declscope.types import PrimitiveType, SemanticError


@pytest.mark.parametrize(
    "text, expected",
    [
        ("42", PrimitiveType.INT),
        ("42u", PrimitiveType.U_INT),
        ("42l", PrimitiveType.LONG),
        ("42UL", PrimitiveType.U_LONG),
        ("42ll", PrimitiveType.LONG_LONG),
        ("42ull", PrimitiveType.U_LONG_LONG),
        ("2147483647", PrimitiveType.INT),
        ("2147483648", PrimitiveType.LONG),
        ("4294967295u", PrimitiveType.U_INT),
        ("4294967296u", PrimitiveType.U_LONG),
    ],
)
def test_integer_constant_types(text, expected):
    assert constant_type("I_CONSTANT", text).type_index == expected


def test_three_long_suffixes_give_error_type():
    assert constant_type("I_CONSTANT", "1lll").is_error()


def test_char_constant_type():
    result = constant_type("CHAR_CONSTANT", "'a'")
    assert result.type_index == PrimitiveType.CHAR
    assert result.is_char()


@pytest.mark.parametrize(
    "text, expected",
    [
        ("1.5f", PrimitiveType.FLOAT),
        ("1.5L", PrimitiveType.LONG_DOUBLE),
        ("1.5", PrimitiveType.FLOAT),
        ("1e39", PrimitiveType.DOUBLE),
        ("0.0", PrimitiveType.DOUBLE),
    ],
)
def test_floating_constant_types(text, expected):
    assert constant_type("F_CONSTANT", text).type_index == expected


def test_unknown_kind_raises():
    with pytest.raises(SemanticError):
        constant_type("STRING", "abc")


def test_integer_without_digits_raises():
    with pytest.raises(SemanticError):
        constant_type("I_CONSTANT", "u")


def test_to_decimal_leaves_decimal_text():
    assert to_decimal("123") == "123"


def test_to_decimal_hex_and_octal():
    assert to_decimal("0x1F") == str(0x1F)
    assert to_decimal("017") == str(0o17)
    assert to_decimal("0") == "0"


def test_to_decimal_stops_at_suffix():
    assert to_decimal("0x10u") == to_decimal("0x10")


def test_to_decimal_out_of_int_range_raises():
    with pytest.raises(SemanticError):
        to_decimal("0xFFFFFFFFFF")


def test_from_token_strips_suffix():
    constant = Constant.from_token("I_CONSTANT", "42UL")
    assert constant.value == "42"
    assert constant.text == "42UL"
    assert constant.type.type_index == PrimitiveType.U_LONG


def test_from_token_converts_hex():
    constant = Constant.from_token("I_CONSTANT", "0x10")
    assert constant.value == str(0x10)
    assert constant.type.type_index == PrimitiveType.INT


def test_from_token_keeps_char_text():
    constant = Constant.from_token("CHAR_CONSTANT", "'a'")
    assert constant.value == "'a'"
    assert constant.kind == "CHAR_CONSTANT"


def test_from_token_float_suffix_dropped():
    constant = Constant.from_token("F_CONSTANT", "2.5f")
    assert constant.value == "2.5"
    assert constant.type.is_float()


def test_from_token_value_has_no_letters_for_numbers():
    for text in ("7u", "7l", "7ull", "3.25L"):
        kind = "F_CONSTANT" if "." in text else "I_CONSTANT"
        constant = Constant.from_token(kind, text)
        assert not any(ch.isalpha() for ch in constant.value)