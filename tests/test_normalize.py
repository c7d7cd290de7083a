from printqueue.normalize import (
    build_fallback_identifier,
    normalize_float,
    normalize_identifier,
    normalize_integer,
    normalize_text,
)


def test_normalize_integer_floors_numeric_input():
    assert normalize_integer("3.7") == 3
    assert normalize_integer(4.2) == 4
    assert normalize_integer("-1.5") == -2


def test_normalize_integer_returns_fallback_for_garbage():
    assert normalize_integer("abc", 0) == 0
    assert normalize_integer("", 5) == 5
    assert normalize_integer(None, None) is None
    assert normalize_integer(float("nan"), 1) == 1
    assert normalize_integer({"x": 1}, 7) == 7


def test_normalize_float():
    assert normalize_float("12.5") == 12.5
    assert normalize_float("inf", 0.0) == 0.0


def test_normalize_text_and_identifier():
    assert normalize_text("  Maria ") == "Maria"
    assert normalize_text("   ") is None
    assert normalize_identifier(" pedido-7 ") == "PEDIDO-7"
    assert normalize_identifier("") is None


def test_build_fallback_identifier():
    assert build_fallback_identifier(123) == "JOB-000123"
    assert build_fallback_identifier(1234567) == "JOB-1234567"
