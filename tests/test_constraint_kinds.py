"""Per-kind constraint semantics."""

from __future__ import annotations

from typing import Any

import pytest

from zenvalidator.constraints import (
    ConstraintDef,
    ConstraintSet,
    ValidationContext,
    ValidationResult,
    equal_to,
    length,
    parse_int_or_default,
    regex,
    register_kind,
    remote,
    required,
    type_of,
    value,
)
from zenvalidator.constraints.predicates import HANDLERS, PASS, FAIL

from .conftest import FakeHttpCaller


def _run(constraint: ConstraintDef, submitted: Any, context: ValidationContext | None = None) -> ValidationResult:
    cs = ConstraintSet(http=FakeHttpCaller(default=(200, "0")))
    cs.register("Field", constraint)
    return cs.validate("Field", submitted, context)


# -----------------------------------------------------------------------------
# Vacuous pass
# -----------------------------------------------------------------------------


@pytest.mark.parametrize(
    "constraint",
    [
        length("min", 5),
        length("max", 2),
        length("range", 5, 10),
        value("min", 5),
        value("range", 5, 10),
        regex("^[0-9]+$"),
        type_of("email"),
        type_of("url"),
        type_of("number"),
        type_of("integer"),
        type_of("digits"),
        type_of("alphanum"),
        remote("https://api.example.com/check"),
    ],
    ids=lambda c: c.name,
)
@pytest.mark.parametrize("empty", ["", None])
def test_empty_value_passes_for_optional_kinds(constraint: ConstraintDef, empty: Any) -> None:
    result = _run(constraint, empty)
    assert result.passed
    assert result.error_kind is None


def test_empty_remote_value_makes_no_call() -> None:
    http = FakeHttpCaller(default=(200, "0"))
    cs = ConstraintSet(http=http).register("Username", remote("https://api.example.com/check"))
    assert cs.validate("Username", "").passed
    assert http.calls == []


# -----------------------------------------------------------------------------
# Required
# -----------------------------------------------------------------------------


@pytest.mark.parametrize("empty", ["", None, [], {}])
def test_required_fails_on_empty(empty: Any) -> None:
    result = _run(required(), empty)
    assert not result.passed
    assert result.error_kind == "validation_failed"
    assert result.message == "This field is required"
    assert result.constraint == "required"


@pytest.mark.parametrize("present", ["x", "0", " ", 0, ["a"]])
def test_required_passes_on_present_value(present: Any) -> None:
    assert _run(required(), present).passed


# -----------------------------------------------------------------------------
# Length
# -----------------------------------------------------------------------------


def test_length_min() -> None:
    assert not _run(length("min", 5), "abc").passed
    assert _run(length("min", 5), "abcde").passed


def test_length_max() -> None:
    assert _run(length("max", 5), "abcde").passed
    result = _run(length("max", 5), "abcdef")
    assert not result.passed
    assert result.message == "This value is too long. It should have 5 characters or less"
    assert result.constraint == "maxlength"


def test_length_range() -> None:
    c = length("range", 5, 10)
    assert not _run(c, "abcdefghijk").passed
    assert not _run(c, "abcd").passed
    assert _run(c, "abcde").passed
    assert _run(c, "abcdefghij").passed
    assert _run(c, "abcd").message == (
        "This value length is invalid. It should be between 5 and 10 characters long"
    )


def test_length_uses_trimmed_value() -> None:
    result = _run(length("min", 5), "  abc   ")
    assert not result.passed
    assert result.message == "This value is too short. It should have 5 characters or more"


def test_length_counts_characters_not_bytes() -> None:
    assert _run(length("max", 5), "héllo").passed


def test_length_string_bounds_are_coerced() -> None:
    assert not _run(length("min", "5"), "abc").passed


def test_length_range_without_upper_bound_is_invalid_configuration() -> None:
    result = _run(length("range", 5), "abcdef")
    assert not result.passed
    assert result.error_kind == "invalid_configuration"
    assert "max" in result.message


def test_unknown_bound_is_invalid_configuration() -> None:
    result = _run(length("between", 1, 2), "abc")
    assert result.error_kind == "invalid_configuration"


# -----------------------------------------------------------------------------
# Value
# -----------------------------------------------------------------------------


def test_value_range() -> None:
    c = value("range", 5, 10)
    assert _run(c, "7").passed
    assert _run(c, "5").passed
    assert _run(c, "10").passed
    result = _run(c, "11")
    assert not result.passed
    assert result.message == "This value should be between 5 and 10"
    assert result.constraint == "range"


def test_value_min_and_max_messages() -> None:
    assert _run(value("min", 5), "4").message == "This value should be greater than or equal to 5"
    assert _run(value("max", 5), "6").message == "This value should be less than or equal to 5"


def test_value_non_numeric_input_coerces_to_zero() -> None:
    # "notanumber" compares as 0: below a minimum of 5, within a maximum of 10.
    assert not _run(value("min", 5), "notanumber").passed
    assert _run(value("max", 10), "notanumber").passed
    assert _run(value("range", -1, 1), "notanumber").passed


def test_value_accepts_native_numbers() -> None:
    assert _run(value("range", 5, 10), 7).passed
    # Floats truncate toward zero before comparing.
    assert _run(value("range", 5, 10), 10.5).passed
    assert not _run(value("range", 5, 10), 11.2).passed


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("42", 42),
        ("-7", -7),
        ("+3", 3),
        ("  12  ", 12),
        ("7.9", 7),
        ("-7.9", -7),
        ("1e3", 1000),
        (".5", 0),
        ("12abc", 12),
        ("abc12", 0),
        ("notanumber", 0),
        ("", 0),
        (None, 0),
        (True, 1),
        (15, 15),
        (3.99, 3),
        (float("nan"), 0),
        ("9" * 5000, 2**63 - 1),
        ("-" + "9" * 5000, -(2**63)),
        ("1e999", 2**63 - 1),
        ("-1e999", -(2**63)),
        ("9" * 5000 + "abc", 2**63 - 1),
        ("0" * 5000 + "5abc", 5),
        (float("inf"), 2**63 - 1),
    ],
)
def test_parse_int_or_default(raw: Any, expected: int) -> None:
    assert parse_int_or_default(raw) == expected


def test_parse_int_or_default_custom_default() -> None:
    assert parse_int_or_default("n/a", default=-1) == -1


def test_value_on_oversized_number_is_ordinary_failure() -> None:
    result = _run(value("max", 10), "9" * 5000)
    assert not result.passed
    assert result.error_kind == "validation_failed"
    assert result.message == "This value should be less than or equal to 10"
    assert _run(value("min", 10), "9" * 5000).passed


# -----------------------------------------------------------------------------
# Regex
# -----------------------------------------------------------------------------


def test_regex_digits_pattern() -> None:
    c = regex("^[0-9]+$")
    assert _run(c, "123").passed
    assert not _run(c, "12a").passed
    assert _run(c, "").passed
    assert _run(c, "12a").message == "This value seems to be invalid"
    assert _run(c, "12a").constraint == "pattern"


def test_regex_uses_search_semantics() -> None:
    assert _run(regex("[0-9]"), "abc1").passed


def test_regex_accepts_delimited_pattern_with_flags() -> None:
    c = regex("/^#(?:[0-9a-f]{3}){1,2}$/i")
    assert _run(c, "#A0C").passed
    assert _run(c, "#a0c0ff").passed
    assert not _run(c, "a0c").passed


def test_regex_malformed_pattern_is_invalid_configuration() -> None:
    result = _run(regex("^([0-9]+$"), "123")
    assert not result.passed
    assert result.error_kind == "invalid_configuration"
    assert "Invalid pattern" in result.message


def test_regex_unknown_flag_is_invalid_configuration() -> None:
    assert _run(regex("/abc/q"), "abc").error_kind == "invalid_configuration"


# -----------------------------------------------------------------------------
# Type
# -----------------------------------------------------------------------------


@pytest.mark.parametrize(
    "type_kind, good, bad",
    [
        ("email", "jane.doe+forms@example.co.uk", "jane@localhost"),
        ("email", "j_d@sub.example.org", "jane..doe@example.com"),
        ("email", "x@example.io", "@example.com"),
        ("url", "https://example.com/path?q=1", "example.com"),
        ("url", "ftp://files.example.org", "http://"),
        ("url", "http://localhost:8080/", "http://exa mple.com"),
        ("number", "12.5", "12,5"),
        ("number", "-1e3", "abc"),
        ("number", 7, "1.2.3"),
        ("integer", 42, "42"),
        ("integer", -3, 4.0),
        ("digits", "0123", "12a"),
        ("digits", "9", "-9"),
        ("alphanum", "abc123", "abc-123"),
        ("alphanum", "ABC", "héllo"),
    ],
)
def test_type_checks(type_kind: str, good: Any, bad: Any) -> None:
    c = type_of(type_kind)
    assert _run(c, good).passed, good
    assert not _run(c, bad).passed, bad


def test_integer_type_rejects_numeric_strings_and_bools() -> None:
    assert not _run(type_of("integer"), "42").passed
    assert not _run(type_of("integer"), True).passed


def test_type_messages() -> None:
    assert _run(type_of("email"), "nope").message == "This value should be a valid email"
    assert _run(type_of("url"), "nope").message == "This value should be a valid URL"
    assert _run(type_of("number"), "nope").message == "This value should be a number"
    assert _run(type_of("alphanum"), "no pe").message == "This value should be alphanumeric"


def test_unknown_type_is_invalid_configuration() -> None:
    result = _run(type_of("colour"), "red")
    assert result.error_kind == "invalid_configuration"
    assert "colour" in result.message


# -----------------------------------------------------------------------------
# EqualTo
# -----------------------------------------------------------------------------


@pytest.mark.parametrize("submitted", ["secret", "", "пароль", "密码🔒", "  spaced  "])
def test_equalto_passes_iff_target_matches(submitted: str) -> None:
    c = equal_to("password2")
    same = ValidationContext.from_values({"Field": submitted, "password2": submitted})
    other = ValidationContext.from_values({"Field": submitted, "password2": submitted + "x"})
    assert _run(c, submitted, same).passed
    assert not _run(c, submitted, other).passed


def test_equalto_empty_against_filled_target_fails() -> None:
    ctx = ValidationContext.from_values({"password2": "secret"})
    assert not _run(equal_to("password2"), "", ctx).passed


def test_equalto_message_uses_target_title() -> None:
    ctx = ValidationContext.from_values(
        {"password2": "b"},
        titles={"password2": "Confirm password"},
    )
    result = _run(equal_to("password2"), "a", ctx)
    assert result.message == 'This value should be the same as the field "Confirm password"'
    assert result.constraint == "equalto"


def test_equalto_message_falls_back_to_field_id() -> None:
    ctx = ValidationContext.from_values({"password2": "b"})
    assert _run(equal_to("password2"), "a", ctx).message.endswith('"password2"')


def test_equalto_missing_target_is_invalid_configuration() -> None:
    ctx = ValidationContext.from_values({"Field": "a"})
    result = _run(equal_to("NoSuchField"), "a", ctx)
    assert not result.passed
    assert result.error_kind == "invalid_configuration"
    assert "NoSuchField" in result.message


# -----------------------------------------------------------------------------
# Messages, unknown kinds, registered kinds
# -----------------------------------------------------------------------------


def test_custom_message_overrides_default() -> None:
    result = _run(length("min", 5).with_message("Too short!"), "abc")
    assert result.message == "Too short!"


def test_with_message_returns_copy() -> None:
    base = required()
    custom = base.with_message("Please fill this in")
    assert base.message is None
    assert custom.message == "Please fill this in"
    assert custom.kind == base.kind


def test_unknown_kind_is_invalid_configuration() -> None:
    result = _run(ConstraintDef(kind="telepathy"), "x")
    assert result.error_kind == "invalid_configuration"


@pytest.fixture
def even_kind():
    register_kind(
        "even",
        lambda c, v, field_id, ctx: PASS if int(v) % 2 == 0 else FAIL,
        lambda c, ctx: "This value should be even",
    )
    yield
    HANDLERS.pop("even", None)


def test_registered_kind_is_dispatched(even_kind) -> None:
    c = ConstraintDef(kind="even")
    assert _run(c, "4").passed
    result = _run(c, "3")
    assert not result.passed
    assert result.message == "This value should be even"
    assert _run(c, "").passed


def test_handler_exception_does_not_escape(even_kind) -> None:
    result = _run(ConstraintDef(kind="even"), "four")
    assert not result.passed
    assert result.error_kind == "invalid_configuration"
    assert "ValueError" in result.message
