from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Callable, Mapping, Protocol
from urllib.parse import urlparse

from ..config import EngineConfig
from ..errors import InvalidConfigurationError, RemoteUnavailableError
from .http import HttpCaller, interpret_response, resolve_url
from .messages import Translator, render
from .schema import ConstraintDef


class FieldProvider(Protocol):
    """Read-only view of the other fields submitted in this pass."""

    def get_value(self, field_id: str) -> Any: ...

    def get_title(self, field_id: str) -> str: ...


@dataclass(frozen=True)
class ValidationContext:
    values: Mapping[str, Any] = field(default_factory=dict)
    titles: Mapping[str, str] = field(default_factory=dict)
    translator: Translator | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))
        object.__setattr__(self, "titles", MappingProxyType(dict(self.titles)))

    @classmethod
    def from_values(
        cls,
        values: Mapping[str, Any],
        titles: Mapping[str, str] | None = None,
        translator: Translator | None = None,
    ) -> ValidationContext:
        return cls(values=values, titles=titles or {}, translator=translator)

    def get_value(self, field_id: str) -> Any:
        if field_id not in self.values:
            raise InvalidConfigurationError(f"Field {field_id!r} does not exist in this form")
        return self.values[field_id]

    def get_title(self, field_id: str) -> str:
        return self.titles.get(field_id) or field_id


@dataclass(frozen=True)
class ConstraintContext:
    fields: FieldProvider
    config: EngineConfig
    http: HttpCaller
    translator: Translator | None = None


@dataclass(frozen=True)
class Outcome:
    passed: bool
    # Message supplied by the evaluation itself (remote responses); wins over overrides.
    message: str | None = None


PASS = Outcome(passed=True)
FAIL = Outcome(passed=False)

EvaluateFn = Callable[[ConstraintDef, Any, str, ConstraintContext], Outcome]
MessageFn = Callable[[ConstraintDef, ConstraintContext], str]


@dataclass(frozen=True)
class KindHandler:
    evaluate: EvaluateFn
    default_message: MessageFn
    # Empty values pass without calling `evaluate`.
    vacuous: bool = True


# -----------------------------------------------------------------------------
# Coercion helpers
# -----------------------------------------------------------------------------

_NUMERIC_RE = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        return len(value) == 0
    return False


def is_numeric(value: Any) -> bool:
    """True for ints, finite floats and numeric strings ("12", "-1.5", "1e3", ".5")."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return math.isfinite(value)
    return isinstance(value, str) and bool(_NUMERIC_RE.match(value))


_INT_MAX = 2**63 - 1
_INT_MIN = -(2**63)


def _saturate(number: int | float) -> int:
    if number >= _INT_MAX:
        return _INT_MAX
    if number <= _INT_MIN:
        return _INT_MIN
    return int(number)


def parse_int_or_default(value: Any, default: int = 0) -> int:
    """
    Coerce a submitted value to an integer for bound comparisons.

    Numeric strings are truncated toward zero ("7.9" -> 7, "1e3" -> 1000),
    strings with a leading integer use that prefix ("12abc" -> 12), and
    anything else becomes `default`. "notanumber" therefore compares as 0.

    Floats and strings outside the signed 64-bit range saturate at its
    limits, so "1e999" or a 5000-digit submission compares as 2**63 - 1.
    NaN becomes `default`.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return default if math.isnan(value) else _saturate(value)
    if value is None:
        return default

    text = str(value)
    if _NUMERIC_RE.match(text):
        return _saturate(float(text))
    m = _LEADING_INT_RE.match(text)
    if m:
        negative = m.group(1).startswith("-")
        digits = m.group(1).lstrip("+-").lstrip("0") or "0"
        if len(digits) > 19:
            return _INT_MIN if negative else _INT_MAX
        return _saturate(-int(digits) if negative else int(digits))
    return default


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _bounds(constraint: ConstraintDef) -> tuple[str, int | None, int | None]:
    params = constraint.params
    bound = str(params.get("bound", "")).strip().lower()
    if bound not in ("min", "max", "range"):
        raise InvalidConfigurationError(f"Unknown {constraint.kind} bound {params.get('bound')!r}")

    needed = {"min": ("min",), "max": ("max",), "range": ("min", "max")}[bound]
    missing = [k for k in needed if params.get(k) is None]
    if missing:
        raise InvalidConfigurationError(
            f"{constraint.kind} {bound} constraint is missing {', '.join(missing)}"
        )

    lo = parse_int_or_default(params["min"]) if "min" in needed else None
    hi = parse_int_or_default(params["max"]) if "max" in needed else None
    return bound, lo, hi


def _within(number: int, lo: int | None, hi: int | None) -> bool:
    if lo is not None and number < lo:
        return False
    if hi is not None and number > hi:
        return False
    return True


# -----------------------------------------------------------------------------
# Required
# -----------------------------------------------------------------------------


def evaluate_required(constraint: ConstraintDef, value: Any, field_id: str, ctx: ConstraintContext) -> Outcome:
    return FAIL if is_empty(value) else PASS


def message_required(constraint: ConstraintDef, ctx: ConstraintContext) -> str:
    return render("ZenValidator.REQUIRED", ctx.translator)


# -----------------------------------------------------------------------------
# Length / Value
# -----------------------------------------------------------------------------


def evaluate_length(constraint: ConstraintDef, value: Any, field_id: str, ctx: ConstraintContext) -> Outcome:
    _, lo, hi = _bounds(constraint)
    return PASS if _within(len(_text(value).strip()), lo, hi) else FAIL


def message_length(constraint: ConstraintDef, ctx: ConstraintContext) -> str:
    bound, lo, hi = _bounds(constraint)
    key = {"min": "MINLENGTH", "max": "MAXLENGTH", "range": "RANGELENGTH"}[bound]
    return render(f"ZenValidator.{key}", ctx.translator, min=lo, max=hi)


def evaluate_value(constraint: ConstraintDef, value: Any, field_id: str, ctx: ConstraintContext) -> Outcome:
    _, lo, hi = _bounds(constraint)
    return PASS if _within(parse_int_or_default(value), lo, hi) else FAIL


def message_value(constraint: ConstraintDef, ctx: ConstraintContext) -> str:
    bound, lo, hi = _bounds(constraint)
    return render(f"ZenValidator.{bound.upper()}", ctx.translator, min=lo, max=hi)


# -----------------------------------------------------------------------------
# Regex
# -----------------------------------------------------------------------------

_DELIMITED_RE = re.compile(r"^/(.*)/([A-Za-z]*)$", flags=re.DOTALL)
_PATTERN_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
    "u": 0,
}


@lru_cache(maxsize=256)
def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a bare pattern or a `/body/flags` delimited one."""
    body = pattern
    flags = 0
    m = _DELIMITED_RE.match(pattern)
    if m:
        body = m.group(1)
        for letter in m.group(2):
            if letter not in _PATTERN_FLAGS:
                raise InvalidConfigurationError(f"Unsupported pattern flag {letter!r} in {pattern!r}")
            flags |= _PATTERN_FLAGS[letter]

    try:
        return re.compile(body, flags)
    except re.error as e:
        raise InvalidConfigurationError(f"Invalid pattern {pattern!r}: {e}") from e


def evaluate_regex(constraint: ConstraintDef, value: Any, field_id: str, ctx: ConstraintContext) -> Outcome:
    pattern = constraint.params.get("pattern")
    if not isinstance(pattern, str) or not pattern:
        raise InvalidConfigurationError("regex constraint requires a pattern")
    return PASS if compile_pattern(pattern).search(_text(value)) else FAIL


def message_regex(constraint: ConstraintDef, ctx: ConstraintContext) -> str:
    return render("ZenValidator.REGEXP", ctx.translator)


# -----------------------------------------------------------------------------
# Type
# -----------------------------------------------------------------------------

_EMAIL_LOCAL_RE = re.compile(r"^[A-Za-z0-9!#$%&'*+/=?^_`{|}~.-]+$")
_EMAIL_DOMAIN_RE = re.compile(
    r"^[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)+$"
)
_URL_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*$")
_DIGITS_RE = re.compile(r"[0-9]*")


def is_email(value: Any) -> bool:
    text = _text(value)
    local, sep, domain = text.rpartition("@")
    if not sep or not local or len(local) > 64 or len(text) > 254:
        return False
    if local.startswith(".") or local.endswith(".") or ".." in local:
        return False
    return bool(_EMAIL_LOCAL_RE.match(local)) and bool(_EMAIL_DOMAIN_RE.match(domain))


def is_url(value: Any) -> bool:
    text = _text(value)
    if not text or any(ch.isspace() for ch in text):
        return False
    parsed = urlparse(text)
    return bool(_URL_SCHEME_RE.match(parsed.scheme)) and bool(parsed.netloc) and bool(parsed.hostname)


def is_integer(value: Any) -> bool:
    # Only real ints qualify; "42" is a string, not an integer.
    return isinstance(value, int) and not isinstance(value, bool)


def is_digits(value: Any) -> bool:
    return _DIGITS_RE.fullmatch(_text(value)) is not None


def is_alphanum(value: Any) -> bool:
    text = _text(value)
    return text.isascii() and text.isalnum()


TYPE_CHECKS: dict[str, Callable[[Any], bool]] = {
    "email": is_email,
    "url": is_url,
    "number": is_numeric,
    "integer": is_integer,
    "digits": is_digits,
    "alphanum": is_alphanum,
}


def _type_kind(constraint: ConstraintDef) -> str:
    kind = str(constraint.params.get("type", "")).strip().lower()
    if kind not in TYPE_CHECKS:
        raise InvalidConfigurationError(f"Unknown type {constraint.params.get('type')!r}")
    return kind


def evaluate_type(constraint: ConstraintDef, value: Any, field_id: str, ctx: ConstraintContext) -> Outcome:
    return PASS if TYPE_CHECKS[_type_kind(constraint)](value) else FAIL


def message_type(constraint: ConstraintDef, ctx: ConstraintContext) -> str:
    return render(f"ZenValidator.{_type_kind(constraint).upper()}", ctx.translator)


# -----------------------------------------------------------------------------
# EqualTo
# -----------------------------------------------------------------------------


def _target(constraint: ConstraintDef) -> str:
    target = constraint.params.get("target")
    if not isinstance(target, str) or not target.strip():
        raise InvalidConfigurationError("equalto constraint requires a target field")
    return target


def evaluate_equalto(constraint: ConstraintDef, value: Any, field_id: str, ctx: ConstraintContext) -> Outcome:
    other = ctx.fields.get_value(_target(constraint))
    return PASS if _text(other) == _text(value) else FAIL


def message_equalto(constraint: ConstraintDef, ctx: ConstraintContext) -> str:
    return render("ZenValidator.EQUALTO", ctx.translator, title=ctx.fields.get_title(_target(constraint)))


# -----------------------------------------------------------------------------
# Remote
# -----------------------------------------------------------------------------


def evaluate_remote(constraint: ConstraintDef, value: Any, field_id: str, ctx: ConstraintContext) -> Outcome:
    params = constraint.params
    url = params.get("url")
    if not isinstance(url, str) or not url.strip():
        raise InvalidConfigurationError("remote constraint requires a url")

    method = str(params.get("method", "GET")).strip().upper()
    if method not in ("GET", "POST"):
        raise InvalidConfigurationError(f"Unsupported remote method {method!r}")

    extra = params.get("params") or {}
    if not isinstance(extra, Mapping):
        raise InvalidConfigurationError("remote params must be a table of request variables")
    request_params = {**extra, field_id: value}

    endpoint = resolve_url(url.strip(), ctx.config.base_url)
    try:
        status, body = ctx.http.call(endpoint, method, request_params, ctx.config.remote_timeout_s)
    except OSError as e:
        # Callers other than UrllibHttpCaller may surface raw connection errors.
        raise RemoteUnavailableError(f"Remote validation connection error: {e}") from e
    verdict = interpret_response(status, body, invert=bool(params.get("invert", False)))
    return Outcome(passed=verdict.passed, message=verdict.message)


def message_remote(constraint: ConstraintDef, ctx: ConstraintContext) -> str:
    return render("ZenValidator.REMOTE", ctx.translator)


HANDLERS: dict[str, KindHandler] = {
    "required": KindHandler(evaluate_required, message_required, vacuous=False),
    "length": KindHandler(evaluate_length, message_length),
    "value": KindHandler(evaluate_value, message_value),
    "regex": KindHandler(evaluate_regex, message_regex),
    "type": KindHandler(evaluate_type, message_type),
    "equalto": KindHandler(evaluate_equalto, message_equalto, vacuous=False),
    "remote": KindHandler(evaluate_remote, message_remote),
}


def register_kind(kind: str, evaluate: EvaluateFn, default_message: MessageFn, *, vacuous: bool = True) -> None:
    """Add (or replace) a constraint kind in the handler table."""
    HANDLERS[kind] = KindHandler(evaluate, default_message, vacuous=vacuous)
