"""Constructors for the built-in constraint kinds.

Parameters are stored as given; problems such as an unknown bound or a
malformed pattern are reported when the constraint is first evaluated.

    required()
    length("min", 5)            # at least 5 characters
    length("range", 5, 10)      # between 5 and 10 characters
    value("max", 100)
    regex(r"/^#(?:[0-9a-fA-F]{3}){1,2}$/")
    type_of("email")
    equal_to("Password")
    remote("/check-username", method="POST")
"""

from __future__ import annotations

from typing import Any

from .schema import ConstraintDef


def _bounds(bound: str, val1: Any, val2: Any) -> dict[str, Any]:
    if bound == "max":
        return {"bound": bound, "max": val1}
    params: dict[str, Any] = {"bound": bound, "min": val1}
    if val2 is not None:
        params["max"] = val2
    return params


def required(message: str | None = None) -> ConstraintDef:
    return ConstraintDef(kind="required", message=message)


def length(bound: str, val1: Any, val2: Any = None, *, message: str | None = None) -> ConstraintDef:
    return ConstraintDef(kind="length", params=_bounds(bound, val1, val2), message=message)


def value(bound: str, val1: Any, val2: Any = None, *, message: str | None = None) -> ConstraintDef:
    return ConstraintDef(kind="value", params=_bounds(bound, val1, val2), message=message)


def regex(pattern: str, *, message: str | None = None) -> ConstraintDef:
    return ConstraintDef(kind="regex", params={"pattern": pattern}, message=message)


def type_of(type_kind: str, *, message: str | None = None) -> ConstraintDef:
    return ConstraintDef(kind="type", params={"type": type_kind}, message=message)


def equal_to(target: str, *, message: str | None = None) -> ConstraintDef:
    return ConstraintDef(kind="equalto", params={"target": target}, message=message)


def remote(
    url: str,
    params: dict[str, Any] | None = None,
    *,
    method: str = "GET",
    invert: bool = False,
    message: str | None = None,
) -> ConstraintDef:
    """Validate against an endpoint; `invert` flips the meaning of literal answers."""
    return ConstraintDef(
        kind="remote",
        params={
            "url": url,
            "params": dict(params or {}),
            "method": method,
            "invert": invert,
        },
        message=message,
    )
