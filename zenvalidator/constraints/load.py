from __future__ import annotations

from pathlib import Path
from typing import Any

from ..config import EngineConfig
from .engine import ConstraintSet
from .http import HttpCaller
from .schema import ConstraintDef

_KIND_ALIASES = {
    "equal_to": "equalto",
    "pattern": "regex",
}


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _bound_params(raw: dict[str, Any]) -> dict[str, Any]:
    bound = str(raw.get("bound", "")).strip().lower()
    params: dict[str, Any] = {"bound": bound}

    values = raw.get("values")
    if isinstance(values, list) and values:
        if bound == "max":
            params["max"] = values[0]
        else:
            params["min"] = values[0]
            if len(values) > 1:
                params["max"] = values[1]

    for key in ("min", "max"):
        if key in raw:
            params[key] = raw[key]
    return params


def _remote_params(raw: dict[str, Any]) -> dict[str, Any]:
    options = _coerce_dict(raw.get("options"))
    method = raw.get("method", options.get("type", "GET"))
    invert = bool(raw.get("invert", False)) or str(raw.get("validator", "")).strip().lower() == "reverse"
    return {
        "url": raw.get("url"),
        "params": _coerce_dict(raw.get("params")),
        "method": str(method),
        "invert": invert,
    }


def parse_constraint(raw: dict[str, Any]) -> ConstraintDef:
    """Build a ConstraintDef from one `[[constraints]]` table (field key already read)."""
    kind = str(raw.get("kind", "")).strip().lower()
    kind = _KIND_ALIASES.get(kind, kind)
    if not kind:
        raise ValueError("constraint kind is required")

    if kind in ("length", "value"):
        params = _bound_params(raw)
    elif kind == "remote":
        params = _remote_params(raw)
    else:
        params = {k: v for k, v in raw.items() if k not in ("field", "kind", "message")}

    message = raw.get("message")
    return ConstraintDef(
        kind=kind,
        params=params,
        message=str(message) if isinstance(message, str) and message else None,
    )


def load_constraint_set(path: Path, *, http: HttpCaller | None = None) -> ConstraintSet:
    """
    Load field constraints, titles and engine settings from TOML.

    Constraint parameters are kept as written; unusable ones are reported as
    invalid_configuration results when first evaluated.
    """
    import tomllib

    data = tomllib.loads(path.read_text(encoding="utf-8"))

    config = EngineConfig.from_dict(_coerce_dict(data.get("settings")))
    titles = {str(k): str(v) for k, v in _coerce_dict(data.get("titles")).items()}
    constraint_set = ConstraintSet(config, http=http, titles=titles)

    for index, raw in enumerate(data.get("constraints", [])):
        if not isinstance(raw, dict):
            continue

        field_id = str(raw.get("field", "")).strip()
        if not field_id:
            raise ValueError(f"constraints[{index}]: field is required")

        try:
            constraint = parse_constraint(raw)
        except ValueError as e:
            raise ValueError(f"constraints[{index}] ({field_id}): {e}") from e
        constraint_set.register(field_id, constraint)

    return constraint_set
