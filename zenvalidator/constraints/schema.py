from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Literal


Kind = Literal["required", "length", "value", "regex", "type", "equalto", "remote"]
Bound = Literal["min", "max", "range"]
TypeKind = Literal["email", "url", "number", "integer", "digits", "alphanum"]
ErrorKind = Literal["validation_failed", "invalid_configuration", "remote_unavailable"]


@dataclass(frozen=True)
class ConstraintDef:
    kind: str
    params: dict[str, Any] = field(default_factory=dict)
    message: str | None = None

    def with_message(self, message: str | None) -> ConstraintDef:
        """Return a copy carrying a custom failure message."""
        return replace(self, message=message)

    @property
    def name(self) -> str:
        """Hint name in the client-side validation vocabulary."""
        bound = str(self.params.get("bound", "")).strip().lower()
        if self.kind == "length":
            return {"min": "minlength", "max": "maxlength", "range": "length"}.get(bound, "length")
        if self.kind == "value":
            return bound if bound in ("min", "max", "range") else "value"
        if self.kind == "regex":
            return "pattern"
        return self.kind

    def describe(self) -> dict[str, Any]:
        return {
            "constraint": self.name,
            "kind": self.kind,
            "params": dict(self.params),
            "message": self.message,
        }


@dataclass(frozen=True)
class ValidationResult:
    field: str
    constraint: str
    passed: bool
    message: str | None = None
    error_kind: ErrorKind | None = None

    def __str__(self) -> str:
        if self.passed:
            return f"PASS: [{self.constraint}] {self.field}"
        return f"FAIL: [{self.constraint}] {self.field} - {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "constraint": self.constraint,
            "passed": self.passed,
            "message": self.message,
            "error_kind": self.error_kind,
        }

    @classmethod
    def ok(cls, field_id: str, constraint: str = "all") -> ValidationResult:
        return cls(field=field_id, constraint=constraint, passed=True)
