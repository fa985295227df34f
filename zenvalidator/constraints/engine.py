from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Mapping

from ..config import EngineConfig
from ..errors import InvalidConfigurationError, RemoteUnavailableError
from .predicates import HANDLERS, ConstraintContext, FieldProvider, ValidationContext, is_empty
from .http import HttpCaller, UrllibHttpCaller
from .schema import ConstraintDef, ValidationResult

logger = logging.getLogger(__name__)


class ConstraintSet:
    """Ordered constraints per field, evaluated against submitted values."""

    def __init__(
        self,
        config: EngineConfig | None = None,
        *,
        http: HttpCaller | None = None,
        titles: Mapping[str, str] | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.http: HttpCaller = http or UrllibHttpCaller(self.config.user_agent)
        self.titles: dict[str, str] = dict(titles or {})
        self._constraints: dict[str, list[ConstraintDef]] = {}

    def register(self, field_id: str, constraint: ConstraintDef) -> ConstraintSet:
        self._constraints.setdefault(field_id, []).append(constraint)
        return self

    def unregister(self, field_id: str, kind: str | None = None) -> None:
        """Drop all constraints for a field, or only those of `kind`."""
        if kind is None:
            self._constraints.pop(field_id, None)
            return
        remaining = [c for c in self._constraints.get(field_id, []) if c.kind != kind]
        if remaining:
            self._constraints[field_id] = remaining
        else:
            self._constraints.pop(field_id, None)

    def fields(self) -> list[str]:
        return list(self._constraints)

    def constraints_for(self, field_id: str) -> list[ConstraintDef]:
        return list(self._constraints.get(field_id, []))

    def describe(self) -> dict[str, list[dict[str, Any]]]:
        """Kind-specific hints per field, for client-side adapters."""
        return {f: [c.describe() for c in cs] for f, cs in self._constraints.items()}

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------

    def check(
        self,
        field_id: str,
        value: Any,
        context: FieldProvider | None = None,
    ) -> list[ValidationResult]:
        """Evaluate every constraint on `field_id`, one result each, in registration order."""
        if field_id not in self._constraints:
            logger.warning("Validation requested for unregistered field %r", field_id)
            return [
                ValidationResult(
                    field=field_id,
                    constraint="unregistered",
                    passed=False,
                    message=f"Field {field_id!r} has no registered constraints",
                    error_kind="invalid_configuration",
                )
            ]

        if context is None:
            context = ValidationContext.from_values({field_id: value}, self.titles)
        ctx = self._context(context)
        return [self._evaluate(field_id, c, value, ctx) for c in self._constraints[field_id]]

    def validate(
        self,
        field_id: str,
        value: Any,
        context: FieldProvider | None = None,
    ) -> ValidationResult:
        """First failing result for `field_id`, or a passing one."""
        for result in self.check(field_id, value, context):
            if not result.passed:
                return result
        return ValidationResult.ok(field_id)

    def validate_all(
        self,
        values: Mapping[str, Any],
        context: FieldProvider | None = None,
    ) -> dict[str, list[ValidationResult]]:
        """
        Evaluate every registered field against `values`.

        Fields missing from `values` are validated as empty. Fields carrying a
        remote constraint run concurrently; each field's list is written by a
        single worker.
        """
        submitted = {**dict.fromkeys(self._constraints), **values}
        if context is None:
            context = ValidationContext.from_values(submitted, self.titles)
        ctx = self._context(context)

        results: dict[str, list[ValidationResult]] = {}
        remote_fields = [
            f for f, cs in self._constraints.items() if any(c.kind == "remote" for c in cs)
        ]

        if len(remote_fields) > 1:
            with ThreadPoolExecutor(max_workers=min(self.config.max_workers, len(remote_fields))) as executor:
                futures = {
                    f: executor.submit(self._evaluate_field, f, values.get(f), ctx) for f in remote_fields
                }
                for f, future in futures.items():
                    results[f] = future.result()

        for f in self._constraints:
            if f not in results:
                results[f] = self._evaluate_field(f, values.get(f), ctx)

        # Registration order, regardless of completion order.
        return {f: results[f] for f in self._constraints}

    def errors(
        self,
        values: Mapping[str, Any],
        context: FieldProvider | None = None,
    ) -> dict[str, list[ValidationResult]]:
        """Like `validate_all`, keeping only fields with failures (and only the failures)."""
        failures: dict[str, list[ValidationResult]] = {}
        for f, results in self.validate_all(values, context).items():
            failed = [r for r in results if not r.passed]
            if failed:
                failures[f] = failed
        return failures

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _context(self, fields: FieldProvider) -> ConstraintContext:
        return ConstraintContext(
            fields=fields,
            config=self.config,
            http=self.http,
            translator=getattr(fields, "translator", None),
        )

    def _evaluate_field(self, field_id: str, value: Any, ctx: ConstraintContext) -> list[ValidationResult]:
        return [self._evaluate(field_id, c, value, ctx) for c in self._constraints[field_id]]

    def _evaluate(
        self,
        field_id: str,
        constraint: ConstraintDef,
        value: Any,
        ctx: ConstraintContext,
    ) -> ValidationResult:
        name = constraint.name
        handler = HANDLERS.get(constraint.kind)
        if handler is None:
            return self._invalid(field_id, name, f"Unknown constraint kind {constraint.kind!r}")

        if handler.vacuous and is_empty(value):
            return ValidationResult.ok(field_id, name)

        try:
            outcome = handler.evaluate(constraint, value, field_id, ctx)
            if outcome.passed:
                return ValidationResult.ok(field_id, name)
            message = outcome.message or constraint.message or handler.default_message(constraint, ctx)
        except InvalidConfigurationError as e:
            return self._invalid(field_id, name, str(e))
        except RemoteUnavailableError as e:
            logger.warning("Remote validation for %r unavailable: %s", field_id, e)
            if self.config.remote_unavailable == "pass":
                return ValidationResult(field=field_id, constraint=name, passed=True, error_kind="remote_unavailable")
            try:
                message = constraint.message or handler.default_message(constraint, ctx)
            except InvalidConfigurationError as config_error:
                return self._invalid(field_id, name, str(config_error))
            return ValidationResult(
                field=field_id,
                constraint=name,
                passed=False,
                message=message,
                error_kind="remote_unavailable",
            )
        except Exception as e:
            logger.exception("Constraint %s on %r raised", name, field_id)
            return self._invalid(field_id, name, f"{type(e).__name__}: {e}")

        return ValidationResult(
            field=field_id,
            constraint=name,
            passed=False,
            message=message,
            error_kind="validation_failed",
        )

    @staticmethod
    def _invalid(field_id: str, constraint: str, detail: str) -> ValidationResult:
        logger.warning("Invalid %s constraint on %r: %s", constraint, field_id, detail)
        return ValidationResult(
            field=field_id,
            constraint=constraint,
            passed=False,
            message=detail,
            error_kind="invalid_configuration",
        )
