"""Exceptions raised inside constraint evaluation.

Neither escapes `ConstraintSet.validate`; the engine folds them into
`ValidationResult.error_kind`.
"""

from __future__ import annotations


class InvalidConfigurationError(ValueError):
    """A constraint's parameters cannot be evaluated (bad regex, unknown bound, ...)."""


class RemoteUnavailableError(RuntimeError):
    """A remote validation endpoint could not be reached."""
