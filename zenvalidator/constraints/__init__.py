"""Field constraint engine (constraints as data, evaluation as handlers)."""

from .builders import equal_to, length, regex, remote, required, type_of, value
from .engine import ConstraintSet
from .load import load_constraint_set
from .messages import DictTranslator, Translator
from .predicates import ValidationContext, parse_int_or_default, register_kind
from .schema import ConstraintDef, ValidationResult

__all__ = [
    "ConstraintDef",
    "ConstraintSet",
    "DictTranslator",
    "Translator",
    "ValidationContext",
    "ValidationResult",
    "equal_to",
    "length",
    "load_constraint_set",
    "parse_int_or_default",
    "regex",
    "register_kind",
    "remote",
    "required",
    "type_of",
    "value",
]
