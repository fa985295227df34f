"""Default failure messages and the translation hook.

Templates use `str.format` placeholders (`{min}`, `{max}`, `{title}`) so a
translated catalogue can reorder them. Keys keep the `ZenValidator.*` names
already used by existing translation files.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol

logger = logging.getLogger(__name__)

# key -> English default
DEFAULT_MESSAGES: dict[str, str] = {
    "ZenValidator.REQUIRED": "This field is required",
    "ZenValidator.MINLENGTH": "This value is too short. It should have {min} characters or more",
    "ZenValidator.MAXLENGTH": "This value is too long. It should have {max} characters or less",
    "ZenValidator.RANGELENGTH": "This value length is invalid. It should be between {min} and {max} characters long",
    "ZenValidator.MIN": "This value should be greater than or equal to {min}",
    "ZenValidator.MAX": "This value should be less than or equal to {max}",
    "ZenValidator.RANGE": "This value should be between {min} and {max}",
    "ZenValidator.REGEXP": "This value seems to be invalid",
    "ZenValidator.REMOTE": "This value seems to be invalid",
    "ZenValidator.URL": "This value should be a valid URL",
    "ZenValidator.EMAIL": "This value should be a valid email",
    "ZenValidator.NUMBER": "This value should be a number",
    "ZenValidator.INTEGER": "This value should be a number",
    "ZenValidator.DIGITS": "This value should be a number",
    "ZenValidator.ALPHANUM": "This value should be alphanumeric",
    "ZenValidator.EQUALTO": 'This value should be the same as the field "{title}"',
    "ZenValidator.INVALID_CONFIGURATION": "This field cannot be validated",
}


class Translator(Protocol):
    """Localization provider."""

    def translate(self, key: str, default: str) -> str | None:
        """Return the localized template for `key`, or None to use `default`."""
        ...


class DictTranslator:
    """Translator backed by a plain key -> template mapping."""

    def __init__(self, catalogue: Mapping[str, str]) -> None:
        self._catalogue = dict(catalogue)

    def translate(self, key: str, default: str) -> str | None:
        return self._catalogue.get(key)


def render(key: str, translator: Translator | None = None, **params: Any) -> str:
    """Resolve `key` through `translator` (English fallback) and fill placeholders."""
    default = DEFAULT_MESSAGES.get(key, key)
    template = translator.translate(key, default) if translator is not None else None
    if not template:
        template = default

    try:
        return template.format(**params)
    except (KeyError, IndexError, ValueError) as e:
        logger.warning("Unusable message template for %s (%s); using English default", key, e)
        return default.format(**params)
