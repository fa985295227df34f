"""zenvalidator - server-side form field constraints."""

__version__ = "0.1.0"
