"""Domain errors.

All of them are ``ValueError`` subclasses so routers can keep handling
service failures with a single ``except ValueError``.
"""


class InvalidFormatError(ValueError):
    """A clock time string is not ``H:MM`` or ``HH:MM``."""


class MissingTemplateError(ValueError):
    """An invoice was requested but no active template is available."""


class MissingSettingsError(ValueError):
    """An invoice was requested before contractor settings exist."""
