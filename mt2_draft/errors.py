"""
mt2_draft/errors.py
Exception taxonomy for the draft scoring core.
"""


class DraftError(Exception):
    """Base class for all draft assistant errors"""


class NotFound(DraftError, LookupError):
    """An unknown card or champion id was requested"""

    def __init__(self, identifier, kind: str = "card"):
        self.identifier = identifier
        self.kind = kind
        super().__init__(f"{kind} '{identifier}' not found")


class UnknownChampion(NotFound):
    """set_champion was called with an id outside the roster"""

    def __init__(self, identifier):
        super().__init__(identifier, kind="champion")


class InvalidContext(DraftError, ValueError):
    """A scoring context violated the caller contract (e.g. covenant out of range)"""


class RuleDefinitionError(DraftError, ValueError):
    """Rule data references an unregistered keyword or condition"""


class ConfigurationError(DraftError):
    """A feature was used without the settings it needs"""
