"""Exception types raised by dreamdup."""


class DreamDupError(Exception):
    """Base class for dreamdup errors."""

    pass


class StoreError(DreamDupError):
    """Raised when the keyword corpus cannot be fetched."""

    pass


class ScorerUnavailableError(DreamDupError):
    """Raised when a similarity backend cannot produce scores."""

    pass


class ConfigError(DreamDupError):
    """Raised on invalid configuration values."""

    pass
