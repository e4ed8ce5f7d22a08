# errors.py
# Exceptions raised by the release feed


class FeedError(Exception):
    """Base class for release feed errors."""


class ConfigError(FeedError):
    """A configuration value is missing or invalid."""


class UnsupportedFormatError(FeedError):
    """The requested feed format is not supported by the serializer."""


class PersistenceFailure(FeedError):
    """The cache artifact could not be written or read back."""
