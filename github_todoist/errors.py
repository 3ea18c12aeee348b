"""Exceptions raised across the sync."""


class ConfigurationError(ValueError):
    """Invalid configuration value."""


class MissingConfigurationError(ConfigurationError):
    """A required setting is missing or blank."""


class SnapshotFetchError(Exception):
    """The open-PR search could not be completed.

    Raised instead of returning an empty list so callers never mistake
    "could not tell" for "nothing is open".
    """


class DetailFetchError(Exception):
    """Detail for a single pull request could not be fetched."""
