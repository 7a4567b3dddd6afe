"""Exception types raised across the package."""

from __future__ import annotations


class NationwideReportError(Exception):
    """Base class for every error raised by nationwide-report."""


class LoadError(NationwideReportError):
    """The location-directory cache is missing, corrupt, or unreadable."""


class BuildError(NationwideReportError):
    """The reference dataset could not be turned into a directory."""


class PersistError(NationwideReportError):
    """A cache or ledger file could not be written."""


class MalformedRowError(NationwideReportError):
    """A raw input row is blank or too short to carry every referenced column."""


class ParseWarning(UserWarning):
    """A numeric cell could not be parsed and was replaced by 0."""
