# file: furet/errors.py

"""
Root of the furet exception hierarchy.

Every module defines its own error classes; all of them inherit from
FuretError so the command line front end can report any failure uniformly.
"""


class FuretError(Exception):
    """Base exception for all furet errors."""
    pass


class ConfigurationError(FuretError):
    """Raised when configuration values are missing or invalid."""
    pass
