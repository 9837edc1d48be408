"""
XAN Exceptions

Package-wide base exception classes.
"""


class XanException(Exception):
    """Base exception for the governed token."""
    pass


class ConfigurationError(XanException):
    """Configuration error."""
    pass
