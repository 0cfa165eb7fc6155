"""
Exceptions raised by strix.
"""


class StrixError(Exception):
    """Base class for everything strix raises on purpose."""


class ConfigError(StrixError, ValueError):
    """Bad scan configuration, e.g. a filter regex that won't compile."""


class InputFileError(StrixError, OSError):
    """The input file is missing or can't be read."""

    def __init__(self, path, reason):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason
