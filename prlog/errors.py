"""Error taxonomy for prlog.

Every error propagates to the command line, which prints it and exits with
the error's ``exit_code``. Nothing here is recovered internally.
"""


class PrlogError(Exception):
    """Base class for all prlog errors."""

    exit_code = 1


class ConfigError(PrlogError):
    """Invalid configuration or malformed input data."""

    exit_code = 2


class ResolutionError(PrlogError):
    """The commit range or branch cannot be determined."""

    exit_code = 3


class TraversalError(PrlogError):
    """A commit range yields no usable commit enumeration.

    ``empty`` is True when git accepted the range but it contains no commits,
    which callers may treat as a legitimate "nothing to release" case.
    """

    exit_code = 4

    def __init__(self, message: str, empty: bool = False):
        super().__init__(message)
        self.empty = empty


class FetchError(PrlogError):
    """A pull request provider call failed."""

    exit_code = 5
