"""
Error taxonomy for the link store.

Only ValidationError and CodeGenerationError escape to callers of the
store. Persistence and parse errors are logged where they happen and
the operation carries on with in-memory state.
"""


class ShortLinkError(Exception):
    """Base class for all link store errors"""


class ValidationError(ShortLinkError, ValueError):
    """Rejected input, e.g. a URL that is too long or cannot be stored"""


class CodeGenerationError(ShortLinkError):
    """Every candidate short code collided with an existing one"""


class PersistenceError(ShortLinkError):
    """Reading or writing the durable link file failed"""


class ParseError(ShortLinkError, ValueError):
    """A stored record could not be decoded"""

    def __init__(self, message: str, line: str = ""):
        super().__init__(message)
        self.line = line
