"""Error taxonomy shared by every layer.

Each error carries a message fit to show the user as is. Callers at the
presentation boundary catch ``WorkbenchError`` and report it; nothing in the
core retries.
"""


class WorkbenchError(Exception):
    """Base class for all user-facing failures."""


class DecodeError(WorkbenchError):
    """Malformed JSON in the store file or in an imported collection."""


class StoreIOError(WorkbenchError):
    """The store file could not be read or written."""


class RequestBuildError(WorkbenchError):
    """The method/URL/header combination cannot form a request."""


class TransportError(WorkbenchError):
    """DNS, connection or timeout failure before a response arrived."""


class ReadError(WorkbenchError):
    """The response body could not be read after headers were received."""


class QueryError(WorkbenchError):
    """A JSONPath expression could not be parsed or evaluated."""


class ConfigError(WorkbenchError):
    """The configuration file is malformed or holds invalid values."""
