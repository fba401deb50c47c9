"""
Exceptions raised by metacache

None of these are retried internally, retrying (if wanted) is up to the caller.
"""


class MetacacheError(Exception):
    pass


class InvalidKeyError(MetacacheError, KeyError):
    """Raised when trying to store a value under the absent key (None)"""


class NotFoundError(MetacacheError, LookupError):
    """Raised when a key is known neither to the cache nor to the record store"""


class PersistenceError(MetacacheError):
    """Raised by a record store when a read or write could not be completed"""


class StartupError(MetacacheError):
    """Raised when the cache could not be bootstrapped from the record store"""
