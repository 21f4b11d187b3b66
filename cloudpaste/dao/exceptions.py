"""Exceptions related to Data Access Objects (DAO) operations.

Classes:
    DAOError:
        Generic base class for DAO-related exceptions.

    PasteNotFoundError:
        Raised when a Paste is not found in the data store.

    PasteAlreadyExistsError:
        Raised when attempting to insert a Paste whose URL is already taken.

    LedgerEntryNotFoundError:
        Raised when a cleanup ledger entry is not found.

    DataStoreError:
        Raised when there is an error in the data store (e.g., connection issues, timeouts, OOM, etc.).

    CacheMissError:
        Raised when a requested cache entry is missing.

    CachePutError:
        Raised when writing or updating a cache entry fails.

Example:
    >>> from cloudpaste.dao.exceptions import PasteNotFoundError
    >>> raise PasteNotFoundError("Paste with url 'abc123' not found.")
    Traceback (most recent call last):
        ...
    cloudpaste.dao.exceptions.PasteNotFoundError: Paste with url 'abc123' not found.
"""


class DAOError(Exception):
    """Generic base class for DAO-related exceptions."""

    pass


class PasteNotFoundError(DAOError):
    """Exception raised when a Paste is not found in the data store."""

    pass


class PasteAlreadyExistsError(DAOError):
    """Exception raised when attempting to insert a Paste which already exists in the data store."""

    pass


class LedgerEntryNotFoundError(DAOError):
    """Exception raised when a cleanup ledger entry is not found in the data store."""

    pass


class DataStoreError(DAOError):
    """Exception raised when there is an error in the data store.

    e.g. connection issues, timeouts, OOM, etc.
    Callers retry through their own mechanism (message requeue, next sweep).
    """

    pass


class CacheMissError(DAOError):
    """Exception raised when a requested cache entry is missing."""

    pass


class CachePutError(DAOError):
    """Exception raised when writing or updating a cache entry fails."""

    pass
