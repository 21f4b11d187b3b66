"""Abstract base class for Paste data access objects (DAOs).

This class establishes a consistent contract for the paste stores (Primary and
Mirror), regardless of the underlying storage mechanism (e.g., Redis, MySQL,
MongoDB). The cleanup pipeline and the read path depend only on this
interface, never on a concrete store.

Responsibilities:
    - Provide an interface for inserting, retrieving and deleting Paste objects.
    - Provide an atomic mark-read-if-unread update for burn-after-read pastes.
    - Standardize error handling across multiple data store implementations.

Example:
    Typical usage with a datastore-specific implementation:

        >>> from cloudpaste.models import Paste, ExpirationPolicy
        >>> from cloudpaste.dao.redis import PasteRedisDAO

        >>> dao = PasteRedisDAO(...)

        >>> paste = Paste(
        ...     url='a1b2c3d4',
        ...     content='hello world',
        ...     created_at=datetime.now(UTC),
        ...     expiration_policy=ExpirationPolicy.timed('1hour'),
        ... )
        >>> dao.insert(paste)

        >>> dao.get('a1b2c3d4').content
        'hello world'

        >>> dao.delete('a1b2c3d4')
        True
        >>> dao.delete('a1b2c3d4')  # already gone, still a success
        False
"""

from abc import ABC, abstractmethod

from cloudpaste.models import Paste


class PasteBaseDAO(ABC):
    """Interface for Paste data access objects (DAOs).

    Methods:
        insert(paste: Paste, **kwargs) -> PasteBaseDAO:
            Insert a new Paste into the data store.
            Raises PasteAlreadyExistsError if the url is taken.
            Raises DataStoreError on connection or write failure.

        get(url: str, **kwargs) -> Paste:
            Retrieve a Paste by url.
            Raises PasteNotFoundError if the entry does not exist.
            Raises DataStoreError on connection or read failure.

        delete(url: str, **kwargs) -> bool:
            Delete a Paste. Deleting a missing Paste is NOT an error.
            Raises DataStoreError on connection or write failure.

        mark_read(url: str, **kwargs) -> bool:
            Atomically mark a Paste as read if it is still unread.
            Raises PasteNotFoundError if the entry does not exist.
            Raises DataStoreError on connection or write failure.

        count(increment: bool, **kwargs) -> int:
            Return (and optionally increment) the store's paste counter.
            Raises DataStoreError on connection or read failure.

    Subclassing:
        Datastore-specific implementations (e.g., PasteRedisDAO or
        PasteMirrorRedisDAO) must extend this class and implement all
        abstract methods.
    """

    @abstractmethod
    def insert(self, paste: Paste, **kwargs) -> 'PasteBaseDAO':
        """Insert a new Paste into the data store.

        Args:
            paste (Paste):
                The Paste instance to be inserted.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            PasteBaseDAO: self (for method chaining)

        Raises:
            PasteAlreadyExistsError:
                If a Paste with the same url already exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def get(self, url: str, **kwargs) -> Paste:
        """Retrieve a Paste from the data store by its url.

        Raises:
            PasteNotFoundError:
                If no Paste with the given url exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def delete(self, url: str, **kwargs) -> bool:
        """Delete a Paste from the data store.

        Deletion is idempotent: a Paste which was already removed (e.g. by a
        previous, partially failed cleanup sweep) counts as a success.

        Returns:
            bool: True if a record was removed, False if it was already missing.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def mark_read(self, url: str, **kwargs) -> bool:
        """Mark a Paste as read, but only if it is still unread.

        The check and the update must be a single atomic operation in the data
        store, so that exactly one of many concurrent readers wins.

        Returns:
            bool: True if this call flipped the flag, False if it was already set.

        Raises:
            PasteNotFoundError:
                If no Paste with the given url exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def count(self, increment: bool = False, **kwargs) -> int:
        """Retrieve the current counter value from the data store.

        Args:
            increment (bool):
                If True, increment the counter by 1 before returning the value.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass
