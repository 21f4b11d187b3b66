"""Abstract base class for paste cache data access objects (DAOs).

The cache is a best-effort fast path in front of the Mirror Store. It is never
authoritative: any component may evict an entry speculatively, and every cache
error must be survivable by falling back to the Mirror Store.
"""

from abc import ABC, abstractmethod

from cloudpaste.models import Paste


class PasteCacheBaseDAO(ABC):
    """Interface for paste cache data access objects (DAOs)

    Methods:
        get(url: str, **kwargs) -> Paste:
            Raises CacheMissError if the paste is not cached.

        set(paste: Paste, ttl: int, **kwargs) -> None:
            Cache a paste for `ttl` seconds.
            Raises CachePutError if the write fails.

        delete(url: str, **kwargs) -> bool:
            Evict a paste. Returns False if nothing was cached.
    """

    @abstractmethod
    def get(self, url: str, **kwargs) -> Paste:
        pass

    @abstractmethod
    def set(self, paste: Paste, ttl: int, **kwargs) -> None:
        pass

    @abstractmethod
    def delete(self, url: str, **kwargs) -> bool:
        pass
